"""Video upload, listing and eject endpoints."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List
import shutil

from fastapi import APIRouter, File, HTTPException, UploadFile

from stylerecon.sampling import VideoOpenError, probe_media

from ..state import broadcaster, task_manager
from ..tasks import clear_artifacts, read_status, resolve_video_path
from ..workspace import ensure_workspace_layout, videos_dir

router = APIRouter(prefix="/api", tags=["media"])


def _safe_filename(name: str | None) -> str:
    if not name:
        return ""
    return Path(name).name


def _media_payload(video_path: Path) -> Dict[str, Any]:
    video_id = video_path.stem
    try:
        info = probe_media(video_path)
    except VideoOpenError:
        info = None
    status = read_status(video_id) or {}
    return {
        "id": video_id,
        "name": video_path.name,
        "duration": info.duration if info else None,
        "width": info.width if info else None,
        "height": info.height if info else None,
        "video_url": f"/static/videos/{video_path.name}",
        "status": status.get("status", "idle"),
        "progress": status.get("progress"),
    }


def _list_media() -> List[Dict[str, Any]]:
    ensure_workspace_layout()
    paths = sorted(path for path in videos_dir().iterdir() if path.is_file() and not path.name.startswith("."))
    return [_media_payload(path) for path in paths]


@router.get("/media")
def list_media() -> List[Dict[str, Any]]:
    return _list_media()


@router.post("/media")
def upload_media(file: UploadFile = File(...)) -> Dict[str, Any]:
    """Store an uploaded video; a re-upload under the same name discards the previous session."""

    ensure_workspace_layout()
    filename = _safe_filename(file.filename)
    if not filename:
        raise HTTPException(status_code=400, detail="missing filename")
    video_id = Path(filename).stem
    if task_manager.is_busy(video_id):
        raise HTTPException(status_code=409, detail="analysis in progress")

    existing = resolve_video_path(video_id)
    if existing is not None:
        existing.unlink()
    clear_artifacts(video_id)
    broadcaster.forget(video_id)

    destination = videos_dir() / filename
    with destination.open("wb") as handle:
        shutil.copyfileobj(file.file, handle)
    file.file.close()
    return _media_payload(destination)


@router.delete("/media/{video_id}")
def eject_media(video_id: str) -> Dict[str, Any]:
    video_path = resolve_video_path(video_id)
    if video_path is None:
        raise HTTPException(status_code=404, detail="video not found")
    task_manager.cancel(video_id)
    if task_manager.is_busy(video_id):
        raise HTTPException(status_code=409, detail="analysis is being cancelled, retry shortly")
    video_path.unlink()
    clear_artifacts(video_id)
    broadcaster.forget(video_id)
    return {"id": video_id, "status": "ejected"}
