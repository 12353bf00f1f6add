"""Analysis task queue and persistence."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
from pathlib import Path
import shutil
import threading
import time
from typing import Any, Callable, Deque, Dict, List, Optional

from stylerecon.core import ReconConfig, get_logger
from stylerecon.pipeline import AnalysisResult, analyze_video
from stylerecon.sampling import SampleProgress, SamplingCancelled

from .events import EventBroadcaster
from .workspace import analysis_dir, ensure_workspace_layout, videos_dir

logger = get_logger(__name__)


@dataclass(slots=True)
class AnalysisJob:
    video_id: str
    count: Optional[int] = None
    vision: Optional[bool] = None
    cancel_event: threading.Event = field(default_factory=threading.Event)


class AnalysisTaskManager:
    """Single-worker queue: one analysis runs at a time, progress goes to SSE."""

    def __init__(
        self,
        broadcaster: EventBroadcaster,
        config_factory: Callable[[], ReconConfig],
        *,
        autostart: bool = True,
    ) -> None:
        self._lock = threading.Lock()
        self._queue: Deque[AnalysisJob] = deque()
        self._active: Optional[AnalysisJob] = None
        self._broadcaster = broadcaster
        self._config_factory = config_factory
        self._worker: Optional[threading.Thread] = None
        ensure_workspace_layout()
        if autostart:
            self.start()

    def start(self) -> None:
        if self._worker is not None:
            return
        self._worker = threading.Thread(target=self._worker_loop, daemon=True)
        self._worker.start()

    def enqueue(self, video_id: str, *, count: Optional[int] = None, vision: Optional[bool] = None) -> Dict[str, Any]:
        if resolve_video_path(video_id) is None:
            return {"video_id": video_id, "status": "skipped", "message": "video not found"}
        with self._lock:
            if self._is_pending(video_id):
                return {"video_id": video_id, "status": "skipped", "message": "already queued"}
            clear_artifacts(video_id)
            self._queue.append(AnalysisJob(video_id=video_id, count=count, vision=vision))
            self._write_status(video_id, status="queued", progress=0.0, message="")
        self._publish_status(video_id)
        return {"video_id": video_id, "status": "queued"}

    def cancel(self, video_id: str) -> bool:
        """Cancel a queued job or signal the active one; returns False when nothing matched."""

        with self._lock:
            if self._active and self._active.video_id == video_id:
                self._active.cancel_event.set()
                return True
            for job in list(self._queue):
                if job.video_id == video_id:
                    self._queue.remove(job)
                    self._write_status(video_id, status="cancelled", progress=0.0, message="cancelled")
                    break
            else:
                return False
        self._publish_status(video_id)
        return True

    def is_busy(self, video_id: str) -> bool:
        with self._lock:
            return self._is_pending(video_id)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            pending = [job.video_id for job in self._queue]
            active = self._active.video_id if self._active else None
        statuses: Dict[str, Any] = {}
        root = analysis_dir()
        if root.exists():
            for path in root.glob("*/status.json"):
                payload = _read_json(path)
                if payload and payload.get("video_id"):
                    statuses[payload["video_id"]] = payload
        return {"queue": {"pending": pending, "active": active}, "statuses": statuses}

    def run_once(self) -> bool:
        """Pop and run one job in the calling thread; returns False when the queue is empty."""

        with self._lock:
            if self._active or not self._queue:
                return False
            job = self._queue.popleft()
            self._active = job
        try:
            self._run_job(job)
        finally:
            with self._lock:
                self._active = None
        return True

    def _worker_loop(self) -> None:
        while True:
            if not self.run_once():
                time.sleep(0.5)

    def _is_pending(self, video_id: str) -> bool:
        if self._active and self._active.video_id == video_id:
            return True
        return any(job.video_id == video_id for job in self._queue)

    def _run_job(self, job: AnalysisJob) -> None:
        video_id = job.video_id
        video_path = resolve_video_path(video_id)
        if video_path is None:
            self._write_status(video_id, status="error", progress=0.0, message="video not found")
            self._publish_status(video_id)
            return

        config = self._job_config(job)
        frames_dir = analysis_dir() / video_id / "frames"
        frames_dir.mkdir(parents=True, exist_ok=True)

        def progress_callback(event: SampleProgress) -> None:
            frame = event.frame
            (frames_dir / frame_filename(frame.index)).write_bytes(frame.data)
            self._write_status(video_id, status="running", progress=event.progress, message="")
            self._broadcaster.publish(
                "progress",
                {
                    "video_id": video_id,
                    "status": "running",
                    "progress": event.progress,
                    "frames": [frame_url(video_id, item.index) for item in event.frames],
                },
            )

        self._write_status(video_id, status="running", progress=0.0, message="")
        self._publish_status(video_id)
        try:
            result = analyze_video(
                video_path,
                config,
                progress_callback=progress_callback,
                cancel_event=job.cancel_event,
            )
        except SamplingCancelled:
            logger.info("analysis of %s cancelled", video_id)
            self._write_status(video_id, status="cancelled", progress=0.0, message="cancelled")
            self._publish_status(video_id)
            return
        except Exception as exc:
            logger.exception("analysis of %s failed", video_id)
            self._write_status(video_id, status="error", progress=0.0, message=str(exc))
            self._publish_status(video_id)
            return

        self._write_result(video_id, result)
        self._write_status(video_id, status="done", progress=1.0, message="")
        self._publish_status(video_id)

    def _job_config(self, job: AnalysisJob) -> ReconConfig:
        config = self._config_factory()
        updates: Dict[str, Any] = {}
        if job.count is not None:
            updates["sampling"] = config.sampling.model_copy(update={"count": job.count})
        if job.vision is not None:
            updates["vision"] = config.vision.model_copy(update={"enabled": job.vision})
        return config.model_copy(update=updates) if updates else config

    def _write_result(self, video_id: str, result: AnalysisResult) -> None:
        target = analysis_dir() / video_id
        payload = result.to_dict()
        payload["frames"] = [
            {"index": frame.index, "timestamp": frame.timestamp, "url": frame_url(video_id, frame.index)}
            for frame in result.frames
        ]
        _atomic_write_json(target / "analysis.json", payload)
        (target / "prompt.txt").write_text(result.prompt.text, encoding="utf-8")

    def _write_status(self, video_id: str, *, status: str, progress: float, message: str) -> None:
        payload = {
            "video_id": video_id,
            "status": status,
            "progress": max(0.0, min(1.0, float(progress))),
            "message": message,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        _atomic_write_json(analysis_dir() / video_id / "status.json", payload)

    def _publish_status(self, video_id: str) -> None:
        status = read_status(video_id)
        if not status:
            return
        result_path = f"analysis/{video_id}/analysis.json" if status.get("status") == "done" else None
        self._broadcaster.publish("status", {**status, "result_path": result_path})


def resolve_video_path(video_id: str) -> Optional[Path]:
    directory = videos_dir()
    if not directory.exists():
        return None
    for path in directory.iterdir():
        if path.is_file() and path.stem == video_id:
            return path
    return None


def clear_artifacts(video_id: str) -> None:
    """New upload or re-run: drop frames, report and prompt of the previous run."""

    target = analysis_dir() / video_id
    if target.exists():
        shutil.rmtree(target)


def read_status(video_id: str) -> Optional[Dict[str, Any]]:
    return _read_json(analysis_dir() / video_id / "status.json")


def read_result(video_id: str) -> Optional[Dict[str, Any]]:
    return _read_json(analysis_dir() / video_id / "analysis.json")


def frame_filename(index: int) -> str:
    return f"frame_{index:03d}.jpg"


def frame_url(video_id: str, index: int) -> str:
    return f"/static/analysis/{video_id}/frames/{frame_filename(index)}"


def _read_json(path: Path) -> Optional[Dict[str, Any]]:
    if not path.exists():
        return None
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


def _atomic_write_json(path: Path, payload: Dict[str, Any] | List[Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp_path.replace(path)
