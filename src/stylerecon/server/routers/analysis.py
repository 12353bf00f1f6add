"""Analysis endpoints and SSE progress stream."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from pydantic import BaseModel, Field

from ..events import stream_events
from ..state import broadcaster, task_manager
from ..tasks import read_result, read_status

router = APIRouter(prefix="/api", tags=["analysis"])


class AnalyzeRequest(BaseModel):
    video_id: str
    count: Optional[int] = Field(default=None, ge=1)
    vision: Optional[bool] = None


@router.post("/analyze")
def analyze(request: AnalyzeRequest) -> Dict[str, Any]:
    """Queue an analysis run for an uploaded video."""

    return task_manager.enqueue(request.video_id, count=request.count, vision=request.vision)


@router.post("/analyze/{video_id}/cancel")
def cancel(video_id: str) -> Dict[str, Any]:
    if not task_manager.cancel(video_id):
        raise HTTPException(status_code=404, detail="no pending analysis")
    return {"video_id": video_id, "status": "cancelling"}


@router.get("/analysis/{video_id}")
def get_analysis(video_id: str) -> Dict[str, Any]:
    status = read_status(video_id)
    if status is None:
        raise HTTPException(status_code=404, detail="no analysis for video")
    return {"status": status, "result": read_result(video_id)}


@router.get("/analysis/{video_id}/prompt", response_class=PlainTextResponse)
def get_prompt(video_id: str) -> str:
    result = read_result(video_id)
    if not result:
        raise HTTPException(status_code=404, detail="prompt not ready")
    return result["prompt"]


@router.get("/queue")
def queue_snapshot() -> Dict[str, Any]:
    return task_manager.snapshot()


@router.get("/events")
async def events(request: Request) -> StreamingResponse:
    """SSE channel for analysis progress."""

    return StreamingResponse(stream_events(request, broadcaster), media_type="text/event-stream")
