"""Server-Sent Events helpers for analysis progress."""

from __future__ import annotations

import asyncio
import json
import threading
from typing import Any, AsyncGenerator, Dict, List

from fastapi import Request

KEEPALIVE_SECONDS = 15.0


class EventBroadcaster:
    """Fan-out of progress events to SSE subscribers.

    ``publish`` is called from the worker thread; the latest event per video is
    kept so that a late subscriber immediately sees the current progress.
    """

    def __init__(self) -> None:
        self._subscribers: set[asyncio.Queue[Dict[str, Any]]] = set()
        self._latest: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None

    def set_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def latest(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._latest.values())

    async def subscribe(self) -> asyncio.Queue[Dict[str, Any]]:
        queue: asyncio.Queue[Dict[str, Any]] = asyncio.Queue()
        with self._lock:
            self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[Dict[str, Any]]) -> None:
        with self._lock:
            self._subscribers.discard(queue)

    def publish(self, event: str, payload: Dict[str, Any]) -> None:
        message = {"event": event, "payload": payload}
        with self._lock:
            video_id = payload.get("video_id")
            if video_id:
                self._latest[video_id] = message
            queues = list(self._subscribers)
            loop = self._loop
        if loop is None:
            return
        for queue in queues:
            asyncio.run_coroutine_threadsafe(queue.put(message), loop)

    def forget(self, video_id: str) -> None:
        with self._lock:
            self._latest.pop(video_id, None)


def format_sse(message: Dict[str, Any]) -> str:
    data = json.dumps(message.get("payload", {}), ensure_ascii=False)
    return f"event: {message.get('event', 'message')}\ndata: {data}\n\n"


async def stream_events(request: Request, broadcaster: EventBroadcaster) -> AsyncGenerator[str, None]:
    queue = await broadcaster.subscribe()
    try:
        for message in broadcaster.latest():
            yield format_sse(message)
        while True:
            if await request.is_disconnected():
                break
            try:
                message = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                yield format_sse(message)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
    finally:
        broadcaster.unsubscribe(queue)
