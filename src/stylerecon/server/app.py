"""FastAPI application factory and mounts."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .routers.analysis import router as analysis_router
from .routers.media import router as media_router
from .routers.settings import router as settings_router
from .state import broadcaster
from .workspace import analysis_dir, ensure_workspace_layout, videos_dir


@asynccontextmanager
async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
    broadcaster.set_loop(asyncio.get_running_loop())
    yield


def create_app() -> FastAPI:
    """Create the FastAPI app instance."""

    ensure_workspace_layout()
    app = FastAPI(title="StyleRecon Server", version="0.1.0", lifespan=_lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )

    app.include_router(media_router)
    app.include_router(analysis_router)
    app.include_router(settings_router)
    # configs/ holds the API key and must stay off the static routes
    app.mount("/static/videos", StaticFiles(directory=str(videos_dir())), name="videos")
    app.mount("/static/analysis", StaticFiles(directory=str(analysis_dir())), name="analysis")
    return app


app = create_app()
