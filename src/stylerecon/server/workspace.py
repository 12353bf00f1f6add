"""Workspace paths and initialization helpers."""

from __future__ import annotations

import os
from pathlib import Path

WORKSPACE_ENV_KEY = "STYLERECON_WORKSPACE_ROOT"


def workspace_root() -> Path:
    env_value = os.getenv(WORKSPACE_ENV_KEY)
    if env_value:
        return Path(env_value).expanduser().resolve()
    return Path(__file__).resolve().parents[3] / "workspace"


def videos_dir() -> Path:
    return workspace_root() / "videos"


def analysis_dir() -> Path:
    return workspace_root() / "analysis"


def configs_dir() -> Path:
    return workspace_root() / "configs"


def ensure_workspace_layout() -> None:
    """Ensure workspace directories exist."""

    for path in (workspace_root(), videos_dir(), analysis_dir(), configs_dir()):
        path.mkdir(parents=True, exist_ok=True)
