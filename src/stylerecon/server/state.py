"""Shared runtime state for the server."""

from __future__ import annotations

from .events import EventBroadcaster
from .settings_store import build_config
from .tasks import AnalysisTaskManager

broadcaster = EventBroadcaster()
task_manager = AnalysisTaskManager(broadcaster, build_config)
