"""Settings and credential endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, ValidationError

from ..settings_store import load_settings_bundle, reset_settings, update_settings

router = APIRouter(prefix="/api/settings", tags=["settings"])


class SettingsPatch(BaseModel):
    settings: Dict[str, Any] = Field(default_factory=dict)
    secrets: Dict[str, Any] = Field(default_factory=dict)


@router.get("")
def get_settings() -> Dict[str, Any]:
    return load_settings_bundle()


@router.patch("")
def patch_settings(payload: SettingsPatch) -> Dict[str, Any]:
    try:
        return update_settings(settings_patch=payload.settings, secrets_patch=payload.secrets)
    except (ValidationError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/reset")
def reset_settings_overrides() -> Dict[str, Any]:
    reset_settings()
    return load_settings_bundle()
