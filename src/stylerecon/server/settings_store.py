"""Persisted UI settings and the Gemini credential.

Settings overrides live in ``configs/override.yaml`` inside the workspace, the
API key in ``configs/secrets.json``; clients only ever see it masked.
"""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, Tuple

import yaml

from stylerecon.core import ReconConfig, load_config
from stylerecon.core.config import deep_merge

from .workspace import configs_dir

SECRET_PATHS: Tuple[Tuple[str, ...], ...] = (("vision", "api_key"),)
MASK = "***"


def override_path() -> Path:
    return configs_dir() / "override.yaml"


def secrets_path() -> Path:
    return configs_dir() / "secrets.json"


def load_effective_settings() -> Dict[str, Any]:
    """Override + secrets, merged on top of each other (baseline is applied by load_config)."""

    return deep_merge(_read_yaml(override_path()), _read_json(secrets_path()))


def build_config() -> ReconConfig:
    """Baseline config + env + persisted settings."""

    return load_config(overrides=load_effective_settings())


def load_settings_bundle() -> Dict[str, Any]:
    secrets = _read_json(secrets_path())
    config = build_config()
    settings = {
        "sampling": config.sampling.model_dump(),
        "vision": config.vision.model_dump(exclude={"instruction"}),
        "compose": config.compose.model_dump(),
    }
    for path in SECRET_PATHS:
        if _get_nested(settings, path):
            _set_nested(settings, path, MASK)
    return {
        "settings": settings,
        "override": _read_yaml(override_path()),
        "has_secrets": {".".join(path): bool(_get_nested(secrets, path)) for path in SECRET_PATHS},
        "vision_ready": config.vision.is_ready(),
    }


def update_settings(*, settings_patch: Dict[str, Any], secrets_patch: Dict[str, Any] | None = None) -> Dict[str, Any]:
    cleaned_patch, extracted = _extract_secrets(settings_patch)
    override = deep_merge(_read_yaml(override_path()), cleaned_patch)
    # 校验合并结果，非法值直接抛 ValidationError
    load_config(overrides=override)
    _write_yaml(override_path(), override)

    secrets = deep_merge(_read_json(secrets_path()), secrets_patch or {})
    secrets = deep_merge(secrets, extracted)
    _write_json(secrets_path(), _prune_empty(secrets))
    return load_settings_bundle()


def reset_settings() -> None:
    for path in (override_path(), secrets_path()):
        if path.exists():
            path.unlink()


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return data if isinstance(data, dict) else {}


def _write_yaml(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(payload, handle, allow_unicode=True, sort_keys=False)


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def _get_nested(source: Dict[str, Any], path: Iterable[str]) -> Any:
    cursor: Any = source
    for key in path:
        if not isinstance(cursor, dict) or key not in cursor:
            return None
        cursor = cursor[key]
    return cursor


def _set_nested(target: Dict[str, Any], path: Iterable[str], value: Any) -> None:
    cursor = target
    *parents, last = list(path)
    for key in parents:
        if key not in cursor or not isinstance(cursor[key], dict):
            cursor[key] = {}
        cursor = cursor[key]
    cursor[last] = value


def _extract_secrets(settings_patch: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    patch_copy = deepcopy(settings_patch)
    secrets: Dict[str, Any] = {}
    for path in SECRET_PATHS:
        *parents, last = path
        parent = _get_nested(patch_copy, parents)
        if not isinstance(parent, dict) or last not in parent:
            continue
        value = parent.pop(last)
        # 前端回传掩码时视为未修改
        if value not in (None, MASK):
            _set_nested(secrets, path, value)
    return patch_copy, secrets


def _prune_empty(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            nested = _prune_empty(value)
            if nested:
                cleaned[key] = nested
        elif value not in (None, ""):
            cleaned[key] = value
    return cleaned
