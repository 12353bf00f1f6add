"""配置加载工具，集中管理仓内/环境参数。"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Sequence, Tuple

import yaml
from pydantic import BaseModel, Field

CONFIG_ENV_KEY = "STYLERECON_CONFIG_PATH"


class SamplingConfig(BaseModel):
    """帧采样参数，默认 12 帧与原型界面保持一致。"""

    count: int = Field(default=12, ge=1)
    jpeg_quality: int = Field(default=80, ge=1, le=100)
    pace_seconds: float = Field(default=0.0, ge=0.0)


class AnalysisConfig(BaseModel):
    """风格分析器选择，目前仅有 demo 占位实现。"""

    analyzer: str = "demo"


class VisionConfig(BaseModel):
    """Gemini 视觉增强参数。"""

    enabled: bool = False
    model: str = "gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    api_key: str = ""
    timeout_s: float = Field(default=60.0, gt=0)
    instruction: Optional[str] = None

    def is_ready(self) -> bool:
        """开关打开且存在非空密钥时才调用视觉接口。"""

        return self.enabled and bool(self.api_key.strip())


class ComposeConfig(BaseModel):
    hint_chars: int = Field(default=300, ge=0)
    suffix_tokens: List[str] = Field(default_factory=lambda: ["--sora-recon-v4", "--broadcast-mode"])


class ReconConfig(BaseModel):
    """聚合各阶段配置。"""

    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    vision: VisionConfig = Field(default_factory=VisionConfig)
    compose: ComposeConfig = Field(default_factory=ComposeConfig)
    raw: Dict[str, Any] = Field(default_factory=dict, description="原始配置字典，便于调试。")

    def model_post_init(self, __context: Any) -> None:  # type: ignore[override]
        # 保留原始配置便于后续 diff/日志输出
        if not self.raw:
            self.raw = self.to_raw_dict()

    def to_raw_dict(self) -> Dict[str, Any]:
        """导出基础 dict，密钥不落盘、不进日志。"""

        vision = self.vision.model_dump()
        vision["api_key"] = "***" if vision.get("api_key") else ""
        return {
            "sampling": self.sampling.model_dump(),
            "analysis": self.analysis.model_dump(),
            "vision": vision,
            "compose": self.compose.model_dump(),
        }


def _default_config_path() -> Path:
    return Path(__file__).resolve().parents[3] / "configs" / "baseline.yaml"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError(f"配置文件 {path} 内容需为字典")
        return data


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


ENV_OVERRIDE_MAP: Dict[str, Tuple[Sequence[str], Callable[[str], Any]]] = {
    "STYLERECON_SAMPLE_COUNT": (("sampling", "count"), int),
    "STYLERECON_JPEG_QUALITY": (("sampling", "jpeg_quality"), int),
    "STYLERECON_VISION_ENABLED": (("vision", "enabled"), _parse_bool),
    "STYLERECON_VISION_MODEL": (("vision", "model"), str),
    "GEMINI_API_KEY": (("vision", "api_key"), str),
}


def _apply_env_overrides(data: MutableMapping[str, Any], env: Mapping[str, str]) -> None:
    for env_key, (path, caster) in ENV_OVERRIDE_MAP.items():
        if env_key in env:
            _set_nested_value(data, path, caster(env[env_key]))


def _set_nested_value(target: MutableMapping[str, Any], path: Sequence[str], value: Any) -> None:
    cursor: MutableMapping[str, Any] = target
    *parents, last = path
    for key in parents:
        if key not in cursor or not isinstance(cursor[key], MutableMapping):
            cursor[key] = {}
        cursor = cursor[key]  # type: ignore[assignment]
    cursor[last] = value


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """递归合并两个字典，override 优先。"""

    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    path: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ReconConfig:
    """加载配置：优先显式路径，其次环境变量，最后回退默认 baseline。

    overrides 在环境变量之后合并，供服务端持久化设置使用。
    """

    env_map = os.environ if env is None else env
    config_path = path or env_map.get(CONFIG_ENV_KEY)
    target_path = Path(config_path).expanduser() if config_path else _default_config_path()
    data = _load_yaml(target_path)
    _apply_env_overrides(data, env_map)
    if overrides:
        data = deep_merge(data, overrides)

    cfg = ReconConfig.model_validate(data)
    return cfg
