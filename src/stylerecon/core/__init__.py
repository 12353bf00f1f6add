"""核心模块入口，聚合数据模型与配置加载工具供各步骤复用。"""

from .config import ReconConfig, VisionConfig, load_config
from .datamodels import (
    ComposedPrompt,
    MediaInfo,
    SampledFrame,
    Segment,
    SegmentKind,
    StyleDescriptor,
)
from .logging_utils import get_logger, setup_logging

__all__ = [
    "ComposedPrompt",
    "MediaInfo",
    "SampledFrame",
    "Segment",
    "SegmentKind",
    "StyleDescriptor",
    "ReconConfig",
    "VisionConfig",
    "load_config",
    "get_logger",
    "setup_logging",
]
