"""封装从视频文件到提示词的完整流程。"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from stylerecon.analysis import Analyzer, create_analyzer
from stylerecon.compose import compose_prompt
from stylerecon.core import ComposedPrompt, MediaInfo, ReconConfig, SampledFrame, StyleDescriptor, get_logger
from stylerecon.sampling import MediaSource, SampleProgress, open_media, raise_if_cancelled, sample_frames
from stylerecon.vision import GeminiVisionClient, VisionBackend, augment

logger = get_logger(__name__)


@dataclass(slots=True)
class AnalysisResult:
    """单次分析的产物，便于 CLI/服务端统一落盘。"""

    info: MediaInfo
    frames: List[SampledFrame]
    descriptor: StyleDescriptor
    prompt: ComposedPrompt

    def to_dict(self) -> Dict[str, Any]:
        return {
            "media": self.info.to_dict(),
            "frames": [{"index": frame.index, "timestamp": frame.timestamp} for frame in self.frames],
            "analysis": self.descriptor.to_dict(),
            "prompt": self.prompt.text,
            "vision_augmented": self.prompt.vision_augmented,
        }


def analyze_video(
    video_path: str | Path,
    config: ReconConfig,
    **kwargs: Any,
) -> AnalysisResult:
    """打开视频文件后执行 analyze_source，结束时释放句柄。"""

    source = open_media(video_path)
    try:
        return analyze_source(source, config, **kwargs)
    finally:
        source.close()


def analyze_source(
    source: MediaSource,
    config: ReconConfig,
    *,
    analyzer: Analyzer | None = None,
    vision_backend: VisionBackend | None = None,
    progress_callback: Callable[[SampleProgress], None] | None = None,
    cancel_event: Optional[threading.Event] = None,
) -> AnalysisResult:
    """主入口：采样 -> 风格描述 -> 可选视觉增强 -> 合成提示词。"""

    sampling = config.sampling
    frames = sample_frames(
        source,
        sampling.count,
        quality=sampling.jpeg_quality,
        pace_seconds=sampling.pace_seconds,
        cancel_event=cancel_event,
        progress_callback=progress_callback,
    )

    analyzer = analyzer or create_analyzer(config.analysis.analyzer)
    descriptor = analyzer.analyze(source.info)

    if config.vision.is_ready():
        # 采样刚结束时取消的任务不再发起视觉请求，请求返回后再检查一次
        raise_if_cancelled(cancel_event)
        backend = vision_backend or GeminiVisionClient.from_config(config.vision)
        descriptor = augment(frames, descriptor, backend, instruction=config.vision.instruction)
        raise_if_cancelled(cancel_event)
    elif config.vision.enabled:
        logger.info("vision augmentation enabled but no API key configured, skip")

    prompt = compose_prompt(
        descriptor,
        hint_chars=config.compose.hint_chars,
        suffix_tokens=config.compose.suffix_tokens,
    )
    return AnalysisResult(info=source.info, frames=frames, descriptor=descriptor, prompt=prompt)
