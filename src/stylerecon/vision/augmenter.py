"""视觉增强：挑选首/中/尾三帧交给视觉模型，把返回文本写入 style.vision_text。"""

from __future__ import annotations

from typing import Protocol, Sequence, Tuple

from stylerecon.core import SampledFrame, StyleDescriptor, get_logger

from .client import VisionRequestError
from .prompts import BROADCAST_REALISM_INSTRUCTION

logger = get_logger(__name__)


class VisionBackend(Protocol):
    def describe(self, frames: Sequence[SampledFrame], instruction: str) -> str:
        ...


def select_frames(frames: Sequence[SampledFrame]) -> Tuple[SampledFrame, SampledFrame, SampledFrame]:
    """取第一帧、中间帧（len // 2）与最后一帧；帧数不足 3 时允许重复。"""

    if not frames:
        raise ValueError("select_frames requires at least one frame")
    return frames[0], frames[len(frames) // 2], frames[-1]


def augment(
    frames: Sequence[SampledFrame],
    descriptor: StyleDescriptor,
    backend: VisionBackend,
    *,
    instruction: str | None = None,
) -> StyleDescriptor:
    """调用视觉模型补充风格文本。

    失败时记录日志并原样返回 descriptor，不重试；已增强过的描述不再重复请求。
    """

    if descriptor.is_augmented:
        logger.info("descriptor already carries vision text, skip augmentation")
        return descriptor

    selected = select_frames(frames)
    try:
        text = backend.describe(selected, instruction or BROADCAST_REALISM_INSTRUCTION)
    except VisionRequestError as exc:
        if exc.transient:
            logger.warning("vision augmentation skipped (transient): %s", exc)
        else:
            logger.error("vision augmentation skipped: %s", exc)
        return descriptor
    return descriptor.with_vision_text(text)
