"""Step3: 可选的 Gemini 视觉增强。"""

from .augmenter import VisionBackend, augment, select_frames
from .client import GeminiVisionClient, VisionRequestError
from .prompts import BROADCAST_REALISM_INSTRUCTION

__all__ = [
    "BROADCAST_REALISM_INSTRUCTION",
    "GeminiVisionClient",
    "VisionBackend",
    "VisionRequestError",
    "augment",
    "select_frames",
]
