"""Step4: 提示词合成。"""

from .composer import (
    DEFAULT_HINT_CHARS,
    DEFAULT_SUFFIX_TOKENS,
    VISION_BLOCK_HEADER,
    VISION_HINT_LABEL,
    compose_prompt,
)

__all__ = [
    "DEFAULT_HINT_CHARS",
    "DEFAULT_SUFFIX_TOKENS",
    "VISION_BLOCK_HEADER",
    "VISION_HINT_LABEL",
    "compose_prompt",
]
