"""采样阶段内部使用的结构体。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from stylerecon.core import SampledFrame


@dataclass(slots=True, frozen=True)
class SampleProgress:
    """每采到一帧发布一次的进度事件，frames 为截至当前的全部帧。"""

    frame: SampledFrame
    frames: Tuple[SampledFrame, ...]
    completed: int
    total: int

    @property
    def progress(self) -> float:
        return self.completed / self.total
