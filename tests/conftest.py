"""共享测试替身：用内存帧模拟可定位的媒体源。"""

from pathlib import Path
from typing import List, Optional

import numpy as np
import pytest

from stylerecon.core import MediaInfo


class FakeSource:
    def __init__(self, duration: float = 9.0, width: int = 64, height: int = 36, fps: float = 30.0, fail_at: Optional[float] = None):
        self.info = MediaInfo(path=Path("fake.mp4"), duration=duration, width=width, height=height, fps=fps)
        self.seeks: List[float] = []
        self.position = 0.0
        self.closed = False
        self._fail_at = fail_at

    def seek(self, timestamp):
        self.seeks.append(timestamp)
        self.position = timestamp

    def read(self):
        if self._fail_at is not None and self.position >= self._fail_at:
            return None
        value = int(self.position * 10) % 255
        return np.full((self.info.height, self.info.width, 3), value, dtype=np.uint8)

    def close(self):
        self.closed = True


@pytest.fixture
def make_source():
    return FakeSource
