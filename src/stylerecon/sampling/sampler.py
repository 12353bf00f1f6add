"""均匀时间点帧采样。"""

from __future__ import annotations

import threading
import time
from typing import Callable, Iterator, List, Optional

import cv2
import numpy as np
from numpy.typing import NDArray

from stylerecon.core import SampledFrame, get_logger

from .loader import MediaSource
from .types import SampleProgress

logger = get_logger(__name__)


class FrameCaptureError(RuntimeError):
    """定位后读不到帧（媒体卡死或时长信息错误）。"""


class SamplingCancelled(RuntimeError):
    """采样过程中收到取消信号。"""


def sample_timestamps(duration: float, count: int) -> List[float]:
    """返回 count 个等间隔时间点：i * duration / count。"""

    if count < 1:
        raise ValueError("count must be >= 1")
    if duration <= 0:
        raise ValueError("duration must be positive")
    interval = duration / count
    return [index * interval for index in range(count)]


def encode_jpeg(frame: NDArray[np.uint8], quality: int = 80) -> bytes:
    success, buffer = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not success:
        raise FrameCaptureError("JPEG 编码失败")
    return buffer.tobytes()


def iter_samples(
    source: MediaSource,
    count: int,
    *,
    quality: int = 80,
    pace_seconds: float = 0.0,
    cancel_event: Optional[threading.Event] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[SampleProgress]:
    """逐帧定位并截图，每采到一帧产出一个 SampleProgress。

    生成器是一次性的；结束后媒体位置停在最后一个采样时间点。
    """

    timestamps = sample_timestamps(source.info.duration, count)
    frames: List[SampledFrame] = []
    for index, timestamp in enumerate(timestamps):
        raise_if_cancelled(cancel_event)
        source.seek(timestamp)
        image = source.read()
        if image is None:
            raise FrameCaptureError(f"无法在 {timestamp:.3f}s 处读取帧")
        frame = SampledFrame(index=index, timestamp=timestamp, data=encode_jpeg(image, quality))
        frames.append(frame)
        logger.debug("captured frame %d/%d at %.3fs", index + 1, count, timestamp)
        yield SampleProgress(frame=frame, frames=tuple(frames), completed=index + 1, total=count)
        if pace_seconds > 0:
            raise_if_cancelled(cancel_event)
            sleep(pace_seconds)


def sample_frames(
    source: MediaSource,
    count: int,
    *,
    quality: int = 80,
    pace_seconds: float = 0.0,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Callable[[SampleProgress], None] | None = None,
) -> List[SampledFrame]:
    """消费 iter_samples 并返回完整帧序列。"""

    frames: List[SampledFrame] = []
    for event in iter_samples(
        source,
        count,
        quality=quality,
        pace_seconds=pace_seconds,
        cancel_event=cancel_event,
    ):
        frames.append(event.frame)
        if progress_callback is not None:
            progress_callback(event)
    return frames


def raise_if_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise SamplingCancelled("sampling cancelled")
