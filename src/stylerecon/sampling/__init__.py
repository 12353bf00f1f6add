"""Step1: 帧采样模块，聚合媒体打开与均匀时间点截图逻辑。"""

from .loader import MediaSource, VideoCaptureSource, VideoOpenError, open_media, probe_media
from .sampler import (
    FrameCaptureError,
    SamplingCancelled,
    encode_jpeg,
    iter_samples,
    raise_if_cancelled,
    sample_frames,
    sample_timestamps,
)
from .types import SampleProgress

__all__ = [
    "MediaSource",
    "VideoCaptureSource",
    "VideoOpenError",
    "open_media",
    "probe_media",
    "FrameCaptureError",
    "SamplingCancelled",
    "SampleProgress",
    "encode_jpeg",
    "iter_samples",
    "raise_if_cancelled",
    "sample_frames",
    "sample_timestamps",
]
