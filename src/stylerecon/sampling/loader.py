"""基于 OpenCV 的媒体源封装。"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

import cv2
import numpy as np
from numpy.typing import NDArray

from stylerecon.core import MediaInfo


class VideoOpenError(RuntimeError):
    """视频无法打开或无法获知时长时抛出，便于上层捕获并降级。"""


class MediaSource(Protocol):
    """可定位、可读帧的媒体源协议，测试中可用假实现替换。"""

    info: MediaInfo

    def seek(self, timestamp: float) -> None:
        """将播放位置移动到 timestamp（秒）。"""

    def read(self) -> Optional[NDArray[np.uint8]]:
        """读取当前位置的一帧，失败返回 None。"""

    def close(self) -> None:
        ...


class VideoCaptureSource:
    """cv2.VideoCapture 封装。"""

    def __init__(self, video_path: str | Path) -> None:
        path = Path(video_path)
        capture = cv2.VideoCapture(str(path))
        if not capture.isOpened():
            raise VideoOpenError(f"无法打开视频: {path}")
        self._capture = capture
        try:
            self.info = _probe(capture, path)
        except VideoOpenError:
            capture.release()
            raise
        self.position = 0.0

    def seek(self, timestamp: float) -> None:
        self._capture.set(cv2.CAP_PROP_POS_MSEC, timestamp * 1000.0)
        self.position = timestamp

    def read(self) -> Optional[NDArray[np.uint8]]:
        success, frame = self._capture.read()
        if not success or frame is None:
            return None
        return frame

    def close(self) -> None:
        self._capture.release()

    def __enter__(self) -> "VideoCaptureSource":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()


def _probe(capture: cv2.VideoCapture, path: Path) -> MediaInfo:
    fps = capture.get(cv2.CAP_PROP_FPS) or 0.0
    frame_count = capture.get(cv2.CAP_PROP_FRAME_COUNT) or 0.0
    width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
    height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
    if fps <= 0 or frame_count <= 0:
        raise VideoOpenError(f"无法获知视频时长: {path}")
    return MediaInfo(
        path=path,
        duration=float(frame_count / fps),
        width=width,
        height=height,
        fps=float(fps),
    )


def open_media(video_path: str | Path) -> VideoCaptureSource:
    """打开视频文件并探测时长/分辨率。"""

    return VideoCaptureSource(video_path)


def probe_media(video_path: str | Path) -> MediaInfo:
    """只读取元数据，不保留句柄。"""

    with open_media(video_path) as source:
        return source.info
