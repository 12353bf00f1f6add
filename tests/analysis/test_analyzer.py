"""占位分析器测试：派生字段来自媒体，其余为固定场景常量。"""

from pathlib import Path

import pytest

from stylerecon.analysis import ConstantDemoAnalyzer, aspect_ratio, create_analyzer
from stylerecon.core import MediaInfo, SegmentKind


def _info(duration: float = 9.0, width: int = 1920, height: int = 1080, fps: float = 25.0) -> MediaInfo:
    return MediaInfo(path=Path("clip.mp4"), duration=duration, width=width, height=height, fps=fps)


def test_demo_analyzer_derives_media_fields() -> None:
    descriptor = ConstantDemoAnalyzer().analyze(_info(duration=9.004))

    assert descriptor.meta.duration == 9.0
    assert descriptor.meta.fps == 25.0
    assert descriptor.meta.resolution == "1920x1080"
    assert descriptor.meta.aspect_ratio == "16:9"
    assert descriptor.segments[-1].end == 9.0


def test_demo_analyzer_fixed_segments() -> None:
    descriptor = ConstantDemoAnalyzer().analyze(_info())

    kinds = [segment.kind for segment in descriptor.segments]
    assert kinds == [SegmentKind.SETUP, SegmentKind.EMPHASIS, SegmentKind.RESOLUTION]
    starts = [segment.start for segment in descriptor.segments]
    assert starts == sorted(starts)
    assert descriptor.segments[1].speed == "0.35x (Intense Slow Motion)"
    assert descriptor.style.vision_text is None


def test_demo_analyzer_is_deterministic() -> None:
    analyzer = ConstantDemoAnalyzer()

    assert analyzer.analyze(_info()) == analyzer.analyze(_info())


def test_unknown_fps_falls_back_to_thirty() -> None:
    descriptor = ConstantDemoAnalyzer().analyze(_info(fps=0.0))

    assert descriptor.meta.fps == 30.0


@pytest.mark.parametrize(
    "width,height,expected",
    [(1920, 1080, "16:9"), (1080, 1920, "9:16"), (640, 480, "4:3"), (0, 0, "16:9")],
)
def test_aspect_ratio(width: int, height: int, expected: str) -> None:
    assert aspect_ratio(width, height) == expected


def test_create_analyzer() -> None:
    assert isinstance(create_analyzer("demo"), ConstantDemoAnalyzer)
    with pytest.raises(ValueError):
        create_analyzer("clip-vision")
