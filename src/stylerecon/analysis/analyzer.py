"""风格分析接口：当前仅提供固定场景的占位实现，后续可接入真实模型。"""

from __future__ import annotations

from math import gcd
from typing import Protocol

from stylerecon.core import MediaInfo, Segment, SegmentKind, StyleDescriptor
from stylerecon.core.datamodels import (
    CameraInfo,
    EnvironmentInfo,
    LightingInfo,
    MetaInfo,
    MotionInfo,
    StyleInfo,
    SubjectInfo,
)

DEFAULT_FPS = 30.0
DEFAULT_ASPECT_RATIO = "16:9"


class Analyzer(Protocol):
    """分析器协议：媒体元数据 -> StyleDescriptor。"""

    analyzer_name: str

    def analyze(self, info: MediaInfo) -> StyleDescriptor:
        ...


class ConstantDemoAnalyzer:
    """演示用占位分析器：足球运动员 + 猫闯入场景。

    只有时长、分辨率、帧率与宽高比来自真实媒体，其余字段均为固定常量，
    不读取任何像素。
    """

    analyzer_name = "demo"

    def analyze(self, info: MediaInfo) -> StyleDescriptor:
        duration = round(info.duration, 2)
        return StyleDescriptor(
            meta=MetaInfo(
                duration=duration,
                fps=info.fps if info.fps > 0 else DEFAULT_FPS,
                resolution=f"{info.width}x{info.height}",
                aspect_ratio=aspect_ratio(info.width, info.height),
            ),
            segments=(
                Segment(
                    start=0.0,
                    end=3.2,
                    kind=SegmentKind.SETUP,
                    speed="1.0x",
                    transition="None",
                    description="A soccer player kicks the ball towards an open goal.",
                ),
                Segment(
                    start=3.2,
                    end=6.5,
                    kind=SegmentKind.EMPHASIS,
                    speed="0.35x (Intense Slow Motion)",
                    transition="Hard cut",
                    description="A cat suddenly appears and deflects the ball away from the goal line.",
                ),
                Segment(
                    start=6.5,
                    end=round(info.duration, 1),
                    kind=SegmentKind.RESOLUTION,
                    speed="1.0x",
                    transition="Cross-fade",
                    description="The ball rolls away, and the goal is missed.",
                ),
            ),
            camera=CameraInfo(
                angle="Low-angle Tracking",
                size="Medium to Wide",
                movement="Tracking the ball's trajectory",
                stability="Professional Cinematography (Stable)",
            ),
            motion=MotionInfo(
                magnitude="High Contrast (Fast to Slow)",
                consistency="Narrative-driven optical flow",
            ),
            subjects=SubjectInfo(
                count=2,
                role="Primary: Soccer player, Secondary: Suddenly appearing cat",
                position="Center field to goal mouth",
                scale="Mid-shot showing full action",
                motion="Sudden direction change by external intervention",
            ),
            environment=EnvironmentInfo(
                type="Sunny Soccer Stadium",
                background_motion="Cheering crowd (blurred)",
                depth_of_field="Dynamic telephoto depth-of-field",
            ),
            lighting=LightingInfo(
                source="Natural Sunlight",
                direction="Top-down / High-noon",
                contrast="High contrast",
                stability="Consistent",
            ),
            style=StyleInfo(
                saturation="Vibrant / Realistic Broadcast",
                texture="Hyper-realistic grass and feline fur with natural sensor grain",
                artifacts="Natural motion blur, no digital aliasing",
            ),
        )


def aspect_ratio(width: int, height: int) -> str:
    """约分宽高比，尺寸未知时回退 16:9。"""

    if width <= 0 or height <= 0:
        return DEFAULT_ASPECT_RATIO
    divisor = gcd(width, height)
    return f"{width // divisor}:{height // divisor}"


def create_analyzer(name: str = "demo") -> Analyzer:
    """根据名称构造分析器。"""

    normalized = name.strip().lower()
    if normalized == ConstantDemoAnalyzer.analyzer_name:
        return ConstantDemoAnalyzer()
    raise ValueError(f"Unsupported analyzer: {name}")
