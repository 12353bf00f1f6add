"""核心数据结构定义：媒体信息、采样帧、风格描述与合成提示词。"""

from __future__ import annotations

import base64
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


@dataclass(slots=True, frozen=True)
class MediaInfo:
    """已打开媒体的基础元数据；duration 以秒计。"""

    path: Path
    duration: float
    width: int
    height: int
    fps: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["path"] = str(self.path)
        return payload


@dataclass(slots=True, frozen=True)
class SampledFrame:
    """单张采样帧，采集后不可变。"""

    index: int
    timestamp: float
    data: bytes
    mime_type: str = "image/jpeg"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


class SegmentKind(str, Enum):
    """片段叙事角色，闭集。"""

    SETUP = "Setup"
    EMPHASIS = "Emphasis"
    RESOLUTION = "Resolution"


@dataclass(slots=True, frozen=True)
class Segment:
    start: float
    end: float
    kind: SegmentKind
    speed: str
    transition: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["kind"] = self.kind.value
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Segment":
        return cls(
            start=float(data["start"]),
            end=float(data["end"]),
            kind=SegmentKind(data["kind"]),
            speed=str(data["speed"]),
            transition=str(data["transition"]),
            description=str(data["description"]),
        )


@dataclass(slots=True, frozen=True)
class MetaInfo:
    duration: float
    fps: float
    resolution: str
    aspect_ratio: str


@dataclass(slots=True, frozen=True)
class CameraInfo:
    angle: str
    size: str
    movement: str
    stability: str


@dataclass(slots=True, frozen=True)
class MotionInfo:
    magnitude: str
    consistency: str


@dataclass(slots=True, frozen=True)
class SubjectInfo:
    count: int
    role: str
    position: str
    scale: str
    motion: str


@dataclass(slots=True, frozen=True)
class EnvironmentInfo:
    type: str
    background_motion: str
    depth_of_field: str


@dataclass(slots=True, frozen=True)
class LightingInfo:
    source: str
    direction: str
    contrast: str
    stability: str


@dataclass(slots=True, frozen=True)
class StyleInfo:
    """风格块；vision_text 为视觉模型返回的原始文本，可为空。"""

    saturation: str
    texture: str
    artifacts: str
    vision_text: Optional[str] = None


@dataclass(slots=True, frozen=True)
class StyleDescriptor:
    """视频风格的结构化描述。

    构造后仅 style.vision_text 允许变化，且只能通过 with_vision_text
    生成新副本、只写一次。
    """

    meta: MetaInfo
    segments: Tuple[Segment, ...]
    camera: CameraInfo
    motion: MotionInfo
    subjects: SubjectInfo
    environment: EnvironmentInfo
    lighting: LightingInfo
    style: StyleInfo

    @property
    def is_augmented(self) -> bool:
        return self.style.vision_text is not None

    def with_vision_text(self, text: str) -> "StyleDescriptor":
        if self.is_augmented:
            raise ValueError("descriptor already carries vision text")
        return replace(self, style=replace(self.style, vision_text=text))

    def emphasis_segment(self) -> Optional[Segment]:
        for segment in self.segments:
            if segment.kind is SegmentKind.EMPHASIS:
                return segment
        return None

    def to_dict(self) -> Dict[str, Any]:
        """辅助序列化：方便写入 JSON 报告或推送给前端。"""

        return {
            "meta": asdict(self.meta),
            "segments": [segment.to_dict() for segment in self.segments],
            "camera": asdict(self.camera),
            "motion": asdict(self.motion),
            "subjects": asdict(self.subjects),
            "environment": asdict(self.environment),
            "lighting": asdict(self.lighting),
            "style": asdict(self.style),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StyleDescriptor":
        return cls(
            meta=MetaInfo(**data["meta"]),
            segments=tuple(Segment.from_dict(entry) for entry in data["segments"]),
            camera=CameraInfo(**data["camera"]),
            motion=MotionInfo(**data["motion"]),
            subjects=SubjectInfo(**data["subjects"]),
            environment=EnvironmentInfo(**data["environment"]),
            lighting=LightingInfo(**data["lighting"]),
            style=StyleInfo(**data["style"]),
        )


@dataclass(slots=True, frozen=True)
class ComposedPrompt:
    """最终提示词；重新生成需从描述重新合成，不做增量修改。"""

    text: str
    sections: Tuple[str, ...] = field(default_factory=tuple)
    vision_augmented: bool = False

    def __str__(self) -> str:
        return self.text
