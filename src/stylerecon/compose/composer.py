"""将 StyleDescriptor 拼装为视频生成提示词。

段落顺序固定：Camera -> Stability -> Subject -> Motion -> Environment -> Lighting & Style。
"""

from __future__ import annotations

from typing import Sequence, Tuple

from stylerecon.core import ComposedPrompt, StyleDescriptor

VISION_HINT_LABEL = "[AI VISION INSIGHT]"
VISION_BLOCK_HEADER = "Detailed Vision Analysis:"
DEFAULT_SUFFIX_TOKENS: Tuple[str, ...] = ("--sora-recon-v4", "--broadcast-mode")
DEFAULT_HINT_CHARS = 300


def compose_prompt(
    descriptor: StyleDescriptor,
    *,
    hint_chars: int = DEFAULT_HINT_CHARS,
    suffix_tokens: Sequence[str] = DEFAULT_SUFFIX_TOKENS,
) -> ComposedPrompt:
    """纯函数：相同输入得到逐字节相同的输出。"""

    vision_text = descriptor.style.vision_text
    sections = (
        _camera_section(descriptor, has_vision=vision_text is not None),
        _stability_section(descriptor),
        _subject_section(descriptor),
        _motion_section(descriptor),
        _environment_section(descriptor),
        _lighting_section(descriptor, vision_text, hint_chars),
    )
    text = " ".join(sections)
    if vision_text is not None:
        text += f"\n\n{VISION_BLOCK_HEADER}\n{VISION_HINT_LABEL} {vision_text}"
    if suffix_tokens:
        text += " " + " ".join(suffix_tokens)
    return ComposedPrompt(text=text, sections=sections, vision_augmented=vision_text is not None)


def _camera_section(descriptor: StyleDescriptor, *, has_vision: bool) -> str:
    camera = descriptor.camera
    section = (
        f"[CAMERA] {camera.angle}, {camera.size}, {camera.movement}. "
        "Captured with a high-end TV broadcast camera lens with natural telephoto compression."
    )
    if has_vision:
        section += " Refining based on visual lens analysis."
    return section


def _stability_section(descriptor: StyleDescriptor) -> str:
    return (
        f"[STABILITY] The camera is {descriptor.camera.stability}, "
        "exhibiting standard professional broadcast stability."
    )


def _subject_section(descriptor: StyleDescriptor) -> str:
    return (
        "[SUBJECT] At the beginning, a soccer player runs fast and kicks the ball at normal speed. "
        f"Suddenly, a {descriptor.subjects.role} enters the frame. "
        "The player's jersey and the cat's fur have realistic tangible textures."
    )


def _motion_section(descriptor: StyleDescriptor) -> str:
    emphasis = descriptor.emphasis_segment()
    opening = (
        "[MOTION] The video starts at normal playback speed (1.0x) "
        "with fast-paced action and natural motion blur."
    )
    if emphasis is None:
        return f"{opening} The scene keeps normal playback speed (1.0x) throughout."
    return (
        f"{opening} Then, the scene clearly transitions into {emphasis.speed} "
        "at the exact moment the cat deflects the ball, creating a dramatic but realistic temporal shift."
    )


def _environment_section(descriptor: StyleDescriptor) -> str:
    env = descriptor.environment
    return (
        f"[ENVIRONMENT] Set in a {env.type}. The background shows a {env.background_motion.lower()}, "
        "characteristic of professional sports coverage."
    )


def _lighting_section(descriptor: StyleDescriptor, vision_text: str | None, hint_chars: int) -> str:
    lighting = descriptor.lighting
    section = (
        f"[LIGHTING & STYLE] {lighting.source}, {lighting.direction}. "
        "Overall visual is a 4k TV broadcast footage, featuring natural film grain, "
        "subtle sensor noise, and realistic color grading."
    )
    if vision_text is not None:
        section += f" {VISION_HINT_LABEL} {vision_text[:hint_chars]}..."
    return section + " No digital rendering or 3D-game artifacts. Authentic broadcast realism."
