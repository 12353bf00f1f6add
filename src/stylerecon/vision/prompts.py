"""视觉模型指令文本。"""

from __future__ import annotations

BROADCAST_REALISM_INSTRUCTION = """
Analyze these video frames for a high-fidelity Sora video generation prompt.
Focus on achieving absolute broadcast realism and eliminating 'game-like' graphics.

Determine the following:
1. Precise Camera Settings: Lens type (e.g., 35mm, telephoto), f-stop feel.
2. Realistic Textures: Describe the grass, jersey fabric, and feline fur in terms of light interaction.
3. Visual Artifacts: Identify natural motion blur, sensor grain, and organic lens flare.
4. Lighting: Analyze the spectral quality of sunlight and shadows.

Return the results in a structured format that strictly emphasizes "Authentic TV Broadcast Realism".
""".strip()
