"""Step2: 风格描述生成模块。"""

from .analyzer import Analyzer, ConstantDemoAnalyzer, aspect_ratio, create_analyzer

__all__ = [
    "Analyzer",
    "ConstantDemoAnalyzer",
    "aspect_ratio",
    "create_analyzer",
]
