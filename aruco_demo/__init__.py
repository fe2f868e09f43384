"""Interactive ArUco detection and marker generation demos."""

from .config import DemoConfig, GeneratorConfig
from .demo import DetectionDemo
from .generator import GeneratorState, MarkerGeneratorApp

__all__ = [
    "DemoConfig",
    "DetectionDemo",
    "GeneratorConfig",
    "GeneratorState",
    "MarkerGeneratorApp",
]
