"""
Constraint Detection Package

Finds color-marked logo placement areas in product mockup templates.
"""

from .color_detection.detector import (
    ColorDetectionService,
    create_constraint_visualization,
    detect_constraints,
)
from .color_detection.models import ColorDetectionResult, DetectedRegion, ImageAnalysis
from .config.detection_config import DEFAULT_DETECTION_SETTINGS, DetectionSettings
from .exceptions import ColorDetectionError, ImageDecodeError, InvalidSettingsError

__all__ = [
    "ColorDetectionService",
    "create_constraint_visualization",
    "detect_constraints",
    "ColorDetectionResult",
    "DetectedRegion",
    "ImageAnalysis",
    "DEFAULT_DETECTION_SETTINGS",
    "DetectionSettings",
    "ColorDetectionError",
    "ImageDecodeError",
    "InvalidSettingsError",
]
