"""
Constraint Color Detection Module

Locates flat chroma-colored (typically green) constraint regions in product
template images and reports their bounding boxes, centers and confidence.
"""

from .color_range import GREEN_COLOR_RANGES, ColorRange, is_color_in_range
from .color_space import hsv_to_rgb, rgb_to_hsv
from .models import (
    ColorDetectionResult,
    DetectedRegion,
    HSVColor,
    ImageAnalysis,
    RGBColor,
)

__all__ = [
    "GREEN_COLOR_RANGES",
    "ColorRange",
    "is_color_in_range",
    "hsv_to_rgb",
    "rgb_to_hsv",
    "ColorDetectionResult",
    "DetectedRegion",
    "HSVColor",
    "ImageAnalysis",
    "RGBColor",
]
