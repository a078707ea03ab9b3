"""
Data structures for constraint color detection results.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class HSVColor:
    """
    A color in HSV space.

    Attributes:
        h: Hue in degrees (0-360)
        s: Saturation in percent (0-100)
        v: Value in percent (0-100)
    """
    h: int
    s: int
    v: int

    def to_dict(self) -> Dict[str, int]:
        """Convert to JSON-serializable dictionary."""
        return {"h": int(self.h), "s": int(self.s), "v": int(self.v)}


@dataclass(frozen=True)
class RGBColor:
    """An 8-bit RGB color."""
    r: int
    g: int
    b: int

    def to_dict(self) -> Dict[str, int]:
        return {"r": int(self.r), "g": int(self.g), "b": int(self.b)}


@dataclass(frozen=True)
class DetectedRegion:
    """
    A single connected region of constraint-colored pixels.

    Attributes:
        x: Left edge of the bounding box
        y: Top edge of the bounding box
        width: Bounding box width in pixels
        height: Bounding box height in pixels
        area: Number of pixels in the connected component
        confidence: Fill density of the bounding box (0-100)
        center: Bounding box midpoint (x, y), not the pixel centroid
        bounding_box: Inclusive corners (x1, y1, x2, y2)
    """
    x: int
    y: int
    width: int
    height: int
    area: int
    confidence: int
    center: Tuple[int, int]
    bounding_box: Tuple[int, int, int, int]

    @property
    def bounding_box_area(self) -> int:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height (0.0 for a degenerate box)."""
        return self.width / self.height if self.height > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape consumed by the placement UI."""
        x1, y1, x2, y2 = self.bounding_box
        return {
            "x": int(self.x),
            "y": int(self.y),
            "width": int(self.width),
            "height": int(self.height),
            "area": int(self.area),
            "confidence": int(self.confidence),
            "center": {"x": int(self.center[0]), "y": int(self.center[1])},
            "boundingBox": {"x1": int(x1), "y1": int(y1), "x2": int(x2), "y2": int(y2)},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetectedRegion":
        """Create from the dictionary produced by to_dict."""
        box = data["boundingBox"]
        return cls(
            x=data["x"],
            y=data["y"],
            width=data["width"],
            height=data["height"],
            area=data["area"],
            confidence=data["confidence"],
            center=(data["center"]["x"], data["center"]["y"]),
            bounding_box=(box["x1"], box["y1"], box["x2"], box["y2"]),
        )


@dataclass(frozen=True)
class ImageAnalysis:
    """
    Whole-image color statistics.

    Attributes:
        dominant_colors: Most frequent quantized HSV buckets, most common first
        color_distribution: Bucket key ("h-s-v") -> sample count, in first-seen order
        has_target_color: Whether any sampled pixel matched the target range
    """
    dominant_colors: List[HSVColor] = field(default_factory=list)
    color_distribution: Dict[str, int] = field(default_factory=dict)
    has_target_color: bool = False

    @property
    def color_variety(self) -> int:
        """Number of distinct quantized color buckets."""
        return len(self.color_distribution)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dominantColors": [c.to_dict() for c in self.dominant_colors],
            "colorDistribution": dict(self.color_distribution),
            "hasTargetColor": bool(self.has_target_color),
        }


@dataclass(frozen=True)
class ColorDetectionResult:
    """
    Combined output of one detection call.

    Attributes:
        regions: Detected regions in raster-scan order of their first pixel
        total_area: Sum of region areas in pixels
        average_confidence: Mean region confidence, rounded (0 when empty)
        processing_time: Wall-clock duration of the call in milliseconds
        image_analysis: Color statistics of the source image
        image_shape: Source image (height, width)
    """
    regions: List[DetectedRegion]
    total_area: int
    average_confidence: int
    processing_time: float
    image_analysis: ImageAnalysis
    image_shape: Tuple[int, int] = (0, 0)

    @property
    def region_count(self) -> int:
        return len(self.regions)

    @property
    def coverage_ratio(self) -> float:
        """Fraction of the image covered by detected regions (0.0-1.0)."""
        total_pixels = self.image_shape[0] * self.image_shape[1]
        if total_pixels == 0:
            return 0.0
        return min(self.total_area / total_pixels, 1.0)

    def largest_region(self) -> Optional[DetectedRegion]:
        """Return the region with the most pixels, or None when empty."""
        if not self.regions:
            return None
        return max(self.regions, key=lambda r: r.area)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "regions": [r.to_dict() for r in self.regions],
            "totalArea": int(self.total_area),
            "averageConfidence": int(self.average_confidence),
            "processingTime": round(float(self.processing_time), 3),
            "imageAnalysis": self.image_analysis.to_dict(),
            "imageShape": {
                "height": int(self.image_shape[0]),
                "width": int(self.image_shape[1]),
            },
        }

    @classmethod
    def empty(cls, image_shape: Tuple[int, int] = (0, 0)) -> "ColorDetectionResult":
        """Create an empty result (no regions detected)."""
        return cls(
            regions=[],
            total_area=0,
            average_confidence=0,
            processing_time=0.0,
            image_analysis=ImageAnalysis(),
            image_shape=image_shape,
        )
