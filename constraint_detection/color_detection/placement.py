"""
Placement validation for detected constraint regions.

Scores how suitable the detected regions are as a logo placement area and
produces human-readable warnings and recommendations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

from .models import DetectedRegion

# Inset applied to the primary region before sizing the usable area
USABLE_AREA_PADDING = 10
USABLE_AREA_FACTOR = 0.8

SMALL_AREA_PERCENT = 5
LARGE_AREA_PERCENT = 50
LOW_CONFIDENCE = 30
MAX_FRAGMENTS = 3
MAX_CENTER_OFFSET = 0.3


class PlacementType(Enum):
    """How a logo is laid out inside the constraint area."""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    ALL_OVER = "all_over"

    @property
    def min_edge_distance(self) -> int:
        """Minimum safe distance (pixels) between the area and image edges."""
        return 5 if self is PlacementType.ALL_OVER else 15


@dataclass
class ConstraintDimensions:
    """Required logo area size range in pixels."""
    min_width: int
    min_height: int
    max_width: int
    max_height: int

    def __post_init__(self):
        if self.min_width < 0 or self.min_height < 0:
            raise ValueError("Minimum dimensions must be >= 0")
        if self.max_width < self.min_width or self.max_height < self.min_height:
            raise ValueError("Maximum dimensions must not be smaller than minimum dimensions")


@dataclass
class EdgeDistances:
    top: int
    right: int
    bottom: int
    left: int

    def items(self) -> List[Tuple[str, int]]:
        return [("top", self.top), ("right", self.right), ("bottom", self.bottom), ("left", self.left)]

    def to_dict(self) -> Dict[str, int]:
        return dict(self.items())


@dataclass
class UsableArea:
    """Area left for a logo after padding, clamped to the required dimensions."""
    pixels: int
    percentage: float
    bounds: Tuple[int, int, int, int]  # (x, y, width, height)

    def to_dict(self) -> Dict[str, Any]:
        x, y, width, height = self.bounds
        return {
            "pixels": self.pixels,
            "percentage": self.percentage,
            "bounds": {"x": x, "y": y, "width": width, "height": height},
        }

    @classmethod
    def empty(cls) -> "UsableArea":
        return cls(pixels=0, percentage=0.0, bounds=(0, 0, 0, 0))


@dataclass
class ConstraintMetrics:
    """
    Geometry of the detected constraint area.

    Attributes:
        total_area: Pixels in all regions
        usable_area: total_area less 20% for padding
        aspect_ratio: Width / height of the primary (largest) region
        center_offset: Primary region center minus image center (x, y)
        edge_distances: Primary region distance to each image edge
        fragment_count: Number of separate regions
        compactness: Fill ratio of the primary region's bounding box (0.0-1.0)
    """
    total_area: int
    usable_area: float
    aspect_ratio: float
    center_offset: Tuple[float, float]
    edge_distances: EdgeDistances
    fragment_count: int
    compactness: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_area": self.total_area,
            "usable_area": round(self.usable_area, 2),
            "aspect_ratio": round(self.aspect_ratio, 4),
            "center_offset": {"x": self.center_offset[0], "y": self.center_offset[1]},
            "edge_distances": self.edge_distances.to_dict(),
            "fragment_count": self.fragment_count,
            "compactness": round(self.compactness, 4),
        }


@dataclass
class ValidationResult:
    """Outcome of validate_constraint."""
    is_valid: bool
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    score: float = 1.0
    usable_area: UsableArea = field(default_factory=UsableArea.empty)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
            "score": round(self.score, 3),
            "usable_area": self.usable_area.to_dict(),
        }


def primary_region(regions: Sequence[DetectedRegion]) -> DetectedRegion:
    """The largest region; ties go to the earliest in scan order."""
    return max(regions, key=lambda r: r.area)


def calculate_edge_distances(
    region: DetectedRegion,
    image_width: int,
    image_height: int,
) -> EdgeDistances:
    """Distance in pixels from the region's bounding box to each image edge."""
    return EdgeDistances(
        top=region.y,
        left=region.x,
        bottom=image_height - (region.y + region.height),
        right=image_width - (region.x + region.width),
    )


def calculate_metrics(
    regions: Sequence[DetectedRegion],
    image_width: int,
    image_height: int,
) -> ConstraintMetrics:
    """
    Summarize the geometry of the detected regions.

    Raises:
        ValueError: If regions is empty
    """
    if not regions:
        raise ValueError("Cannot calculate metrics without detected regions")

    region = primary_region(regions)
    total_area = sum(r.area for r in regions)

    return ConstraintMetrics(
        total_area=total_area,
        usable_area=total_area * USABLE_AREA_FACTOR,
        aspect_ratio=region.aspect_ratio,
        center_offset=(
            region.x + region.width / 2 - image_width / 2,
            region.y + region.height / 2 - image_height / 2,
        ),
        edge_distances=calculate_edge_distances(region, image_width, image_height),
        fragment_count=len(regions),
        compactness=region.area / region.bounding_box_area if region.bounding_box_area > 0 else 0.0,
    )


def calculate_usable_area(
    region: DetectedRegion,
    dimensions: ConstraintDimensions,
    padding: int = USABLE_AREA_PADDING,
) -> UsableArea:
    """
    Compute the logo area inside a region.

    The region's box is inset by `padding` on every side and the result is
    clamped to the [min, max] dimensions.
    """
    usable_width = max(0, region.width - padding * 2)
    usable_height = max(0, region.height - padding * 2)

    final_width = max(dimensions.min_width, min(dimensions.max_width, usable_width))
    final_height = max(dimensions.min_height, min(dimensions.max_height, usable_height))

    pixels = final_width * final_height
    box_area = region.bounding_box_area
    percentage = round(pixels / box_area * 100, 2) if box_area > 0 else 0.0

    return UsableArea(
        pixels=pixels,
        percentage=percentage,
        bounds=(region.x + padding, region.y + padding, final_width, final_height),
    )


def _check_aspect_ratio(aspect_ratio: float, placement: PlacementType) -> Tuple[str, str]:
    """Return (warning, recommendation), both empty when the ratio is acceptable."""
    if placement is PlacementType.HORIZONTAL and aspect_ratio < 0.5:
        return (
            "Horizontal placement area is too tall/narrow for typical logos",
            "Consider making the green area wider for horizontal logo placement",
        )
    if placement is PlacementType.VERTICAL and aspect_ratio > 2.0:
        return (
            "Vertical placement area is too wide for typical logos",
            "Consider making the green area taller/narrower for vertical logo placement",
        )
    return "", ""


def validate_constraint(
    regions: Sequence[DetectedRegion],
    dimensions: ConstraintDimensions,
    image_width: int,
    image_height: int,
    placement: PlacementType = PlacementType.HORIZONTAL,
) -> ValidationResult:
    """
    Validate detected regions as a logo placement area.

    The largest region is treated as the placement area. The score starts at
    1.0 and each failed check deducts from it. The result is invalid only
    when a required minimum dimension is not met.

    Args:
        regions: Regions from a detection result
        dimensions: Required logo area size
        image_width: Source image width
        image_height: Source image height
        placement: Placement type, which affects aspect, edge and position checks

    Returns:
        ValidationResult
    """
    if not regions:
        return ValidationResult(
            is_valid=False,
            warnings=["No green areas detected in the image"],
            recommendations=["Ensure the constraint image has clearly marked green areas"],
            score=0.0,
        )

    warnings: List[str] = []
    recommendations: List[str] = []
    score = 1.0

    region = primary_region(regions)
    usable_area = calculate_usable_area(region, dimensions)

    # Size
    if region.width < dimensions.min_width:
        warnings.append(
            f"Detected area width ({region.width}px) is smaller than minimum required "
            f"({dimensions.min_width}px)"
        )
        score -= 0.2
    if region.height < dimensions.min_height:
        warnings.append(
            f"Detected area height ({region.height}px) is smaller than minimum required "
            f"({dimensions.min_height}px)"
        )
        score -= 0.2

    # Share of the image
    image_pixels = image_width * image_height
    percentage = region.area / image_pixels * 100 if image_pixels > 0 else 0.0
    if percentage < SMALL_AREA_PERCENT:
        warnings.append(f"Detected green area is very small (< {SMALL_AREA_PERCENT}% of image)")
        recommendations.append("Consider increasing the size of the green marking area")
        score -= 0.15
    elif percentage > LARGE_AREA_PERCENT:
        warnings.append(f"Detected green area is very large (> {LARGE_AREA_PERCENT}% of image)")
        recommendations.append("Consider reducing the green area to be more specific")
        score -= 0.1

    warning, recommendation = _check_aspect_ratio(region.aspect_ratio, placement)
    if warning:
        warnings.append(warning)
        recommendations.append(recommendation)
        score -= 0.1

    # Edge margins
    min_distance = placement.min_edge_distance
    for edge, distance in calculate_edge_distances(region, image_width, image_height).items():
        if distance < min_distance:
            warnings.append(f"Green area is very close to {edge} edge ({distance}px)")
            recommendations.append(f"Move green area at least {min_distance}px away from {edge} edge")
            score -= 0.05

    if region.confidence < LOW_CONFIDENCE:
        warnings.append("Low detection quality - the green area may be fragmented or unclear")
        recommendations.append("Use a more solid, well-defined green area")
        score -= 0.15

    if len(regions) > MAX_FRAGMENTS:
        warnings.append(f"Multiple separate green areas detected ({len(regions)} areas)")
        recommendations.append("Use a single, continuous green area for better results")
        score -= 0.1

    # Position
    offset_x = abs(region.center[0] - image_width / 2)
    offset_y = abs(region.center[1] - image_height / 2)
    if placement is PlacementType.HORIZONTAL and offset_y > image_height * MAX_CENTER_OFFSET:
        warnings.append("Horizontal placement area is positioned too far from center vertically")
        recommendations.append("Consider positioning the green area closer to the vertical center")
        score -= 0.1
    elif placement is PlacementType.VERTICAL and offset_x > image_width * MAX_CENTER_OFFSET:
        warnings.append("Vertical placement area is positioned too far from center horizontally")
        recommendations.append("Consider positioning the green area closer to the horizontal center")
        score -= 0.1

    is_valid = not any("required" in w for w in warnings)

    return ValidationResult(
        is_valid=is_valid,
        warnings=warnings,
        recommendations=recommendations,
        score=max(0.0, score),
        usable_area=usable_area,
    )


def generate_recommendations(
    regions: Sequence[DetectedRegion],
    validation: ValidationResult,
    image_width: int,
    image_height: int,
    placement: PlacementType = PlacementType.HORIZONTAL,
) -> List[str]:
    """
    Collect recommendations for improving a constraint template.

    Combines the validation recommendations with general advice based on
    detection quality and placement type. Duplicates are removed, keeping
    first occurrence order.
    """
    recommendations = list(validation.recommendations)

    if regions:
        region = primary_region(regions)
        image_pixels = image_width * image_height
        percentage = region.area / image_pixels * 100 if image_pixels > 0 else 0.0

        if region.confidence < 50:
            recommendations.append("Use a brighter, more saturated green color (#00FF00 recommended)")
            recommendations.append("Ensure the green area has clean, solid edges")
        if percentage < 10:
            recommendations.append(
                "Consider increasing the size of the constraint area for better logo visibility"
            )
        if len(regions) > 1:
            recommendations.append(
                "Use a single, continuous green shape rather than multiple separate areas"
            )

    if placement is PlacementType.HORIZONTAL:
        recommendations.append(
            "For horizontal placement, ensure the green area is wide enough for typical logo proportions"
        )
    elif placement is PlacementType.VERTICAL:
        recommendations.append(
            "For vertical placement, ensure the green area is tall enough for stacked logos"
        )
    else:
        recommendations.append("For all-over patterns, mark the entire printable area with green")

    return list(dict.fromkeys(recommendations))
