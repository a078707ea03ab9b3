"""
Tests for detection result data structures.
"""

import dataclasses
import json

import pytest

from constraint_detection.color_detection.models import (
    ColorDetectionResult,
    DetectedRegion,
    HSVColor,
    ImageAnalysis,
    RGBColor,
)


def _region(x=10, y=20, width=30, height=15, area=400):
    return DetectedRegion(
        x=x,
        y=y,
        width=width,
        height=height,
        area=area,
        confidence=89,
        center=(x + width // 2, y + height // 2),
        bounding_box=(x, y, x + width - 1, y + height - 1),
    )


class TestDetectedRegion:
    """Tests for DetectedRegion."""

    def test_properties(self):
        region = _region()
        assert region.bounding_box_area == 450
        assert region.aspect_ratio == pytest.approx(2.0)

    def test_to_dict(self):
        data = _region().to_dict()
        assert data == {
            "x": 10,
            "y": 20,
            "width": 30,
            "height": 15,
            "area": 400,
            "confidence": 89,
            "center": {"x": 25, "y": 27},
            "boundingBox": {"x1": 10, "y1": 20, "x2": 39, "y2": 34},
        }

    def test_from_dict_round_trip(self):
        region = _region()
        assert DetectedRegion.from_dict(region.to_dict()) == region

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            _region().area = 5


class TestImageAnalysis:
    """Tests for ImageAnalysis."""

    def test_defaults(self):
        analysis = ImageAnalysis()
        assert analysis.dominant_colors == []
        assert analysis.color_variety == 0
        assert not analysis.has_target_color

    def test_to_dict(self):
        analysis = ImageAnalysis(
            dominant_colors=[HSVColor(120, 100, 100)],
            color_distribution={"120-100-100": 3},
            has_target_color=True,
        )
        assert analysis.to_dict() == {
            "dominantColors": [{"h": 120, "s": 100, "v": 100}],
            "colorDistribution": {"120-100-100": 3},
            "hasTargetColor": True,
        }


class TestColorDetectionResult:
    """Tests for ColorDetectionResult."""

    def test_empty(self):
        result = ColorDetectionResult.empty((10, 20))
        assert result.region_count == 0
        assert result.total_area == 0
        assert result.coverage_ratio == 0.0
        assert result.largest_region() is None
        assert result.image_shape == (10, 20)

    def test_largest_and_coverage(self):
        small = _region(area=100)
        large = _region(x=50, area=900)
        result = ColorDetectionResult(
            regions=[small, large],
            total_area=1000,
            average_confidence=89,
            processing_time=1.23456,
            image_analysis=ImageAnalysis(),
            image_shape=(100, 100),
        )

        assert result.largest_region() is large
        assert result.coverage_ratio == pytest.approx(0.1)

    def test_to_dict_is_json_serializable(self):
        result = ColorDetectionResult(
            regions=[_region()],
            total_area=400,
            average_confidence=89,
            processing_time=1.23456,
            image_analysis=ImageAnalysis(),
            image_shape=(100, 200),
        )

        data = json.loads(json.dumps(result.to_dict()))

        assert data["totalArea"] == 400
        assert data["averageConfidence"] == 89
        assert data["processingTime"] == 1.235
        assert data["imageShape"] == {"height": 100, "width": 200}
        assert len(data["regions"]) == 1


class TestColors:

    def test_color_dicts(self):
        assert HSVColor(1, 2, 3).to_dict() == {"h": 1, "s": 2, "v": 3}
        assert RGBColor(4, 5, 6).to_dict() == {"r": 4, "g": 5, "b": 6}
