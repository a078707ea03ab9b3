"""
Tests for region visualization.
"""

import cv2
import numpy as np

from constraint_detection import ColorDetectionService, create_constraint_visualization
from constraint_detection.color_detection.image_io import decode_image
from constraint_detection.color_detection.region_extraction import build_region
from constraint_detection.color_detection.visualization import (
    draw_regions,
    hsl_to_rgb,
    region_hue,
)
from tests.fixtures.constraint_fixtures import (
    create_solid_image,
    create_two_green_squares,
    encode_png,
)


class TestColors:
    """Tests for per-region colors."""

    def test_region_hue_cycles(self):
        assert [region_hue(i) for i in range(7)] == [0, 60, 120, 180, 240, 300, 0]

    def test_hsl_red(self):
        r, g, b = hsl_to_rgb(0, 0.7, 0.5)
        assert abs(r - 217) <= 2
        assert abs(g - 38) <= 2
        assert abs(b - 38) <= 2

    def test_hsl_lightness(self):
        dark = hsl_to_rgb(120, 0.7, 0.3)
        light = hsl_to_rgb(120, 0.7, 0.5)
        assert dark[1] < light[1]
        assert dark[1] > dark[0]


class TestDrawRegions:
    """Tests for draw_regions."""

    def test_source_not_modified(self):
        image = create_two_green_squares()
        original = image.copy()
        draw_regions(image, [build_region(30, 30, 49, 49, 400)])
        np.testing.assert_array_equal(image, original)

    def test_background_half_transparent(self):
        canvas = draw_regions(create_solid_image((0, 0, 0), (50, 50)), [])
        assert np.all(canvas[..., 3] == 128)
        assert np.all(canvas[..., :3] == 0)

    def test_region_is_tinted(self):
        image = create_solid_image((0, 0, 0), (100, 100))
        canvas = draw_regions(image, [build_region(10, 10, 89, 89, 6400)])

        # Interior point away from the outline, center dot and label
        y, x = 70, 30
        r, g, b, a = (int(c) for c in canvas[y, x])
        assert 160 <= a <= 170
        assert r > g and r > b

        # Outside the region only the source opacity changes
        assert canvas[95, 95, 3] == 128

    def test_outline_drawn_opaque(self):
        canvas = draw_regions(create_solid_image((0, 0, 0), (100, 100)), [build_region(10, 10, 89, 89, 6400)])
        assert canvas[50, 10, 3] == 255

    def test_region_outside_image_skipped(self):
        image = create_solid_image((0, 0, 0), (20, 20))
        canvas = draw_regions(image, [build_region(50, 50, 60, 60, 121)])
        assert np.all(canvas[..., 3] == 128)


class TestVisualizationMask:
    """Tests for the PNG-producing entry points."""

    def test_returns_png_of_same_size(self):
        data = encode_png(create_two_green_squares())
        service = ColorDetectionService()
        result = service.analyze_image(data)

        png = service.create_visualization_mask(data, result.regions)

        assert png[:8] == b"\x89PNG\r\n\x1a\n"
        decoded = decode_image(png)
        assert decoded.shape == (200, 200, 4)

    def test_differs_from_source(self):
        image = create_two_green_squares()
        result = ColorDetectionService().analyze_image(image)

        decoded = decode_image(create_constraint_visualization(image, result.regions))

        assert not np.array_equal(decoded, image)

    def test_opencv_can_read_output(self):
        image = create_two_green_squares()
        png = create_constraint_visualization(image, [])
        decoded = cv2.imdecode(np.frombuffer(png, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
        assert decoded.shape == (200, 200, 4)
