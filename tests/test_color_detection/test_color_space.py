"""
Tests for RGB <-> HSV conversion.
"""

import itertools

import numpy as np
import pytest

from constraint_detection.color_detection.color_space import (
    hsv_to_rgb,
    rgb_to_hsv,
    rgb_to_hsv_array,
    round_half_up,
)
from constraint_detection.color_detection.models import HSVColor, RGBColor


class TestRgbToHsv:
    """Tests for rgb_to_hsv."""

    @pytest.mark.parametrize(
        "rgb, expected",
        [
            ((0, 255, 0), HSVColor(120, 100, 100)),
            ((255, 0, 0), HSVColor(0, 100, 100)),
            ((0, 0, 255), HSVColor(240, 100, 100)),
            ((255, 255, 0), HSVColor(60, 100, 100)),
            ((0, 255, 255), HSVColor(180, 100, 100)),
            ((255, 0, 255), HSVColor(300, 100, 100)),
            ((0, 0, 0), HSVColor(0, 0, 0)),
            ((255, 255, 255), HSVColor(0, 0, 100)),
            ((128, 128, 128), HSVColor(0, 0, 50)),
        ],
    )
    def test_known_colors(self, rgb, expected):
        """Test primary, secondary and gray colors."""
        assert rgb_to_hsv(*rgb) == expected

    def test_dark_green(self):
        """Test a darker, less saturated green."""
        hsv = rgb_to_hsv(50, 100, 50)
        assert hsv.h == 120
        assert hsv.s == 50
        assert hsv.v == 39  # 100 / 255 = 39.2%

    def test_hue_never_reaches_360(self):
        """Test that a hue rounding up to 360 wraps to 0."""
        # (255, 0, 1) has hue 359.76 degrees
        assert rgb_to_hsv(255, 0, 1).h == 0

    def test_output_ranges(self):
        """Test that components stay within their axis limits on a coarse grid."""
        for r, g, b in itertools.product(range(0, 256, 17), repeat=3):
            hsv = rgb_to_hsv(r, g, b)
            assert 0 <= hsv.h < 360
            assert 0 <= hsv.s <= 100
            assert 0 <= hsv.v <= 100


class TestHsvToRgb:
    """Tests for hsv_to_rgb."""

    def test_pure_green(self):
        assert hsv_to_rgb(120, 100, 100) == RGBColor(0, 255, 0)

    def test_gray_rounds_half_up(self):
        """Test that 50% value maps to 128 (127.5 rounded up)."""
        assert hsv_to_rgb(0, 0, 50) == RGBColor(128, 128, 128)

    def test_hue_360_is_red(self):
        assert hsv_to_rgb(360, 100, 100) == RGBColor(255, 0, 0)


class TestRoundTrip:
    """Tests for rgb -> hsv -> rgb round trips."""

    def test_grays_within_one_level(self):
        """Test that every gray level survives the round trip within +/-1."""
        for level in range(256):
            hsv = rgb_to_hsv(level, level, level)
            rgb = hsv_to_rgb(hsv.h, hsv.s, hsv.v)
            for channel in (rgb.r, rgb.g, rgb.b):
                assert abs(channel - level) <= 1

    @pytest.mark.parametrize(
        "rgb",
        [
            (255, 0, 0),
            (0, 255, 0),
            (0, 0, 255),
            (255, 255, 0),
            (0, 255, 255),
            (255, 0, 255),
            (0, 128, 0),
            (0, 64, 0),
        ],
    )
    def test_sector_boundaries_within_one_level(self, rgb):
        """Test colors whose hue sits exactly on a 60 degree sector boundary."""
        hsv = rgb_to_hsv(*rgb)
        back = hsv_to_rgb(hsv.h, hsv.s, hsv.v)
        assert abs(back.r - rgb[0]) <= 1
        assert abs(back.g - rgb[1]) <= 1
        assert abs(back.b - rgb[2]) <= 1

    def test_general_colors_bounded_by_quantization(self):
        """
        Test arbitrary colors stay within the integer HSV quantization error.

        Whole-degree hue and whole-percent saturation/value limit the round
        trip to a few levels per channel.
        """
        for r, g, b in itertools.product(range(0, 256, 15), repeat=3):
            hsv = rgb_to_hsv(r, g, b)
            back = hsv_to_rgb(hsv.h, hsv.s, hsv.v)
            assert abs(back.r - r) <= 5
            assert abs(back.g - g) <= 5
            assert abs(back.b - b) <= 5


class TestRgbToHsvArray:
    """Tests for the vectorized conversion."""

    def test_matches_scalar_conversion(self):
        """Test element-by-element agreement with rgb_to_hsv."""
        values = list(range(0, 256, 15)) + [1, 254, 255]
        grid = np.array(list(itertools.product(values, repeat=3)), dtype=np.uint8)

        h, s, v = rgb_to_hsv_array(grid)

        for i, (r, g, b) in enumerate(grid.tolist()):
            expected = rgb_to_hsv(r, g, b)
            assert (h[i], s[i], v[i]) == (expected.h, expected.s, expected.v), (r, g, b)

    def test_accepts_rgba_image(self):
        """Test that a (height, width, 4) buffer converts with the alpha ignored."""
        image = np.zeros((2, 3, 4), dtype=np.uint8)
        image[..., 1] = 255
        image[..., 3] = 0

        h, s, v = rgb_to_hsv_array(image)

        assert h.shape == (2, 3)
        assert np.all(h == 120)
        assert np.all(s == 100)
        assert np.all(v == 100)

    def test_black_has_zero_saturation(self):
        """Test that max == 0 does not divide by zero."""
        h, s, v = rgb_to_hsv_array(np.zeros((4, 4, 3), dtype=np.uint8))
        assert np.all(h == 0)
        assert np.all(s == 0)
        assert np.all(v == 0)


class TestRoundHalfUp:

    @pytest.mark.parametrize("value, expected", [(0.5, 1), (1.5, 2), (2.5, 3), (2.4, 2), (-0.5, 0)])
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected
