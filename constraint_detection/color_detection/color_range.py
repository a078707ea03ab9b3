"""
HSV color range configuration and range matching.

Ranges use hue in degrees (0-360) and saturation/value in percent (0-100).
A range whose h_min exceeds h_max wraps around 0 degrees (e.g. red 350-10).
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

from ..config.validation import check_int, check_mapping
from ..exceptions import InvalidSettingsError
from .models import HSVColor

HUE_MAX = 360
SV_MAX = 100

# One percent of tolerance widens hue by 3.6 degrees
HUE_DEGREES_PER_TOLERANCE = HUE_MAX / 100


@dataclass(frozen=True)
class ColorRange:
    """
    Inclusive HSV bounds for constraint-color matching.

    Saturation and value bounds must be ordered; hue bounds may be reversed
    to express a range that straddles 0 degrees.
    """
    h_min: int
    h_max: int
    s_min: int
    s_max: int
    v_min: int
    v_max: int

    def __post_init__(self):
        """Validate HSV ranges."""
        self._validate()

    def _validate(self):
        for name in ("h_min", "h_max", "s_min", "s_max", "v_min", "v_max"):
            check_int(name, getattr(self, name))

        for name in ("h_min", "h_max"):
            value = getattr(self, name)
            if not (0 <= value <= HUE_MAX):
                raise InvalidSettingsError(f"{name} must be 0-{HUE_MAX}, got {value}")
        for name in ("s_min", "s_max", "v_min", "v_max"):
            value = getattr(self, name)
            if not (0 <= value <= SV_MAX):
                raise InvalidSettingsError(f"{name} must be 0-{SV_MAX}, got {value}")

        if self.s_min > self.s_max:
            raise InvalidSettingsError(
                f"s_min ({self.s_min}) must not exceed s_max ({self.s_max})"
            )
        if self.v_min > self.v_max:
            raise InvalidSettingsError(
                f"v_min ({self.v_min}) must not exceed v_max ({self.v_max})"
            )

    @property
    def wraps_around(self) -> bool:
        """True when the hue range straddles 0 degrees."""
        return self.h_min > self.h_max

    def widened(self, tolerance: float = 0) -> "WidenedBounds":
        """
        Apply a tolerance percentage to the range.

        Hue bounds grow by tolerance * 3.6 degrees, saturation and value
        bounds by tolerance points. All bounds are clamped to their axis.
        """
        h_tol = tolerance * HUE_DEGREES_PER_TOLERANCE
        h_min = max(0.0, self.h_min - h_tol)
        h_max = min(float(HUE_MAX), self.h_max + h_tol)

        # A wrapping range whose widened ends meet covers the whole circle
        full_circle = self.wraps_around and h_min <= h_max

        return WidenedBounds(
            h_min=h_min,
            h_max=h_max,
            s_min=max(0.0, self.s_min - tolerance),
            s_max=min(float(SV_MAX), self.s_max + tolerance),
            v_min=max(0.0, self.v_min - tolerance),
            v_max=min(float(SV_MAX), self.v_max + tolerance),
            full_circle=full_circle,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "h_min": self.h_min,
            "h_max": self.h_max,
            "s_min": self.s_min,
            "s_max": self.s_max,
            "v_min": self.v_min,
            "v_max": self.v_max,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColorRange":
        """
        Create from dictionary.

        Accepts snake_case keys (h_min) and the camelCase keys (hMin) used
        by the web application.
        """
        check_mapping("color_range", data)

        def pick(snake: str, camel: str) -> int:
            if snake in data:
                return data[snake]
            if camel in data:
                return data[camel]
            raise InvalidSettingsError(f"Color range is missing '{snake}'")

        return cls(
            h_min=pick("h_min", "hMin"),
            h_max=pick("h_max", "hMax"),
            s_min=pick("s_min", "sMin"),
            s_max=pick("s_max", "sMax"),
            v_min=pick("v_min", "vMin"),
            v_max=pick("v_max", "vMax"),
        )


@dataclass(frozen=True)
class WidenedBounds:
    """Tolerance-adjusted bounds produced by ColorRange.widened."""
    h_min: float
    h_max: float
    s_min: float
    s_max: float
    v_min: float
    v_max: float
    full_circle: bool = False

    @property
    def hue_wraps(self) -> bool:
        return self.h_min > self.h_max

    def hue_matches(self, hue: float) -> bool:
        if self.full_circle:
            return True
        if self.hue_wraps:
            return hue >= self.h_min or hue <= self.h_max
        return self.h_min <= hue <= self.h_max


# Predefined green ranges for constraint detection
GREEN_COLOR_RANGES: Dict[str, ColorRange] = {
    # Bright/vivid green, typical for design constraints
    "VIVID_GREEN": ColorRange(h_min=100, h_max=140, s_min=50, s_max=100, v_min=40, v_max=100),
    # Darker forest green
    "DARK_GREEN": ColorRange(h_min=80, h_max=120, s_min=30, s_max=100, v_min=20, v_max=60),
    # Pastel/mint green
    "LIGHT_GREEN": ColorRange(h_min=110, h_max=150, s_min=20, s_max=70, v_min=60, v_max=100),
    # All green variants
    "ALL_GREEN": ColorRange(h_min=80, h_max=160, s_min=15, s_max=100, v_min=15, v_max=100),
}


def is_color_in_range(color: HSVColor, color_range: ColorRange, tolerance: float = 0) -> bool:
    """
    Check whether an HSV color falls within a range.

    Args:
        color: HSV color to test
        color_range: Range to match against
        tolerance: Additional tolerance percentage (0-100)

    Returns:
        True if hue, saturation and value all match

    Example:
        >>> red = ColorRange(h_min=350, h_max=10, s_min=0, s_max=100, v_min=0, v_max=100)
        >>> is_color_in_range(HSVColor(5, 80, 80), red)
        True
    """
    bounds = color_range.widened(tolerance)

    return (
        bounds.hue_matches(color.h)
        and bounds.s_min <= color.s <= bounds.s_max
        and bounds.v_min <= color.v <= bounds.v_max
    )


def in_range_mask(
    h: np.ndarray,
    s: np.ndarray,
    v: np.ndarray,
    color_range: ColorRange,
    tolerance: float = 0,
) -> np.ndarray:
    """
    Vectorized is_color_in_range over HSV component arrays.

    Returns:
        Boolean array with the shape of h
    """
    bounds = color_range.widened(tolerance)

    if bounds.full_circle:
        hue_ok = np.ones(h.shape, dtype=bool)
    elif bounds.hue_wraps:
        hue_ok = (h >= bounds.h_min) | (h <= bounds.h_max)
    else:
        hue_ok = (h >= bounds.h_min) & (h <= bounds.h_max)

    sat_ok = (s >= bounds.s_min) & (s <= bounds.s_max)
    val_ok = (v >= bounds.v_min) & (v <= bounds.v_max)

    return hue_ok & sat_ok & val_ok


def get_preset_range(name: str) -> ColorRange:
    """
    Look up a predefined range by name (case-insensitive).

    Raises:
        InvalidSettingsError: If the preset does not exist
    """
    if not isinstance(name, str):
        raise InvalidSettingsError(f"Color preset name must be a string, got {name!r}")
    key = name.upper()
    if key not in GREEN_COLOR_RANGES:
        raise InvalidSettingsError(
            f"Unknown color preset: {name}. Available: {list(GREEN_COLOR_RANGES.keys())}"
        )
    return GREEN_COLOR_RANGES[key]


def preset_names() -> Tuple[str, ...]:
    return tuple(GREEN_COLOR_RANGES.keys())
