"""
RGB <-> HSV color-space conversion.

Hue is expressed in degrees (0-360), saturation and value in percent (0-100),
which differs from OpenCV's 0-180 / 0-255 HSV encoding.
"""

import math
from typing import Tuple

import numpy as np

from .models import HSVColor, RGBColor


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up."""
    return int(math.floor(value + 0.5))


def rgb_to_hsv(r: int, g: int, b: int) -> HSVColor:
    """
    Convert an 8-bit RGB triple to HSV.

    Args:
        r: Red component (0-255)
        g: Green component (0-255)
        b: Blue component (0-255)

    Returns:
        HSVColor with h in [0, 360), s and v in [0, 100]

    Example:
        >>> rgb_to_hsv(0, 255, 0)
        HSVColor(h=120, s=100, v=100)
    """
    r_norm = r / 255
    g_norm = g / 255
    b_norm = b / 255

    max_c = max(r_norm, g_norm, b_norm)
    min_c = min(r_norm, g_norm, b_norm)
    delta = max_c - min_c

    h = 0.0
    s = 0.0
    v = max_c

    if max_c != 0:
        s = delta / max_c

    if delta != 0:
        if max_c == r_norm:
            h = (g_norm - b_norm) / delta
        elif max_c == g_norm:
            h = (b_norm - r_norm) / delta + 2
        else:
            h = (r_norm - g_norm) / delta + 4
        h *= 60

    if h < 0:
        h += 360

    return HSVColor(
        h=round_half_up(h) % 360,
        s=round_half_up(s * 100),
        v=round_half_up(v * 100),
    )


def hsv_to_rgb(h: float, s: float, v: float) -> RGBColor:
    """
    Convert HSV (h 0-360, s/v 0-100) back to an 8-bit RGB triple.

    Only used for presentation and debugging output.
    """
    s_norm = s / 100
    v_norm = v / 100
    h = h % 360

    c = v_norm * s_norm
    x = c * (1 - abs(((h / 60) % 2) - 1))
    m = v_norm - c

    if h < 60:
        r_prime, g_prime, b_prime = c, x, 0.0
    elif h < 120:
        r_prime, g_prime, b_prime = x, c, 0.0
    elif h < 180:
        r_prime, g_prime, b_prime = 0.0, c, x
    elif h < 240:
        r_prime, g_prime, b_prime = 0.0, x, c
    elif h < 300:
        r_prime, g_prime, b_prime = x, 0.0, c
    else:
        r_prime, g_prime, b_prime = c, 0.0, x

    return RGBColor(
        r=round_half_up((r_prime + m) * 255),
        g=round_half_up((g_prime + m) * 255),
        b=round_half_up((b_prime + m) * 255),
    )


def rgb_to_hsv_array(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Vectorized RGB -> HSV conversion.

    Performs the same arithmetic as rgb_to_hsv so that results are identical
    element by element.

    Args:
        rgb: uint8 array with a trailing channel axis of size >= 3 (R, G, B, ...)

    Returns:
        Tuple of int32 arrays (h, s, v) with the shape of rgb[..., 0]
    """
    channels = rgb[..., :3].astype(np.float64) / 255
    r_norm = channels[..., 0]
    g_norm = channels[..., 1]
    b_norm = channels[..., 2]

    max_c = channels.max(axis=-1)
    min_c = channels.min(axis=-1)
    delta = max_c - min_c

    with np.errstate(divide="ignore", invalid="ignore"):
        s = np.where(max_c != 0, delta / max_c, 0.0)

        hue_r = (g_norm - b_norm) / delta
        hue_g = (b_norm - r_norm) / delta + 2
        hue_b = (r_norm - g_norm) / delta + 4

    # Channel precedence matches the scalar version: red, then green, then blue
    h = np.where(max_c == r_norm, hue_r, np.where(max_c == g_norm, hue_g, hue_b))
    h = np.where(delta != 0, h * 60, 0.0)
    h = np.where(h < 0, h + 360, h)

    h_int = np.floor(h + 0.5).astype(np.int32) % 360
    s_int = np.floor(s * 100 + 0.5).astype(np.int32)
    v_int = np.floor(max_c * 100 + 0.5).astype(np.int32)

    return h_int, s_int, v_int
