"""
Whole-image color distribution analysis.

Used to report dominant colors and to decide whether detection settings
should be adapted for a given image.
"""

from collections import Counter
from typing import List

import numpy as np

from .color_range import HUE_MAX, ColorRange, in_range_mask
from .color_space import rgb_to_hsv_array
from .mask_detection import ALPHA_THRESHOLD
from .models import HSVColor, ImageAnalysis

# Analyze one pixel out of every SAMPLE_STRIDE
SAMPLE_STRIDE = 16
DOMINANT_COLOR_COUNT = 5

HUE_BUCKET = 10
SATURATION_BUCKET = 20
VALUE_BUCKET = 20


def _quantize(values: np.ndarray, step: int) -> np.ndarray:
    """Round to the nearest multiple of step (halves round up)."""
    return (np.floor(values / step + 0.5) * step).astype(np.int32)


def analyze_image_colors(
    pixels: np.ndarray,
    color_range: ColorRange,
    tolerance: float = 0,
) -> ImageAnalysis:
    """
    Sample the image and summarize its color distribution.

    Every 16th pixel (in row-major order) is sampled; transparent samples
    are skipped. Samples are grouped into buckets of 10 degrees hue and
    20 points saturation/value; hues of 355 and above share the 0 bucket.

    Args:
        pixels: RGBA pixel buffer, uint8 of shape (height, width, 4)
        color_range: Target constraint color range
        tolerance: Tolerance used when checking for the target color

    Returns:
        ImageAnalysis with the top-5 buckets, the full distribution and
        whether any sample matched the target range
    """
    samples = pixels.reshape(-1, 4)[::SAMPLE_STRIDE]
    samples = samples[samples[:, 3] >= ALPHA_THRESHOLD]

    if len(samples) == 0:
        return ImageAnalysis()

    h, s, v = rgb_to_hsv_array(samples)

    keys = [
        f"{hq}-{sq}-{vq}"
        for hq, sq, vq in zip(
            (_quantize(h, HUE_BUCKET) % HUE_MAX).tolist(),
            _quantize(s, SATURATION_BUCKET).tolist(),
            _quantize(v, VALUE_BUCKET).tolist(),
        )
    ]
    distribution = Counter(keys)

    # most_common keeps first-seen order among equal counts
    dominant_colors: List[HSVColor] = [
        parse_bucket_key(key) for key, _ in distribution.most_common(DOMINANT_COLOR_COUNT)
    ]

    has_target_color = bool(in_range_mask(h, s, v, color_range, tolerance).any())

    return ImageAnalysis(
        dominant_colors=dominant_colors,
        color_distribution=dict(distribution),
        has_target_color=has_target_color,
    )


def parse_bucket_key(key: str) -> HSVColor:
    """Convert an "h-s-v" bucket key back to an HSVColor."""
    h, s, v = (int(part) for part in key.split("-"))
    return HSVColor(h=h, s=s, v=v)
