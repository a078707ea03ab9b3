"""
Binary mask creation and refinement.

Every function returns a new uint8 mask (0 or 255) of shape (height, width)
and leaves its input untouched.
"""

import math

import cv2
import numpy as np

from .color_range import ColorRange, in_range_mask
from .color_space import rgb_to_hsv_array

# Pixels with alpha below this are treated as transparent
ALPHA_THRESHOLD = 128


def create_color_mask(
    pixels: np.ndarray,
    color_range: ColorRange,
    tolerance: float = 0,
) -> np.ndarray:
    """
    Create a binary mask for pixels within an HSV color range.

    Args:
        pixels: RGBA pixel buffer, uint8 of shape (height, width, 4)
        color_range: HSV range to detect (hue in degrees, s/v in percent)
        tolerance: Tolerance percentage widening the range

    Returns:
        Binary mask (uint8) where matching opaque pixels are 255, others are 0

    Example:
        >>> mask = create_color_mask(pixels, GREEN_COLOR_RANGES["ALL_GREEN"], tolerance=10)
    """
    height, width = pixels.shape[:2]
    if height == 0 or width == 0:
        return np.zeros((height, width), dtype=np.uint8)

    h, s, v = rgb_to_hsv_array(pixels)
    matched = in_range_mask(h, s, v, color_range, tolerance)

    # Skip transparent pixels
    matched &= pixels[..., 3] >= ALPHA_THRESHOLD

    mask = np.zeros((height, width), dtype=np.uint8)
    mask[matched] = 255
    return mask


def _zero_border(mask: np.ndarray, radius: int) -> np.ndarray:
    """Clear the outer `radius` rows and columns in place."""
    if radius > 0:
        mask[:radius, :] = 0
        mask[-radius:, :] = 0
        mask[:, :radius] = 0
        mask[:, -radius:] = 0
    return mask


def apply_noise_reduction(
    mask: np.ndarray,
    kernel_size: int = 3,
    iterations: int = 1,
) -> np.ndarray:
    """
    Remove speckle noise with a morphological opening (erode, then dilate).

    Border policy: pixels within kernel_size // 2 of any image edge are never
    computed by either pass and are therefore 0 in the output. Interior pixels
    take the min/max over their full square neighborhood.

    Args:
        mask: Binary mask (uint8)
        kernel_size: Side length of the square structuring element (odd)
        iterations: Number of erode+dilate rounds

    Returns:
        Cleaned binary mask
    """
    if mask.size == 0:
        return mask.copy()

    radius = kernel_size // 2
    height, width = mask.shape[:2]

    result = mask.copy()
    if iterations <= 0:
        return result

    # Image too small to have an interior: everything is border
    if height <= 2 * radius or width <= 2 * radius:
        return np.zeros_like(mask)

    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (kernel_size, kernel_size))

    for _ in range(iterations):
        eroded = _zero_border(cv2.erode(result, kernel), radius)
        result = _zero_border(cv2.dilate(eroded, kernel), radius)

    return result


def gaussian_kernel(blur_radius: float) -> np.ndarray:
    """
    Build a normalized 1-D Gaussian kernel.

    Size is ceil(2 * radius) + 1 and sigma is radius / 3.
    """
    size = int(math.ceil(blur_radius * 2)) + 1
    half = size // 2
    sigma = blur_radius / 3

    offsets = np.arange(size, dtype=np.float64) - half
    kernel = np.exp(-(offsets * offsets) / (2 * sigma * sigma))
    return kernel / kernel.sum()


def _blur_axis(values: np.ndarray, kernel: np.ndarray, axis: int) -> np.ndarray:
    """Convolve along one axis, clamping samples to the image edge."""
    half = len(kernel) // 2
    pad = [(0, 0), (0, 0)]
    pad[axis] = (half, half)
    padded = np.pad(values.astype(np.float64), pad, mode="edge")

    length = values.shape[axis]
    total = np.zeros(values.shape, dtype=np.float64)
    for i, weight in enumerate(kernel):
        window = padded[i:i + length, :] if axis == 0 else padded[:, i:i + length]
        total += window * weight
    return total


def apply_edge_smoothing(
    mask: np.ndarray,
    blur_radius: float = 1,
    threshold: int = 128,
) -> np.ndarray:
    """
    Smooth jagged mask edges with a separable Gaussian blur, then re-binarize.

    The horizontal pass is rounded to uint8 before the vertical pass. After
    the vertical pass, values >= threshold become 255 and the rest 0.

    Args:
        mask: Binary mask (uint8)
        blur_radius: Blur radius in pixels; 0 skips the blur
        threshold: Cut-off (0-255) applied to the blurred intensities

    Returns:
        Smoothed binary mask
    """
    if mask.size == 0:
        return mask.copy()

    if blur_radius <= 0:
        blurred = mask.astype(np.float64)
    else:
        kernel = gaussian_kernel(blur_radius)
        horizontal = np.floor(_blur_axis(mask, kernel, axis=1) + 0.5)
        horizontal = np.clip(horizontal, 0, 255).astype(np.uint8)
        blurred = np.floor(_blur_axis(horizontal, kernel, axis=0) + 0.5)

    result = np.zeros(mask.shape, dtype=np.uint8)
    result[blurred >= threshold] = 255
    return result

