"""
Debug visualization of detected constraint regions.
"""

from typing import Sequence, Tuple

import cv2
import numpy as np

from .models import DetectedRegion

SOURCE_OPACITY = 0.5
FILL_OPACITY = 0.3
OUTLINE_THICKNESS = 2
CENTER_RADIUS = 3
LABEL_FONT = cv2.FONT_HERSHEY_SIMPLEX
LABEL_SCALE = 0.4
LABEL_COLOR = (255, 255, 255, 255)


def region_hue(index: int) -> int:
    """Hue (degrees) used to draw the region at `index`."""
    return (index * 60) % 360


def hsl_to_rgb(hue: int, saturation: float, lightness: float) -> Tuple[int, int, int]:
    """
    Convert an HSL color to 8-bit RGB.

    Args:
        hue: Hue in degrees (0-360)
        saturation: Saturation (0.0-1.0)
        lightness: Lightness (0.0-1.0)
    """
    # OpenCV stores 8-bit HLS hue as degrees / 2
    hls = np.uint8([[[(hue % 360) // 2, round(lightness * 255), round(saturation * 255)]]])
    r, g, b = cv2.cvtColor(hls, cv2.COLOR_HLS2RGB)[0, 0]
    return int(r), int(g), int(b)


def _fill_translucent(
    canvas: np.ndarray,
    box: Tuple[int, int, int, int],
    color: Tuple[int, int, int],
    opacity: float,
) -> None:
    """Composite a flat color over an inclusive (x1, y1, x2, y2) box (source-over)."""
    x1, y1, x2, y2 = box
    patch = canvas[y1:y2 + 1, x1:x2 + 1].astype(np.float64) / 255
    dst_rgb = patch[..., :3]
    dst_alpha = patch[..., 3:4]

    out_alpha = opacity + dst_alpha * (1 - opacity)
    src_rgb = np.array(color, dtype=np.float64) / 255
    out_rgb = (src_rgb * opacity + dst_rgb * dst_alpha * (1 - opacity)) / out_alpha

    composited = np.concatenate([out_rgb, out_alpha], axis=-1)
    canvas[y1:y2 + 1, x1:x2 + 1] = np.clip(np.floor(composited * 255 + 0.5), 0, 255).astype(np.uint8)


def draw_regions(pixels: np.ndarray, regions: Sequence[DetectedRegion]) -> np.ndarray:
    """
    Render regions over a half-transparent copy of the source image.

    For each region: a colored outline, a translucent fill over its bounding
    box, a dot at its center and an "index: confidence%" label.

    Args:
        pixels: RGBA pixel buffer of the source image
        regions: Regions to draw, in display order

    Returns:
        New RGBA uint8 image; the source buffer is not modified
    """
    canvas = np.array(pixels, dtype=np.uint8, copy=True)
    canvas[..., 3] = np.floor(canvas[..., 3] * SOURCE_OPACITY + 0.5).astype(np.uint8)

    height, width = canvas.shape[:2]

    for index, region in enumerate(regions):
        x1, y1, x2, y2 = region.bounding_box
        # Regions from another image may fall partly outside this one
        x1, x2 = max(0, x1), min(width - 1, x2)
        y1, y2 = max(0, y1), min(height - 1, y2)
        if x1 > x2 or y1 > y2:
            continue

        hue = region_hue(index)
        outline = hsl_to_rgb(hue, 0.7, 0.5)
        center_color = hsl_to_rgb(hue, 0.7, 0.3)

        cv2.rectangle(canvas, (x1, y1), (x2, y2), outline + (255,), OUTLINE_THICKNESS)
        _fill_translucent(canvas, (x1, y1, x2, y2), outline, FILL_OPACITY)
        cv2.circle(canvas, region.center, CENTER_RADIUS, center_color + (255,), -1)
        cv2.putText(
            canvas,
            f"{index + 1}: {region.confidence}%",
            (region.x + 5, region.y + 15),
            LABEL_FONT,
            LABEL_SCALE,
            LABEL_COLOR,
            1,
            cv2.LINE_AA,
        )

    return canvas

