"""
Connected-component extraction from a binary mask.
"""

from typing import List

import numpy as np

from .color_space import round_half_up
from .models import DetectedRegion


def find_connected_components(
    mask: np.ndarray,
    min_area: int = 50,
    max_area: int = 50000,
) -> List[DetectedRegion]:
    """
    Find 4-connected regions of 255-valued pixels.

    Pixels are scanned in raster order, so the returned list is ordered by
    the top-left-most pixel of each region and is deterministic.

    Args:
        mask: Binary mask (uint8)
        min_area: Smallest region area (pixels) to keep
        max_area: Largest region area (pixels) to keep

    Returns:
        List of DetectedRegion objects whose area lies in [min_area, max_area]

    Example:
        >>> regions = find_connected_components(mask, min_area=50, max_area=50000)
    """
    if mask.size == 0:
        return []

    height, width = mask.shape[:2]
    # Plain byte buffers keep per-pixel indexing cheap in the fill loop
    matched = mask.reshape(-1) == 255
    flat_mask = matched.tobytes()
    visited = bytearray(height * width)

    regions: List[DetectedRegion] = []
    for start in np.flatnonzero(matched).tolist():
        if visited[start]:
            continue

        region = flood_fill(flat_mask, visited, start, width, height)
        if min_area <= region.area <= max_area:
            regions.append(region)

    return regions


def flood_fill(
    flat_mask: bytes,
    visited: bytearray,
    start: int,
    width: int,
    height: int,
) -> DetectedRegion:
    """
    Fill the 4-connected component containing `start` using an explicit stack.

    Marks every member pixel in `visited` and accumulates the bounding box
    and pixel count; member coordinates are not retained.

    Args:
        flat_mask: Match flags (0/1) flattened in row-major order
        visited: Visited flags, same layout as flat_mask (mutated)
        start: Flat index of the seed pixel
        width: Image width
        height: Image height

    Returns:
        DetectedRegion describing the component
    """
    start_y, start_x = divmod(start, width)
    min_x = max_x = start_x
    min_y = max_y = start_y
    area = 0

    visited[start] = 1
    stack = [start]

    while stack:
        index = stack.pop()
        y, x = divmod(index, width)
        area += 1

        if x < min_x:
            min_x = x
        elif x > max_x:
            max_x = x
        if y < min_y:
            min_y = y
        elif y > max_y:
            max_y = y

        # 4-connected neighbors
        if x + 1 < width:
            neighbor = index + 1
            if flat_mask[neighbor] and not visited[neighbor]:
                visited[neighbor] = 1
                stack.append(neighbor)
        if x > 0:
            neighbor = index - 1
            if flat_mask[neighbor] and not visited[neighbor]:
                visited[neighbor] = 1
                stack.append(neighbor)
        if y + 1 < height:
            neighbor = index + width
            if flat_mask[neighbor] and not visited[neighbor]:
                visited[neighbor] = 1
                stack.append(neighbor)
        if y > 0:
            neighbor = index - width
            if flat_mask[neighbor] and not visited[neighbor]:
                visited[neighbor] = 1
                stack.append(neighbor)

    return build_region(min_x, min_y, max_x, max_y, area)


def build_region(min_x: int, min_y: int, max_x: int, max_y: int, area: int) -> DetectedRegion:
    """
    Build a DetectedRegion from a component's extent and pixel count.

    Confidence is the component's fill density within its bounding box.
    The center is the bounding-box midpoint, which can differ from the pixel
    centroid for irregular shapes.
    """
    region_width = max_x - min_x + 1
    region_height = max_y - min_y + 1
    box_area = region_width * region_height

    confidence = (area / box_area) * 100 if box_area > 0 else 0.0

    return DetectedRegion(
        x=min_x,
        y=min_y,
        width=region_width,
        height=region_height,
        area=area,
        confidence=round_half_up(confidence),
        center=(
            round_half_up(min_x + region_width / 2),
            round_half_up(min_y + region_height / 2),
        ),
        bounding_box=(min_x, min_y, max_x, max_y),
    )
