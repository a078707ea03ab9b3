"""
Tests for connected-component region extraction.
"""

import numpy as np

from constraint_detection.color_detection.region_extraction import (
    build_region,
    find_connected_components,
)
from tests.fixtures.constraint_fixtures import create_binary_mask


class TestFindConnectedComponents:
    """Tests for find_connected_components."""

    def test_empty_mask(self):
        assert find_connected_components(create_binary_mask()) == []

    def test_zero_size_mask(self):
        assert find_connected_components(np.zeros((0, 0), dtype=np.uint8)) == []

    def test_two_squares(self):
        mask = create_binary_mask((200, 200))
        mask[30:50, 30:50] = 255
        mask[120:140, 120:140] = 255

        regions = find_connected_components(mask)

        assert len(regions) == 2
        first, second = regions
        assert (first.x, first.y, first.width, first.height) == (30, 30, 20, 20)
        assert (second.x, second.y) == (120, 120)
        assert first.area == 400
        assert first.confidence == 100
        assert first.center == (40, 40)
        assert first.bounding_box == (30, 30, 49, 49)

    def test_raster_order(self):
        """Test that regions are ordered by their first pixel in row-major scan."""
        mask = create_binary_mask((100, 100))
        mask[50:60, 5:15] = 255   # lower, left
        mask[10:20, 70:80] = 255  # upper, right
        mask[10:20, 30:40] = 255  # upper, middle

        regions = find_connected_components(mask, min_area=1)

        assert [(r.x, r.y) for r in regions] == [(30, 10), (70, 10), (5, 50)]

    def test_l_shape(self):
        """Test confidence and center for a non-rectangular region."""
        mask = create_binary_mask()
        mask[10:20, 10:13] = 255
        mask[17:20, 10:20] = 255

        regions = find_connected_components(mask, min_area=1)

        assert len(regions) == 1
        region = regions[0]
        assert region.area == 51
        assert (region.width, region.height) == (10, 10)
        assert region.confidence == 51
        # Bounding-box midpoint, not the pixel centroid
        assert region.center == (15, 15)

    def test_diagonal_pixels_not_connected(self):
        mask = create_binary_mask()
        mask[5, 5] = 255
        mask[6, 6] = 255

        regions = find_connected_components(mask, min_area=1)

        assert len(regions) == 2
        assert all(r.area == 1 for r in regions)

    def test_min_area_filter(self):
        mask = create_binary_mask()
        mask[5:10, 5:10] = 255      # 25 px
        mask[20:30, 20:30] = 255    # 100 px

        regions = find_connected_components(mask, min_area=50)

        assert len(regions) == 1
        assert regions[0].area == 100

    def test_max_area_filter(self):
        mask = create_binary_mask()
        mask[5:10, 5:10] = 255
        mask[20:30, 20:30] = 255

        regions = find_connected_components(mask, min_area=1, max_area=99)

        assert len(regions) == 1
        assert regions[0].area == 25

    def test_area_bounds_inclusive(self):
        mask = create_binary_mask()
        mask[20:30, 20:30] = 255
        assert len(find_connected_components(mask, min_area=100, max_area=100)) == 1

    def test_large_region(self):
        """Test that a region far larger than the recursion limit is filled."""
        mask = np.full((500, 500), 255, dtype=np.uint8)

        regions = find_connected_components(mask, min_area=1, max_area=10**6)

        assert len(regions) == 1
        assert regions[0].area == 250000
        assert regions[0].bounding_box == (0, 0, 499, 499)

    def test_spiral_region(self):
        """Test a long, winding single-pixel-wide path."""
        mask = create_binary_mask((41, 41))
        for row in range(0, 41, 4):
            mask[row, :] = 255
        for i, row in enumerate(range(0, 37, 4)):
            column = 40 if i % 2 == 0 else 0
            mask[row:row + 5, column] = 255

        regions = find_connected_components(mask, min_area=1, max_area=10**6)

        assert len(regions) == 1
        assert regions[0].area == int(np.count_nonzero(mask))

    def test_region_invariants(self):
        """Test geometry invariants on a random mask."""
        rng = np.random.default_rng(11)
        mask = np.where(rng.random((64, 48)) < 0.5, 255, 0).astype(np.uint8)

        regions = find_connected_components(mask, min_area=1, max_area=10**6)

        assert sum(r.area for r in regions) == np.count_nonzero(mask)
        for region in regions:
            x1, y1, x2, y2 = region.bounding_box
            assert 0 <= x1 <= x2 < 48
            assert 0 <= y1 <= y2 < 64
            assert region.width == x2 - x1 + 1
            assert region.height == y2 - y1 + 1
            assert 1 <= region.area <= region.bounding_box_area
            assert 0 < region.confidence <= 100

    def test_deterministic(self):
        rng = np.random.default_rng(5)
        mask = np.where(rng.random((50, 50)) < 0.55, 255, 0).astype(np.uint8)
        assert find_connected_components(mask, min_area=1) == find_connected_components(mask, min_area=1)

    def test_input_not_modified(self):
        mask = create_binary_mask()
        mask[10:20, 10:20] = 255
        original = mask.copy()
        find_connected_components(mask)
        np.testing.assert_array_equal(mask, original)


class TestBuildRegion:
    """Tests for build_region."""

    def test_full_box(self):
        region = build_region(0, 0, 9, 4, 50)
        assert (region.width, region.height) == (10, 5)
        assert region.confidence == 100
        assert region.center == (5, 3)  # 2.5 rounds up

    def test_confidence_rounding(self):
        # 2 of 3 pixels -> 66.67%
        region = build_region(0, 0, 2, 0, 2)
        assert region.confidence == 67
