"""
ColorDetectionService: orchestrates the constraint detection pipeline.

Pipeline: decode -> pixel classification -> noise reduction -> edge
smoothing -> connected components, with a color analysis of the source
image alongside.
"""

import logging
import time
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from ..config.detection_config import DetectionSettings
from .analysis import analyze_image_colors
from .color_space import round_half_up
from .image_io import ImageInput, decode_image, encode_png
from .mask_detection import apply_edge_smoothing, apply_noise_reduction, create_color_mask
from .models import ColorDetectionResult, DetectedRegion, ImageAnalysis
from .region_extraction import find_connected_components
from .visualization import draw_regions

logger = logging.getLogger(__name__)

SettingsOverride = Union[Dict[str, Any], DetectionSettings]

# adapt_settings_for_image thresholds
MAX_ADAPTED_TOLERANCE = 25
TOLERANCE_STEP = 10
HIGH_VARIETY_BUCKETS = 50
LOW_VARIETY_BUCKETS = 20


class ColorDetectionService:
    """
    Detects chroma-colored constraint regions in product template images.

    The service holds a "current" DetectionSettings value that is replaced
    wholesale by update_settings(); each call works on its own pixel buffer
    and masks, so one instance can serve concurrent calls.

    Example:
        >>> service = ColorDetectionService()
        >>> result = service.analyze_image(png_bytes)
        >>> print(f"Found {len(result.regions)} regions")
    """

    def __init__(self, settings: Optional[SettingsOverride] = None):
        """
        Initialize the detection service.

        Args:
            settings: Initial settings, or a partial dict merged over the
                defaults. If None, uses the ALL_GREEN defaults.
        """
        self._settings = DetectionSettings.default().merged(settings)

    def analyze_image(
        self,
        image: ImageInput,
        settings_override: Optional[SettingsOverride] = None,
    ) -> ColorDetectionResult:
        """
        Detect constraint regions in an image.

        Args:
            image: Encoded image bytes, an image path, or an RGBA array
            settings_override: Settings (or a partial dict) applied for this
                call only; the current settings are not modified

        Returns:
            ColorDetectionResult with regions, totals and image analysis

        Raises:
            ImageDecodeError: If the image cannot be decoded
            InvalidSettingsError: If the override is invalid
        """
        start_time = time.perf_counter()
        settings = self._settings.merged(settings_override)

        pixels = decode_image(image)
        height, width = pixels.shape[:2]
        logger.info(f"Analyzing image: {width}x{height}")

        regions = self.detect_regions(pixels, settings)
        image_analysis = analyze_image_colors(pixels, settings.color_range, settings.tolerance)

        total_area = sum(region.area for region in regions)
        average_confidence = (
            sum(region.confidence for region in regions) / len(regions) if regions else 0
        )
        processing_time = (time.perf_counter() - start_time) * 1000

        logger.info(
            f"Detected {len(regions)} regions (total area {total_area}px) "
            f"in {processing_time:.1f}ms"
        )

        return ColorDetectionResult(
            regions=regions,
            total_area=total_area,
            average_confidence=round_half_up(average_confidence),
            processing_time=processing_time,
            image_analysis=image_analysis,
            image_shape=(height, width),
        )

    def detect_regions(
        self,
        pixels: np.ndarray,
        settings: Optional[DetectionSettings] = None,
    ) -> List[DetectedRegion]:
        """
        Run the mask pipeline on an already-decoded RGBA buffer.

        Args:
            pixels: RGBA pixel buffer, uint8 of shape (height, width, 4)
            settings: Settings to use; defaults to the current settings

        Returns:
            List of DetectedRegion objects in raster-scan order
        """
        settings = settings or self._settings

        stage_start = time.perf_counter()
        mask = create_color_mask(pixels, settings.color_range, settings.tolerance)
        logger.debug(
            f"Classified {np.count_nonzero(mask)} matching pixels "
            f"({(time.perf_counter() - stage_start) * 1000:.1f}ms)"
        )

        if settings.noise_reduction.enabled:
            stage_start = time.perf_counter()
            mask = apply_noise_reduction(
                mask,
                settings.noise_reduction.kernel_size,
                settings.noise_reduction.iterations,
            )
            logger.debug(f"Noise reduction done ({(time.perf_counter() - stage_start) * 1000:.1f}ms)")

        if settings.edge_smoothing.enabled:
            stage_start = time.perf_counter()
            mask = apply_edge_smoothing(
                mask,
                settings.edge_smoothing.blur_radius,
                settings.edge_smoothing.threshold,
            )
            logger.debug(f"Edge smoothing done ({(time.perf_counter() - stage_start) * 1000:.1f}ms)")

        return find_connected_components(mask, settings.min_area, settings.max_area)

    def adapt_settings_for_image(self, image_analysis: ImageAnalysis) -> DetectionSettings:
        """
        Recommend settings for an image based on its color analysis.

        - No target color found: tolerance is raised by 10, capped at 25;
          a tolerance already above the cap is left unchanged.
        - More than 50 color buckets: stronger noise reduction (5x5, 2 passes).
        - Fewer than 20 color buckets: light noise reduction (3x3, 1 pass).

        This is a heuristic. The current settings are never modified.

        Args:
            image_analysis: Analysis from a previous analyze_image call

        Returns:
            New DetectionSettings value
        """
        adapted = self._settings

        if not image_analysis.has_target_color:
            tolerance = min(MAX_ADAPTED_TOLERANCE, adapted.tolerance + TOLERANCE_STEP)
            adapted = replace(adapted, tolerance=max(tolerance, adapted.tolerance))

        color_variety = image_analysis.color_variety
        if color_variety > HIGH_VARIETY_BUCKETS:
            adapted = replace(
                adapted,
                noise_reduction=replace(adapted.noise_reduction, kernel_size=5, iterations=2),
            )
        elif color_variety < LOW_VARIETY_BUCKETS:
            adapted = replace(
                adapted,
                noise_reduction=replace(adapted.noise_reduction, kernel_size=3, iterations=1),
            )

        logger.debug(
            f"Adapted settings: tolerance={adapted.tolerance}, "
            f"kernel={adapted.noise_reduction.kernel_size}, "
            f"iterations={adapted.noise_reduction.iterations} "
            f"(variety={color_variety}, has_target={image_analysis.has_target_color})"
        )
        return adapted

    def update_settings(self, new_settings: SettingsOverride) -> None:
        """
        Replace the current settings with a merged copy.

        Args:
            new_settings: Full DetectionSettings or a partial (nested) dict

        Raises:
            InvalidSettingsError: If the resulting settings are invalid
        """
        self._settings = self._settings.merged(new_settings)

    def get_settings(self) -> DetectionSettings:
        """Get current detection settings."""
        return self._settings

    def create_visualization_mask(
        self,
        image: ImageInput,
        regions: Sequence[DetectedRegion],
    ) -> bytes:
        """
        Draw detected regions over the image for inspection.

        Args:
            image: Image the regions were detected in (bytes, path or RGBA array)
            regions: Regions to draw

        Returns:
            PNG-encoded visualization

        Raises:
            ImageDecodeError: If the image cannot be decoded
        """
        pixels = decode_image(image)
        return encode_png(draw_regions(pixels, regions))


def detect_constraints(
    image: ImageInput,
    settings: Optional[SettingsOverride] = None,
) -> ColorDetectionResult:
    """Detect constraint regions with a fresh service using the given settings."""
    return ColorDetectionService(settings).analyze_image(image)


def create_constraint_visualization(
    image: ImageInput,
    regions: Sequence[DetectedRegion],
) -> bytes:
    """Render regions over an image and return PNG bytes."""
    return ColorDetectionService().create_visualization_mask(image, regions)
