"""
Command-line interface for constraint detection.

Usage:
    python -m constraint_detection detect <image_path> [--output json|visual] [--preset ALL_GREEN]
    python -m constraint_detection analyze <image_path>
    python -m constraint_detection validate <image_path> --min-width 50 --min-height 50
    python -m constraint_detection --help
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from constraint_detection.color_detection.color_range import preset_names
from constraint_detection.exceptions import ColorDetectionError

logger = logging.getLogger(__name__)


def _add_settings_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by every command that runs detection."""
    parser.add_argument(
        "image_path",
        type=str,
        help="Path to the input image",
    )
    parser.add_argument(
        "--preset",
        choices=preset_names(),
        default=None,
        help="Named green color range (default: ALL_GREEN)",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="YAML file with detection settings",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        help="Color range tolerance percentage (default: 10)",
    )
    parser.add_argument(
        "--min-area",
        type=int,
        help="Minimum region area in pixels (default: 50)",
    )
    parser.add_argument(
        "--max-area",
        type=int,
        help="Maximum region area in pixels (default: 50000)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )


def setup_argparse() -> argparse.ArgumentParser:
    """Set up argument parser."""
    parser = argparse.ArgumentParser(
        prog="constraint-detection",
        description="Detect color-marked logo placement areas in product templates",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # detect
    detect_parser = subparsers.add_parser(
        "detect",
        help="Detect constraint regions in an image",
    )
    _add_settings_arguments(detect_parser)
    detect_parser.add_argument(
        "--output",
        "-o",
        choices=["json", "visual"],
        default="json",
        help="Output format (default: json)",
    )
    detect_parser.add_argument(
        "--output-path",
        type=str,
        help="Output file path (for visual mode)",
    )
    detect_parser.add_argument(
        "--adapt",
        action="store_true",
        help="Re-run detection with settings adapted to the image",
    )

    # analyze
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Report image color analysis and recommended settings",
    )
    _add_settings_arguments(analyze_parser)

    # validate
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate detected regions as a logo placement area",
    )
    _add_settings_arguments(validate_parser)
    validate_parser.add_argument(
        "--placement",
        choices=["horizontal", "vertical", "all_over"],
        default="horizontal",
        help="Logo placement type (default: horizontal)",
    )
    validate_parser.add_argument("--min-width", type=int, default=0, help="Required minimum width")
    validate_parser.add_argument("--min-height", type=int, default=0, help="Required minimum height")
    validate_parser.add_argument("--max-width", type=int, default=10000, help="Maximum logo width")
    validate_parser.add_argument("--max-height", type=int, default=10000, help="Maximum logo height")

    return parser


def build_settings(args):
    """Build DetectionSettings from --config, --preset and explicit overrides."""
    from constraint_detection.config.detection_config import DetectionSettings

    if args.config:
        settings = DetectionSettings.from_yaml(args.config)
    else:
        settings = DetectionSettings.default()

    overrides: Dict[str, Any] = {}
    if args.preset:
        overrides["color_range"] = DetectionSettings.from_preset(args.preset).color_range
    if args.tolerance is not None:
        overrides["tolerance"] = args.tolerance
    if args.min_area is not None:
        overrides["min_area"] = args.min_area
    if args.max_area is not None:
        overrides["max_area"] = args.max_area

    return settings.merged(overrides)


def _load_image(image_path: Path) -> Optional[bytes]:
    if not image_path.exists():
        print(f"Error: Image not found: {image_path}", file=sys.stderr)
        return None
    return image_path.read_bytes()


def cmd_detect(args) -> int:
    """Handle detect command."""
    from constraint_detection.color_detection.detector import ColorDetectionService

    image_path = Path(args.image_path)
    data = _load_image(image_path)
    if data is None:
        return 1

    service = ColorDetectionService(build_settings(args))
    result = service.analyze_image(data)

    if args.adapt:
        adapted = service.adapt_settings_for_image(result.image_analysis)
        logger.info(
            f"Re-running with adapted settings (tolerance={adapted.tolerance}, "
            f"kernel={adapted.noise_reduction.kernel_size})"
        )
        result = service.analyze_image(data, adapted)

    if args.output == "json":
        print(json.dumps(result.to_dict(), indent=2))

    elif args.output == "visual":
        output_path = args.output_path
        if output_path is None:
            output_path = str(image_path.stem) + "_constraints.png"

        Path(output_path).write_bytes(service.create_visualization_mask(data, result.regions))
        print(f"Visualization saved to: {output_path}")
        print(f"Regions: {len(result.regions)} (total area: {result.total_area}px)")

    return 0


def cmd_analyze(args) -> int:
    """Handle analyze command - color statistics plus adapted settings."""
    from constraint_detection.color_detection.detector import ColorDetectionService

    data = _load_image(Path(args.image_path))
    if data is None:
        return 1

    service = ColorDetectionService(build_settings(args))
    result = service.analyze_image(data)
    adapted = service.adapt_settings_for_image(result.image_analysis)

    output = {
        "image_dimensions": {"width": result.image_shape[1], "height": result.image_shape[0]},
        "image_analysis": result.image_analysis.to_dict(),
        "color_variety": result.image_analysis.color_variety,
        "current_settings": service.get_settings().to_dict(),
        "recommended_settings": adapted.to_dict(),
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_validate(args) -> int:
    """Handle validate command."""
    from constraint_detection.color_detection.detector import ColorDetectionService
    from constraint_detection.color_detection.placement import (
        ConstraintDimensions,
        PlacementType,
        calculate_metrics,
        generate_recommendations,
        validate_constraint,
    )

    data = _load_image(Path(args.image_path))
    if data is None:
        return 1

    try:
        dimensions = ConstraintDimensions(
            min_width=args.min_width,
            min_height=args.min_height,
            max_width=args.max_width,
            max_height=args.max_height,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    placement = PlacementType(args.placement)
    result = ColorDetectionService(build_settings(args)).analyze_image(data)
    height, width = result.image_shape

    validation = validate_constraint(result.regions, dimensions, width, height, placement)
    output = {
        "image_dimensions": {"width": width, "height": height},
        "region_count": len(result.regions),
        "validation": validation.to_dict(),
        "recommendations": generate_recommendations(
            result.regions, validation, width, height, placement
        ),
    }
    if result.regions:
        output["metrics"] = calculate_metrics(result.regions, width, height).to_dict()

    print(json.dumps(output, indent=2))
    return 0


COMMANDS = {
    "detect": cmd_detect,
    "analyze": cmd_analyze,
    "validate": cmd_validate,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = setup_argparse()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        return COMMANDS[args.command](args)
    except (ColorDetectionError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
