"""
Detection settings for constraint color detection.

Settings are frozen values: callers derive modified copies with merged()
or dataclasses.replace() instead of mutating them.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Union

from ..color_detection.color_range import GREEN_COLOR_RANGES, ColorRange, get_preset_range
from ..exceptions import InvalidSettingsError
from .validation import check_bool, check_int, check_mapping, check_number

# camelCase keys sent by the web application -> snake_case field names
_CAMEL_TO_SNAKE = {
    "colorRange": "color_range",
    "minArea": "min_area",
    "maxArea": "max_area",
    "noiseReduction": "noise_reduction",
    "edgeSmoothing": "edge_smoothing",
    "kernelSize": "kernel_size",
    "blurRadius": "blur_radius",
    "hMin": "h_min",
    "hMax": "h_max",
    "sMin": "s_min",
    "sMax": "s_max",
    "vMin": "v_min",
    "vMax": "v_max",
}


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Translate camelCase keys to snake_case, leaving nested values alone."""
    return {_CAMEL_TO_SNAKE.get(key, key): value for key, value in data.items()}


@dataclass(frozen=True)
class NoiseReductionSettings:
    """Settings for the morphological opening pass."""
    enabled: bool = True
    kernel_size: int = 3
    iterations: int = 1

    def __post_init__(self):
        """Validate noise reduction settings."""
        check_bool("enabled", self.enabled)
        check_int("kernel_size", self.kernel_size)
        check_int("iterations", self.iterations)
        if self.kernel_size < 1 or self.kernel_size % 2 == 0:
            raise InvalidSettingsError(
                f"kernel_size must be an odd number >= 1, got {self.kernel_size}"
            )
        if self.iterations < 0:
            raise InvalidSettingsError(f"iterations must be >= 0, got {self.iterations}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "kernel_size": self.kernel_size,
            "iterations": self.iterations,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NoiseReductionSettings":
        check_mapping("noise_reduction", data)
        data = _normalize_keys(data)
        return cls(
            enabled=data.get("enabled", True),
            kernel_size=data.get("kernel_size", 3),
            iterations=data.get("iterations", 1),
        )


@dataclass(frozen=True)
class EdgeSmoothingSettings:
    """Settings for the Gaussian blur + threshold pass."""
    enabled: bool = True
    blur_radius: float = 1
    threshold: int = 128

    def __post_init__(self):
        """Validate edge smoothing settings."""
        check_bool("enabled", self.enabled)
        check_number("blur_radius", self.blur_radius)
        check_number("threshold", self.threshold)
        if self.blur_radius < 0:
            raise InvalidSettingsError(f"blur_radius must be >= 0, got {self.blur_radius}")
        if not (0 <= self.threshold <= 255):
            raise InvalidSettingsError(f"threshold must be 0-255, got {self.threshold}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "blur_radius": self.blur_radius,
            "threshold": self.threshold,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EdgeSmoothingSettings":
        check_mapping("edge_smoothing", data)
        data = _normalize_keys(data)
        return cls(
            enabled=data.get("enabled", True),
            blur_radius=data.get("blur_radius", 1),
            threshold=data.get("threshold", 128),
        )


@dataclass(frozen=True)
class DetectionSettings:
    """
    Configuration for one constraint detection call.

    Attributes:
        color_range: HSV range of the constraint color
        tolerance: Percentage by which the range is widened (0-100)
        min_area: Smallest region (in pixels) to report
        max_area: Largest region (in pixels) to report
        noise_reduction: Morphological opening settings
        edge_smoothing: Blur + threshold settings
    """
    color_range: ColorRange = field(default_factory=lambda: GREEN_COLOR_RANGES["ALL_GREEN"])
    tolerance: float = 10
    min_area: int = 50
    max_area: int = 50000
    noise_reduction: NoiseReductionSettings = field(default_factory=NoiseReductionSettings)
    edge_smoothing: EdgeSmoothingSettings = field(default_factory=EdgeSmoothingSettings)

    def __post_init__(self):
        """Validate configuration values."""
        self._validate()

    def _validate(self):
        # Nested settings may arrive as plain dicts
        if isinstance(self.color_range, dict):
            object.__setattr__(self, "color_range", ColorRange.from_dict(self.color_range))
        if isinstance(self.noise_reduction, dict):
            object.__setattr__(
                self,
                "noise_reduction",
                NoiseReductionSettings.from_dict(self.noise_reduction),
            )
        if isinstance(self.edge_smoothing, dict):
            object.__setattr__(
                self,
                "edge_smoothing",
                EdgeSmoothingSettings.from_dict(self.edge_smoothing),
            )

        for name, expected in (
            ("color_range", ColorRange),
            ("noise_reduction", NoiseReductionSettings),
            ("edge_smoothing", EdgeSmoothingSettings),
        ):
            if not isinstance(getattr(self, name), expected):
                raise InvalidSettingsError(
                    f"{name} must be a mapping or {expected.__name__}, "
                    f"got {type(getattr(self, name)).__name__}"
                )

        check_number("tolerance", self.tolerance)
        check_int("min_area", self.min_area)
        check_int("max_area", self.max_area)

        if not (0 <= self.tolerance <= 100):
            raise InvalidSettingsError(f"tolerance must be 0-100, got {self.tolerance}")
        if self.min_area < 0:
            raise InvalidSettingsError(f"min_area must be >= 0, got {self.min_area}")
        if self.max_area < self.min_area:
            raise InvalidSettingsError(
                f"max_area ({self.max_area}) must be >= min_area ({self.min_area})"
            )

    def merged(self, overrides: Union[Dict[str, Any], "DetectionSettings", None]) -> "DetectionSettings":
        """
        Return a copy with overrides applied.

        Nested dictionaries are merged into the nested settings, so
        {"noise_reduction": {"iterations": 2}} keeps the current kernel size.
        A DetectionSettings override replaces this value entirely.

        Raises:
            InvalidSettingsError: On unknown keys or invalid resulting values
        """
        if overrides is None:
            return self
        if isinstance(overrides, DetectionSettings):
            return overrides

        check_mapping("settings", overrides)
        overrides = _normalize_keys(overrides)
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise InvalidSettingsError(f"Unknown detection settings: {sorted(unknown)}")

        changes: Dict[str, Any] = {}
        for name, value in overrides.items():
            current = getattr(self, name)
            if isinstance(value, dict) and hasattr(current, "to_dict"):
                merged_data = current.to_dict()
                merged_data.update(_normalize_keys(value))
                value = type(current).from_dict(merged_data)
            changes[name] = value

        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "color_range": self.color_range.to_dict(),
            "tolerance": self.tolerance,
            "min_area": self.min_area,
            "max_area": self.max_area,
            "noise_reduction": self.noise_reduction.to_dict(),
            "edge_smoothing": self.edge_smoothing.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetectionSettings":
        """
        Create from dictionary (e.g., from YAML config or a JSON request).

        A "preset" key selects a named GREEN_COLOR_RANGES entry as the base
        color range; an explicit color_range still overrides it.
        """
        check_mapping("settings", data)
        data = dict(data)
        base = cls.default()
        preset = data.pop("preset", None)
        if preset is not None:
            base = replace(base, color_range=get_preset_range(preset))
        return base.merged(data)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "DetectionSettings":
        """
        Load settings from a YAML file, optionally nested under 'color_detection'.

        Raises:
            InvalidSettingsError: If the file is not valid YAML or does not
                hold a mapping of settings
        """
        import yaml

        with open(yaml_path, "r") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise InvalidSettingsError(f"Invalid YAML in {yaml_path}: {e}") from e

        if data is None:
            return cls.default()
        check_mapping(yaml_path, data)

        if "color_detection" in data:
            data = data["color_detection"]
            check_mapping("color_detection", data)
        return cls.from_dict(data)

    @classmethod
    def from_preset(cls, name: str, **kwargs: Any) -> "DetectionSettings":
        """Create settings using a named GREEN_COLOR_RANGES entry."""
        return cls(color_range=get_preset_range(name), **kwargs)

    @classmethod
    def default(cls) -> "DetectionSettings":
        """Create default configuration (ALL_GREEN preset)."""
        return cls()


DEFAULT_DETECTION_SETTINGS = DetectionSettings.default()
