"""
Exception types raised by the constraint detection engine.
"""


class ColorDetectionError(Exception):
    """Base class for all constraint detection errors."""


class ImageDecodeError(ColorDetectionError):
    """
    Raised when input data cannot be decoded into a pixel buffer.

    Attributes:
        source: Short description of the input that failed (path or byte count)
    """

    def __init__(self, source: str, reason: str = "unsupported or corrupt image data"):
        self.source = source
        self.reason = reason
        super().__init__(f"Could not decode image ({source}): {reason}")


class InvalidSettingsError(ColorDetectionError, ValueError):
    """Raised when detection settings fail validation."""
