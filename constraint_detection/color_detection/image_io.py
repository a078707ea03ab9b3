"""
Image decoding and encoding.

Converts encoded image bytes, file paths or arrays into the RGBA pixel
buffer used by the detection pipeline, and encodes results back to PNG.
"""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from ..exceptions import ColorDetectionError, ImageDecodeError

logger = logging.getLogger(__name__)

ImageInput = Union[bytes, bytearray, memoryview, str, Path, np.ndarray]


def decode_image(image: ImageInput) -> np.ndarray:
    """
    Decode an image into a read-only RGBA pixel buffer.

    Args:
        image: Encoded image bytes (PNG, JPEG, ...), a path to an image file,
            or an RGBA uint8 array of shape (height, width, 4)

    Returns:
        uint8 array of shape (height, width, 4) in RGBA channel order

    Raises:
        ImageDecodeError: If the data cannot be decoded
    """
    if isinstance(image, np.ndarray):
        return _validate_pixel_buffer(image)

    if isinstance(image, (str, Path)):
        path = Path(image)
        if not path.exists():
            logger.error(f"Image not found: {path}")
            raise ImageDecodeError(str(path), "file not found")
        data = path.read_bytes()
        source = str(path)
    else:
        data = bytes(image)
        source = f"{len(data)} bytes"

    if not data:
        logger.error(f"Empty image data: {source}")
        raise ImageDecodeError(source, "no data")

    buffer = np.frombuffer(data, dtype=np.uint8)
    decoded = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if decoded is None:
        logger.error(f"Failed to decode image: {source}")
        raise ImageDecodeError(source)

    pixels = _to_rgba(decoded)
    pixels.setflags(write=False)
    logger.debug(f"Decoded image {source}: {pixels.shape[1]}x{pixels.shape[0]}")
    return pixels


def _to_rgba(decoded: np.ndarray) -> np.ndarray:
    """Convert an OpenCV-decoded image (gray/BGR/BGRA, 8 or 16 bit) to RGBA uint8."""
    if decoded.dtype == np.uint16:
        decoded = (decoded >> 8).astype(np.uint8)
    elif decoded.dtype != np.uint8:
        decoded = cv2.normalize(decoded, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)

    if decoded.ndim == 2:
        return cv2.cvtColor(decoded, cv2.COLOR_GRAY2RGBA)

    channels = decoded.shape[2]
    if channels == 1:
        return cv2.cvtColor(decoded[:, :, 0], cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(decoded, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(decoded, cv2.COLOR_BGRA2RGBA)

    raise ImageDecodeError(f"{channels}-channel image", "unsupported channel count")


def _validate_pixel_buffer(pixels: np.ndarray) -> np.ndarray:
    """Check an in-memory RGBA buffer and return a read-only view of it."""
    if pixels.dtype != np.uint8 or pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ImageDecodeError(
            f"array {pixels.shape} {pixels.dtype}",
            "expected uint8 RGBA array of shape (height, width, 4)",
        )
    view = pixels.view()
    view.setflags(write=False)
    return view


def encode_png(pixels: np.ndarray) -> bytes:
    """
    Encode an RGBA pixel buffer as PNG bytes.

    Raises:
        ColorDetectionError: If OpenCV fails to encode the image
    """
    bgra = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)
    ok, encoded = cv2.imencode(".png", bgra)
    if not ok:
        raise ColorDetectionError("Failed to encode image as PNG")
    return encoded.tobytes()
