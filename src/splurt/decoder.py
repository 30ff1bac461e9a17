import io
import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from splurt.model import Bitmap

logger = logging.getLogger(__name__)

# Modes that decode to a single grayscale channel; everything else becomes RGB
GRAYSCALE_MODES = {"1", "L", "I", "I;16", "I;16L", "I;16B", "I;16N", "F"}


class DecodeError(ValueError):
    """The input could not be decoded as an image."""


def _grayscale(image: Image.Image) -> np.ndarray:
    """Scale a single-channel image of any depth to 8 bits."""
    if image.mode.startswith("I;16"):
        return (np.asarray(image).astype(np.uint32) >> 8).astype(np.uint8)
    if image.mode == "I":
        # Pillow opens 16-bit PNG and TIFF data as 32-bit "I"
        return (np.clip(np.asarray(image), 0, 0xFFFF) >> 8).astype(np.uint8)
    if image.mode == "F":
        return np.round(np.clip(np.asarray(image), 0.0, 1.0) * 255).astype(np.uint8)
    return np.asarray(image.convert("L"), dtype=np.uint8)


def from_pil(image: Image.Image) -> Bitmap:
    """Copy a Pillow image into a Bitmap, dropping alpha."""
    if image.mode in GRAYSCALE_MODES:
        return Bitmap.from_array(_grayscale(image))
    if image.mode != "RGB":
        image = image.convert("RGB")
    return Bitmap.from_array(np.asarray(image, dtype=np.uint8))


def decode(data: bytes) -> Bitmap:
    """Decode encoded image bytes (JPEG, PNG, ...) into a Bitmap."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            bitmap = from_pil(image)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise DecodeError(f"Cannot decode image: {e}") from e
    logger.debug("Decoded %dx%d image with %d channel(s)", bitmap.width, bitmap.height, bitmap.channels)
    return bitmap


def load(path: str | Path) -> Bitmap:
    """Read and decode an image file. Raises FileNotFoundError if it does not exist."""
    path = Path(path)
    return decode(path.read_bytes())
