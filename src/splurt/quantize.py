from __future__ import annotations

from typing import Protocol

import numpy as np

from splurt.palette import CUBE_SIZE, CUBE_START, PALETTE, cube_index


class Quantizer(Protocol):
    def quantize(self, r: int, g: int, b: int) -> int:
        """Return the palette index closest to an RGB triple."""
        ...

    def quantize_array(self, rgb: np.ndarray) -> np.ndarray:
        """Quantize an (..., 3) uint8 array to an (...) uint8 array of palette indices."""
        ...


def _check_channels(r: int, g: int, b: int) -> None:
    for value in (r, g, b):
        if not 0 <= value <= 255:
            raise ValueError(f"Channel value out of range: {value}")


class CubeQuantizer:
    """Map each channel to one of six levels and index straight into the colour cube."""

    def quantize(self, r: int, g: int, b: int) -> int:
        _check_channels(r, g, b)
        # floor(c / 256 * 6), which never exceeds 5 for c <= 255
        return cube_index(r * CUBE_SIZE // 256, g * CUBE_SIZE // 256, b * CUBE_SIZE // 256)

    def quantize_array(self, rgb: np.ndarray) -> np.ndarray:
        levels = rgb.astype(np.int32) * CUBE_SIZE // 256
        np.clip(levels, 0, CUBE_SIZE - 1, out=levels)
        index = CUBE_START + 36 * levels[..., 0] + 6 * levels[..., 1] + levels[..., 2]
        return index.astype(np.uint8)


class NearestQuantizer:
    """Exhaustive nearest-colour search over the palette.

    Distance is squared Euclidean in RGB space. Entries before ``first_index``
    are skipped (index 0 by default) and ties go to the lowest index.
    """

    def __init__(self, palette: np.ndarray = PALETTE, first_index: int = 1):
        if palette.shape != (256, 3):
            raise ValueError(f"Palette must have shape (256, 3), got {palette.shape}")
        if not 0 <= first_index <= 255:
            raise ValueError(f"first_index out of range: {first_index}")
        self.first_index = first_index
        self._candidates = palette[first_index:].astype(np.int32)

    def quantize(self, r: int, g: int, b: int) -> int:
        _check_channels(r, g, b)
        diff = self._candidates - np.array((r, g, b), dtype=np.int32)
        dist = (diff * diff).sum(axis=1)
        # argmin returns the first minimum, which is the lowest index
        return self.first_index + int(dist.argmin())

    def quantize_array(self, rgb: np.ndarray) -> np.ndarray:
        flat = rgb.reshape(-1, 3).astype(np.int32)
        result = np.empty(len(flat), dtype=np.uint8)
        # Chunked so the (pixels, candidates, 3) difference stays small
        for start in range(0, len(flat), 4096):
            chunk = flat[start : start + 4096]
            diff = chunk[:, None, :] - self._candidates[None, :, :]
            dist = (diff * diff).sum(axis=2)
            result[start : start + 4096] = dist.argmin(axis=1) + self.first_index
        return result.reshape(rgb.shape[:-1])


QUANTIZERS = {
    "cube": CubeQuantizer,
    "nearest": NearestQuantizer,
}

DEFAULT_QUANTIZER = CubeQuantizer()


def get_quantizer(name: str) -> Quantizer:
    try:
        return QUANTIZERS[name]()
    except KeyError:
        raise ValueError(f"Unknown quantizer: {name!r}") from None
