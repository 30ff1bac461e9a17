from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Bitmap:
    """A decoded image: row-major pixel bytes, 1 (grayscale) or 3 (RGB) channels."""

    width: int
    height: int
    channels: int
    pixels: bytes

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid dimensions: {self.width}x{self.height}")
        if self.channels not in (1, 3):
            raise ValueError(f"Unsupported channel count: {self.channels}")
        expected = self.width * self.height * self.channels
        if len(self.pixels) != expected:
            raise ValueError(f"Pixel buffer has {len(self.pixels)} bytes, expected {expected}")

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Bitmap":
        """Build from a (height, width) or (height, width, channels) uint8 array."""
        arr = np.asarray(arr, dtype=np.uint8)
        if arr.ndim == 2:
            arr = arr[:, :, None]
        if arr.ndim != 3:
            raise ValueError(f"Expected a 2D or 3D array, got {arr.ndim} dimensions")
        height, width, channels = arr.shape
        return cls(width=width, height=height, channels=channels, pixels=arr.tobytes())

    def array(self) -> np.ndarray:
        """Read-only (height, width, channels) view of the pixels."""
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(self.height, self.width, self.channels)

    def pixel(self, x: int, y: int) -> tuple[int, int, int]:
        """Convenience accessor for one pixel as an RGB triple; rendering samples through ``array()``."""
        offset = (y * self.width + x) * self.channels
        if self.channels == 1:
            v = self.pixels[offset]
            return (v, v, v)
        r, g, b = self.pixels[offset : offset + 3]
        return (r, g, b)


@dataclass(frozen=True)
class Viewport:
    columns: int
    rows: int


@dataclass(frozen=True)
class RenderPlan:
    fit_width: int
    fit_height: int
    x_margin: int = 0
    y_margin: int = 0

    @property
    def empty(self) -> bool:
        return self.fit_width <= 0 or self.fit_height <= 0


EMPTY_PLAN = RenderPlan(0, 0)
