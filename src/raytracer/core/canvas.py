"""Output pixel grid.

A Canvas is a (height, width, 3) float64 array addressed by (x, y) with the
origin at the top-left corner. Values are stored as computed; clamping and
quantization belong to the exporters in ``raytracer.preview.export``.
"""

import numpy as np
import numpy.typing as npt

from raytracer.core.tuples import Color


class Canvas:
    """A width x height grid of RGB colors, initially black."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixels: npt.NDArray[np.float64] = np.zeros((height, width, 3), dtype=np.float64)

    @classmethod
    def from_array(cls, image: npt.ArrayLike) -> "Canvas":
        """Wrap an existing (height, width, 3) array."""
        arr = np.asarray(image, dtype=np.float64)
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ValueError(f"Expected an array of shape (height, width, 3), got {arr.shape}")
        canvas = cls(arr.shape[1], arr.shape[0])
        canvas.pixels[...] = arr
        return canvas

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} canvas")

    def pixel_at(self, x: int, y: int) -> Color:
        self._check_bounds(x, y)
        return self.pixels[y, x].copy()

    def write_pixel(self, x: int, y: int, rgb: npt.ArrayLike) -> None:
        self._check_bounds(x, y)
        self.pixels[y, x] = np.asarray(rgb, dtype=np.float64)[:3]

    def fill(self, rgb: npt.ArrayLike) -> None:
        self.pixels[...] = np.asarray(rgb, dtype=np.float64)[:3]
