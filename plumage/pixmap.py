"""
Two-dimensional pixel storage.

Pixels are held in a float64 array of shape (height, width, 3), channels in
RGB order. A pixel's flat index is y * width + x.
"""

import numpy as np

from .color import Color
from .coords import Dimensions, Position


class PixelBuffer:
    """A two-dimensional array of pixels, all black when created."""

    def __init__(self, dimensions: Dimensions):
        self._dimensions = Dimensions(*dimensions)
        self._data = np.zeros((self._dimensions.height, self._dimensions.width, 3), dtype=np.float64)

    @property
    def dimensions(self) -> Dimensions:
        return self._dimensions

    @property
    def data(self) -> np.ndarray:
        """The raw (height, width, 3) pixel array. Writes go to the buffer."""
        return self._data

    def count(self) -> int:
        return self._dimensions.count()

    def index(self, pos: Position) -> int:
        """Flat row-major index of `pos`."""
        self._check(pos)
        return pos.y * self._dimensions.width + pos.x

    def _check(self, pos: Position):
        if not self._dimensions.contains(pos):
            raise IndexError(
                f"position ({pos.x}, {pos.y}) is outside a "
                f"{self._dimensions.width}x{self._dimensions.height} image"
            )

    def get(self, pos: Position) -> Color:
        self._check(pos)
        return Color.from_array(self._data[pos.y, pos.x])

    def set(self, pos: Position, color: Color):
        self._check(pos)
        self._data[pos.y, pos.x] = (color.red, color.green, color.blue)

    def row_size(self) -> int:
        """Length in bytes of one encoded row, padded to a multiple of 4."""
        return (self._dimensions.width * 3 + 3) // 4 * 4

    def to_bgr(self) -> bytes:
        """
        Convert to a BMP-style BGR pixel array.

        All color components must already be in [0, 1]. Each one becomes
        round(c * 255), rounding halves away from zero, and every row is
        zero-padded to `row_size()` bytes.

        Returns:
            height * row_size() bytes, top row first
        """
        width, height = self._dimensions
        row_size = self.row_size()

        bgr = self._data[:, :, ::-1]
        levels = np.clip(np.floor(bgr * 255.0 + 0.5), 0, 255).astype(np.uint8)

        rows = np.zeros((height, row_size), dtype=np.uint8)
        rows[:, :width * 3] = levels.reshape(height, width * 3)
        return rows.tobytes()
