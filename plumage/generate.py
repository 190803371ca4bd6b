"""
Diffusion fill generator.

The image grows from the top-left pixel. Every other pixel, visited in raster
order, takes the distance-weighted average of the already-filled pixels above
and to its left, plus a small random offset per channel. A final gamma pass
shapes the result before it is encoded as a BMP.

Determinism: one seeded PCG64 stream supplies six draws per filled pixel, in
the order red magnitude, red sign, green magnitude, green sign, blue
magnitude, blue sign. The same params therefore always produce the same bytes.
"""

from __future__ import annotations
import errno
from typing import BinaryIO, Callable

import numpy as np

from .bitmap import write_bitmap
from .coords import Position
from .params import Params
from .pixmap import PixelBuffer


class Generator:
    """Generates an image and writes it as a bitmap. Usable once."""

    def __init__(self, params: Params, verbose: bool = False):
        self._spread = params.spread
        self._distance_power = params.distance_power
        self._random_power = params.random_power
        self._random_max = params.random_max
        self._gamma = params.gamma
        self._rng = np.random.default_rng(int.from_bytes(params.seed, 'little'))
        self._verbose = verbose
        self._filled = False
        self._gamma_applied = False

        self._pixmap = PixelBuffer(params.dimensions)
        if params.dimensions.count() > 0:
            self._pixmap.set(Position.ZERO, params.start_color)

    @property
    def pixmap(self) -> PixelBuffer:
        if self._pixmap is None:
            raise RuntimeError("generator has already been consumed")
        return self._pixmap

    # =========================================================================
    # Fill pass
    # =========================================================================

    def _sum_rows_above(self, y: int, offsets) -> tuple[np.ndarray, np.ndarray]:
        """
        Weighted color sums over finished rows for every pixel of row `y`.

        Only offsets with dy <= y and dx <= x contribute to pixel x, so every
        neighbor read lies inside the image and was filled earlier.
        """
        data = self.pixmap.data
        width = data.shape[1]
        sums = np.zeros((width, 3), dtype=np.float64)
        weights = np.zeros(width, dtype=np.float64)
        for delta, weight in offsets:
            if delta.y > y or delta.x >= width:
                continue
            sums[delta.x:] += data[y - delta.y, :width - delta.x] * weight
            weights[delta.x:] += weight
        return sums, weights

    def _draw_jitter(self, n: int) -> list:
        """Signed random offsets for the next `n` pixels, shape (n, 3)."""
        # Last axis is (magnitude, sign), so the stream order per pixel is
        # red magnitude, red sign, green magnitude, ...
        draws = self._rng.random((n, 3, 2))
        magnitude = draws[:, :, 0] ** self._random_power * self._random_max
        sign = np.where(draws[:, :, 1] >= 0.5, 1.0, -1.0)
        return (magnitude * sign).tolist()

    def fill(self):
        """Fill every pixel except the starting one, in raster order. Runs once."""
        data = self.pixmap.data
        if self._filled:
            raise RuntimeError("image has already been filled")
        height, width = data.shape[:2]

        offsets = self._spread.weights(self._distance_power)
        # Same-row neighbors depend on pixels filled earlier in this row.
        row_offsets = sorted((delta.x, weight) for delta, weight in offsets if delta.y == 0)
        above_offsets = [(delta, weight) for delta, weight in offsets if delta.y > 0]

        step = max(1, height // 10)
        for y in range(height):
            # Don't fill the starting pixel.
            first = 1 if y == 0 else 0
            if first < width:
                sums, weights = self._sum_rows_above(y, above_offsets)
                sums = sums.tolist()
                weights = weights.tolist()
                jitter = self._draw_jitter(width - first)
                row = data[y].tolist()

                for x in range(first, width):
                    red, green, blue = sums[x]
                    total = weights[x]
                    for dx, weight in row_offsets:
                        if dx > x:
                            break
                        n_red, n_green, n_blue = row[x - dx]
                        red += n_red * weight
                        green += n_green * weight
                        blue += n_blue * weight
                        total += weight

                    j_red, j_green, j_blue = jitter[x - first]
                    row[x] = [
                        min(max(red / total + j_red, 0.0), 1.0),
                        min(max(green / total + j_green, 0.0), 1.0),
                        min(max(blue / total + j_blue, 0.0), 1.0),
                    ]
                data[y] = row

            if self._verbose and ((y + 1) % step == 0 or y + 1 == height):
                print(f"  Filled {y + 1}/{height} rows")

        self._filled = True

    # =========================================================================
    # Gamma pass and output
    # =========================================================================

    def apply_gamma(self):
        """Raise every channel to the gamma power. Runs once, after `fill`."""
        if not self._filled:
            raise RuntimeError("image must be filled before applying gamma")
        if self._gamma_applied:
            raise RuntimeError("gamma has already been applied")
        data = self.pixmap.data
        np.power(data, self._gamma, out=data)
        self._gamma_applied = True

    def apply_all(self):
        """Run whichever of the fill and gamma passes haven't run yet."""
        if not self._filled:
            self.fill()
        if not self._gamma_applied:
            self.apply_gamma()

    def generate(self, stream: BinaryIO):
        """
        Generate the image and write it to a binary stream.

        Short writes are retried until every byte is accepted, so raw
        (unbuffered) streams receive the whole file.
        """
        def write_all(chunk: bytes):
            view = memoryview(chunk)
            while view:
                written = stream.write(view)
                if written is None:
                    raise BlockingIOError(errno.EAGAIN, "output stream would block")
                if written == 0:
                    raise OSError("output stream accepted no bytes")
                view = view[written:]

        self.generate_with(write_all)

    def generate_with(self, push: Callable[[bytes], object]):
        """
        Generate the image and write it by calling `push` with each chunk.

        Each chunk is handed over once, in full. Exceptions raised by `push`
        propagate unchanged. The generator is consumed either way.
        """
        pixmap = self.pixmap
        self.apply_all()
        self._pixmap = None
        write_bitmap(pixmap, push)
