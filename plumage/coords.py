"""Positions and dimensions within an image."""

from __future__ import annotations
from typing import Iterator, NamedTuple


class Position(NamedTuple):
    """A position within an image. (0, 0) is the top-left (seed) pixel."""
    x: int
    y: int

    def __add__(self, other: 'Position') -> 'Position':
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Position') -> 'Position':
        return Position(self.x - other.x, self.y - other.y)


Position.ZERO = Position(0, 0)


class Dimensions(NamedTuple):
    """The dimensions of an image."""
    width: int
    height: int

    @staticmethod
    def square(width: int) -> 'Dimensions':
        return Dimensions(width, width)

    @staticmethod
    def from_position(pos: Position) -> 'Dimensions':
        return Dimensions(pos.x, pos.y)

    def count(self) -> int:
        """The total number of pixels in the image."""
        return self.width * self.height

    def min(self, other: 'Dimensions') -> 'Dimensions':
        return Dimensions(min(self.width, other.width), min(self.height, other.height))

    def contains(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def positions(self) -> Iterator[Position]:
        """Yield every position in raster order (rows top to bottom)."""
        for y in range(self.height):
            for x in range(self.width):
                yield Position(x, y)
