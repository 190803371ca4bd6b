"""
Normalized RGB colors.

Each component is a float that stays within [0, 1] once a color has been
stored in a finished image.
"""

from __future__ import annotations
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Color:
    """The color of a pixel in an image. Each component is between 0 and 1."""
    red: float
    green: float
    blue: float

    @staticmethod
    def random(rng: np.random.Generator) -> 'Color':
        """Generate a random color from an explicit randomness source."""
        red, green, blue = rng.random(3)
        return Color(float(red), float(green), float(blue))

    @staticmethod
    def from_array(arr) -> 'Color':
        return Color(float(arr[0]), float(arr[1]), float(arr[2]))

    def to_array(self) -> np.ndarray:
        return np.array([self.red, self.green, self.blue], dtype=np.float64)

    def powf(self, n: float) -> 'Color':
        return Color(self.red ** n, self.green ** n, self.blue ** n)

    def clamp(self, lo: float, hi: float) -> 'Color':
        return Color(
            min(max(self.red, lo), hi),
            min(max(self.green, lo), hi),
            min(max(self.blue, lo), hi),
        )

    def __add__(self, other: 'Color') -> 'Color':
        return Color(self.red + other.red, self.green + other.green, self.blue + other.blue)

    def __sub__(self, other: 'Color') -> 'Color':
        return Color(self.red - other.red, self.green - other.green, self.blue - other.blue)

    def __mul__(self, scalar: float) -> 'Color':
        return Color(self.red * scalar, self.green * scalar, self.blue * scalar)

    def __rmul__(self, scalar: float) -> 'Color':
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> 'Color':
        return Color(self.red / scalar, self.green / scalar, self.blue / scalar)


Color.BLACK = Color(0.0, 0.0, 0.0)
