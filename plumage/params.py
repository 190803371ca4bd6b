"""
Generation parameters and the parameter file format.

A parameter file is a JSON object. Every key is optional; missing keys are
filled in with defaults or, for `start_color` and `seed`, random values:

    {
      "dimensions": {"width": 3840, "height": 2160},
      "spread": {"Square": {"width": 5}},
      "distance_power": -1.75,
      "random_power": 3.5,
      "random_max": 0.05,
      "gamma": 0.75,
      "start_color": {"red": 0.2, "green": 0.5, "blue": 0.8},
      "seed": [0, 1, ..., 31]
    }
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
import json
import math
import secrets

import numpy as np

from .color import Color
from .coords import Dimensions, Position

SEED_SIZE = 32

DEFAULT_DIMENSIONS = Dimensions(3840, 2160)
DEFAULT_DISTANCE_POWER = -1.75
DEFAULT_RANDOM_POWER = 3.5
DEFAULT_RANDOM_MAX = 0.05
DEFAULT_GAMMA = 0.75


class ParamsError(ValueError):
    """Raised for malformed or out-of-range parameters."""


# =============================================================================
# Spread shapes
# =============================================================================

class Spread(ABC):
    """
    Shape of the area of neighboring pixels considered when averaging.

    The window always lies up and to the left of the pixel being filled, so
    only offsets (dx, dy) with dx, dy >= 0 are ever considered.
    """

    @property
    @abstractmethod
    def size(self) -> int:
        """Extent of the window along each axis, not counting the pixel itself."""

    def __post_init__(self):
        if isinstance(self.size, bool) or not isinstance(self.size, int):
            raise ValueError(f"spread size must be an integer, got {self.size!r}")
        if self.size < 1:
            # A window with no neighbors would leave nothing to average.
            raise ValueError(f"spread size must be at least 1, got {self.size}")

    def bounds(self) -> Dimensions:
        """The bounding box (in full pixels) that holds the spread shape."""
        return Dimensions.square(self.size + 1)

    def accepts(self, dist: float) -> bool:
        return True

    def weights(self, distance_power: float) -> list[tuple[Position, float]]:
        """
        Neighbor offsets inside the shape, with their weights.

        A weight is the offset's Euclidean length raised to `distance_power`.
        Weights too large for a float come back as infinity.
        """
        weights = []
        for delta in self.bounds().positions():
            # Skip the pixel being filled.
            if delta == Position.ZERO:
                continue
            dist = math.sqrt(delta.x * delta.x + delta.y * delta.y)
            if not self.accepts(dist):
                continue
            try:
                weight = dist ** distance_power
            except OverflowError:
                weight = math.inf
            weights.append((delta, weight))
        return weights

    @abstractmethod
    def to_dict(self) -> dict:
        """The parameter file form, keyed by the shape's name."""

    @staticmethod
    def from_dict(raw) -> 'Spread':
        if not isinstance(raw, dict) or len(raw) != 1:
            raise ParamsError(
                'spread must be {"Square": {"width": n}} or {"QuarterCircle": {"radius": n}}'
            )
        (variant, fields), = raw.items()
        shapes = {'Square': (Square, 'width'), 'QuarterCircle': (QuarterCircle, 'radius')}
        if variant not in shapes:
            raise ParamsError(f"unknown spread shape: {variant}")
        cls, key = shapes[variant]
        if not isinstance(fields, dict) or set(fields) != {key}:
            raise ParamsError(f"spread {variant} takes exactly one field, {key!r}")
        try:
            return cls(fields[key])
        except ValueError as e:
            raise ParamsError(str(e)) from e


@dataclass(frozen=True)
class Square(Spread):
    """Every pixel within `width` columns and rows."""
    width: int

    @property
    def size(self) -> int:
        return self.width

    def to_dict(self) -> dict:
        return {'Square': {'width': self.width}}


@dataclass(frozen=True)
class QuarterCircle(Spread):
    """Pixels within Euclidean distance `radius`; trims the square's diagonal corner."""
    radius: int

    @property
    def size(self) -> int:
        return self.radius

    def accepts(self, dist: float) -> bool:
        return dist <= self.radius

    def to_dict(self) -> dict:
        return {'QuarterCircle': {'radius': self.radius}}


DEFAULT_SPREAD = Square(5)


# =============================================================================
# Field decoding
# =============================================================================

def _number(raw, key: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ParamsError(f"{key} must be a number, got {raw!r}")
    value = float(raw)
    if not math.isfinite(value):
        raise ParamsError(f"{key} must be finite, got {raw!r}")
    return value


def _count(raw, key: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise ParamsError(f"{key} must be a non-negative integer, got {raw!r}")
    return raw


def _dimensions(raw) -> Dimensions:
    if not isinstance(raw, dict) or set(raw) != {'width', 'height'}:
        raise ParamsError('dimensions must be {"width": w, "height": h}')
    return Dimensions(_count(raw['width'], 'dimensions.width'),
                      _count(raw['height'], 'dimensions.height'))


def _color(raw) -> Color:
    if not isinstance(raw, dict) or set(raw) != {'red', 'green', 'blue'}:
        raise ParamsError('start_color must be {"red": r, "green": g, "blue": b}')
    channels = []
    for name in ('red', 'green', 'blue'):
        value = _number(raw[name], f"start_color.{name}")
        if not 0.0 <= value <= 1.0:
            raise ParamsError(f"start_color.{name} must be between 0 and 1, got {value}")
        channels.append(value)
    return Color(*channels)


def _seed(raw) -> bytes:
    if isinstance(raw, (bytes, bytearray)):
        seed = bytes(raw)
    elif isinstance(raw, list) and all(
            isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in raw):
        seed = bytes(raw)
    else:
        raise ParamsError(f"seed must be a sequence of {SEED_SIZE} bytes")
    if len(seed) != SEED_SIZE:
        raise ParamsError(f"seed must be a sequence of {SEED_SIZE} bytes, got {len(seed)}")
    return seed


# =============================================================================
# Parameter set
# =============================================================================

@dataclass(frozen=True)
class Params:
    """A fully resolved set of generation parameters."""
    dimensions: Dimensions
    spread: Spread
    distance_power: float
    random_power: float
    random_max: float
    gamma: float
    start_color: Color
    seed: bytes

    FIELDS = ('dimensions', 'spread', 'distance_power', 'random_power',
              'random_max', 'gamma', 'start_color', 'seed')

    def __post_init__(self):
        # The fill divides by the weight sum, which must stay a finite float.
        total = sum(weight for _, weight in self.spread.weights(self.distance_power))
        if not math.isfinite(total):
            raise ParamsError(
                f"distance_power {self.distance_power} is too large for spread "
                f"{self.spread.to_dict()}: neighbor weights overflow"
            )

    @staticmethod
    def resolve(raw: dict | None = None, rng: np.random.Generator | None = None) -> 'Params':
        """
        Build params from a (possibly partial) decoded parameter file.

        Args:
            raw: Mapping of field name to JSON-style value; missing fields
                 take their defaults
            rng: Randomness source for the random defaults. When omitted the
                 seed comes from `secrets` and the start color from a freshly
                 OS-seeded generator.

        Raises:
            ParamsError: if a field is malformed, an unknown key is present,
                or distance_power makes the spread's weights overflow
        """
        raw = {} if raw is None else raw
        if not isinstance(raw, dict):
            raise ParamsError("parameters must be a JSON object")
        unknown = set(raw) - set(Params.FIELDS)
        if unknown:
            raise ParamsError(f"unknown parameter(s): {', '.join(sorted(unknown))}")

        if 'seed' in raw:
            seed = _seed(raw['seed'])
        elif rng is None:
            seed = secrets.token_bytes(SEED_SIZE)
        else:
            seed = rng.bytes(SEED_SIZE)

        if 'start_color' in raw:
            start_color = _color(raw['start_color'])
        else:
            start_color = Color.random(np.random.default_rng() if rng is None else rng)

        return Params(
            dimensions=_dimensions(raw['dimensions']) if 'dimensions' in raw else DEFAULT_DIMENSIONS,
            spread=Spread.from_dict(raw['spread']) if 'spread' in raw else DEFAULT_SPREAD,
            distance_power=_number(raw.get('distance_power', DEFAULT_DISTANCE_POWER), 'distance_power'),
            random_power=_number(raw.get('random_power', DEFAULT_RANDOM_POWER), 'random_power'),
            random_max=_number(raw.get('random_max', DEFAULT_RANDOM_MAX), 'random_max'),
            gamma=_number(raw.get('gamma', DEFAULT_GAMMA), 'gamma'),
            start_color=start_color,
            seed=seed,
        )

    def to_dict(self) -> dict:
        return {
            'dimensions': {'width': self.dimensions.width, 'height': self.dimensions.height},
            'spread': self.spread.to_dict(),
            'distance_power': self.distance_power,
            'random_power': self.random_power,
            'random_max': self.random_max,
            'gamma': self.gamma,
            'start_color': {
                'red': self.start_color.red,
                'green': self.start_color.green,
                'blue': self.start_color.blue,
            },
            'seed': list(self.seed),
        }


def parse_params(text: str, rng: np.random.Generator | None = None) -> Params:
    """Parse parameter file contents. Empty text means all defaults."""
    if not text.strip():
        return Params.resolve({}, rng)
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParamsError(f"invalid JSON: {e}") from e
    return Params.resolve(raw, rng)


def format_params(params: Params) -> str:
    """Serialize params with one top-level field per line."""
    fields = params.to_dict()
    lines = [f'  "{key}": {json.dumps(fields[key])}' for key in Params.FIELDS]
    return "{\n" + ",\n".join(lines) + "\n}\n"
