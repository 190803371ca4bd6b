"""Plumage generates colorful pictures."""

from .color import Color
from .coords import Dimensions, Position
from .generate import Generator
from .params import (
    Params,
    ParamsError,
    QuarterCircle,
    Spread,
    Square,
    format_params,
    parse_params,
)
from .pixmap import PixelBuffer

__version__ = "0.1.0"
