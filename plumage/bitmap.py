"""
24-bit BMP encoding.

Layout: 14-byte file header, 40-byte BITMAPINFOHEADER, then top-down BGR rows
padded to 4 bytes. All fields are little-endian.
"""

import struct
from typing import Callable

from .coords import Dimensions
from .pixmap import PixelBuffer

FILE_HEADER_SIZE = 14
INFO_HEADER_SIZE = 40
PIXEL_DATA_OFFSET = FILE_HEADER_SIZE + INFO_HEADER_SIZE

# Written in the reserved field instead of zeros.
RESERVED_MARKER = b'PLMG'

# Stored as-is in the pixels-per-meter fields.
RESOLUTION = 96


def encode_header(dimensions: Dimensions, pixel_data_len: int) -> bytes:
    """Pack the file header and BITMAPINFOHEADER for a 24-bit top-down image."""
    file_header = struct.pack(
        '<2sI4sI',
        b'BM',
        PIXEL_DATA_OFFSET + pixel_data_len,   # file size
        RESERVED_MARKER,
        PIXEL_DATA_OFFSET,
    )
    info_header = struct.pack(
        '<IIiHHIIIIII',
        INFO_HEADER_SIZE,
        dimensions.width,
        -dimensions.height,   # negative height: rows stored top to bottom
        1,                    # color planes
        24,                   # bits per pixel
        0,                    # compression: BI_RGB
        0,                    # image data size (may be 0 for BI_RGB)
        RESOLUTION,
        RESOLUTION,
        0,                    # palette colors
        0,                    # important colors
    )
    return file_header + info_header


def write_bitmap(pixmap: PixelBuffer, push: Callable[[bytes], object]):
    """
    Encode a finished pixmap and hand the bytes to `push`.

    Every color component must already be in [0, 1]. Exceptions raised by
    `push` propagate unchanged.
    """
    bgr = pixmap.to_bgr()
    push(encode_header(pixmap.dimensions, len(bgr)))
    push(bgr)
