"""PNG encoder for 8-bit interleaved pixel data.

Pixels are stored row by row from the top-left corner. Each pixel holds
``components`` channels: 1 = Y, 2 = YA, 3 = RGB and 4 = RGBA. The output has
the same number of channels as the input.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator

from .deflate import crc32, zlib_compress

PNG_SIGNATURE = bytes((137, 80, 78, 71, 13, 10, 26, 10))
_COLOR_TYPES = {1: 0, 2: 4, 3: 2, 4: 6}
_FILTER_COUNT = 5


def paeth(a: int, b: int, c: int) -> int:
    """The Paeth predictor of left a, up b and upper-left c."""
    p = a + b - c
    pa, pb, pc = abs(p - a), abs(p - b), abs(p - c)
    if pa <= pb and pa <= pc:
        return a & 0xFF
    if pb <= pc:
        return b & 0xFF
    return c & 0xFF


def _filter_row(row: bytes, previous: bytes, components: int, filter_type: int) -> bytes:
    """Apply one PNG filter; previous is all zeros for the first row."""
    if filter_type == 0:
        return bytes(row)
    out = bytearray(len(row))
    for i, value in enumerate(row):
        left = row[i - components] if i >= components else 0
        up = previous[i]
        up_left = previous[i - components] if i >= components else 0
        if filter_type == 1:
            predicted = left
        elif filter_type == 2:
            predicted = up
        elif filter_type == 3:
            predicted = (left + up) >> 1
        else:
            predicted = paeth(left, up, up_left)
        out[i] = (value - predicted) & 0xFF
    return bytes(out)


def _entropy(line: bytes) -> int:
    """Sum of the filtered bytes read as signed values; smaller is better."""
    return sum(256 - value if value >= 128 else value for value in line)


def _rows(raw: bytes, width: int, height: int, components: int, stride: int,
          flip_vertically: bool) -> Iterator[bytes]:
    row_size = width * components
    order = range(height - 1, -1, -1) if flip_vertically else range(height)
    for row in order:
        start = row * stride
        yield raw[start:start + row_size]


def _chunk(tag: bytes, payload: bytes) -> bytes:
    body = tag + payload
    return len(payload).to_bytes(4, "big") + body + crc32(body).to_bytes(4, "big")


def encode_png(
    width: int,
    height: int,
    components: int,
    data: Iterable[int] | bytes,
    *,
    stride: int = 0,
    compression_level: int = 8,
    force_filter: int = -1,
    flip_vertically: bool = False,
) -> bytes:
    """Encode pixels as a PNG file.

    stride is the distance in bytes between the starts of two rows; 0 means
    rows are packed. force_filter 0..4 fixes the filter for every row; any
    other value picks the filter per row that gives the smallest estimate.
    """
    if width < 0 or height < 0:
        raise ValueError(f"image size must not be negative, got {width}x{height}")
    if components not in _COLOR_TYPES:
        raise ValueError(f"components must be 1..4, got {components}")
    if stride < 0:
        raise ValueError(f"stride must not be negative, got {stride}")
    row_size = width * components
    if stride == 0:
        stride = row_size
    raw = bytes(data)
    if height:
        needed = stride * (height - 1) + row_size
        if len(raw) < needed:
            raise ValueError(f"expected at least {needed} bytes of pixel data, got {len(raw)}")
    if not 0 <= force_filter < _FILTER_COUNT:
        force_filter = -1

    filtered = bytearray()
    previous = bytes(row_size)
    for row in _rows(raw, width, height, components, stride, flip_vertically):
        if force_filter >= 0:
            filter_type = force_filter
            line = _filter_row(row, previous, components, filter_type)
        else:
            candidates = [
                (_filter_row(row, previous, components, kind), kind)
                for kind in range(_FILTER_COUNT)
            ]
            line, filter_type = min(candidates, key=lambda item: (_entropy(item[0]), item[1]))
        filtered.append(filter_type)
        filtered += line
        previous = row

    compressed = zlib_compress(bytes(filtered), compression_level)
    header = (
        width.to_bytes(4, "big")
        + height.to_bytes(4, "big")
        + bytes((8, _COLOR_TYPES[components], 0, 0, 0))
    )
    return (
        PNG_SIGNATURE
        + _chunk(b"IHDR", header)
        + _chunk(b"IDAT", compressed)
        + _chunk(b"IEND", b"")
    )


def write_png(
    path: str | os.PathLike,
    width: int,
    height: int,
    components: int,
    data: Iterable[int] | bytes,
    *,
    stride: int = 0,
    compression_level: int = 8,
    force_filter: int = -1,
    flip_vertically: bool = False,
) -> None:
    """Encode as PNG and write the file."""
    Path(path).write_bytes(
        encode_png(
            width,
            height,
            components,
            data,
            stride=stride,
            compression_level=compression_level,
            force_filter=force_filter,
            flip_vertically=flip_vertically,
        )
    )