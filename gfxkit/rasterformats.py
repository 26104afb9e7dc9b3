"""BMP, TGA and Radiance HDR encoders for interleaved pixel data.

Pixel data is stored row by row from the top-left corner. Each pixel holds
``components`` interleaved channels in this order: 1 = Y, 2 = YA, 3 = RGB and
4 = RGBA. BMP and TGA take 8-bit channels. HDR takes linear floating-point
channels.
"""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Iterable, Iterator, Sequence

_PINK = (255, 0, 255)
_TGA_MAX_PACKET = 128
_HDR_MAX_DUMP = 128
_HDR_MAX_RUN = 127


def _check_shape(width: int, height: int, components: int) -> None:
    if width < 0 or height < 0:
        raise ValueError(f"image size must not be negative, got {width}x{height}")
    if not 1 <= components <= 4:
        raise ValueError(f"components must be 1..4, got {components}")


def _pixel_bytes(data: Iterable[int] | bytes, width: int, height: int, components: int) -> bytes:
    raw = bytes(data)
    needed = width * height * components
    if len(raw) < needed:
        raise ValueError(f"expected at least {needed} bytes of pixel data, got {len(raw)}")
    return raw


def _trunc_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // denominator
    return quotient if numerator >= 0 else -quotient


def _row_order(height: int, flip_vertically: bool) -> range:
    """Rows from the bottom up, or from the top down when flipped."""
    return range(height) if flip_vertically else range(height - 1, -1, -1)


def _rows(raw: bytes, width: int, order: Iterable[int], components: int) -> Iterator[list[bytes]]:
    row_size = width * components
    for row in order:
        start = row * row_size
        yield [raw[start + i * components:start + (i + 1) * components] for i in range(width)]


def _encode_pixel(pixel: bytes, write_alpha: bool, expand_mono: bool) -> bytes:
    """One pixel in BGR order, mono expanded or alpha composited as asked."""
    components = len(pixel)
    if components <= 2:
        color = pixel[:1] * 3 if expand_mono else pixel[:1]
    elif components == 4 and not write_alpha:
        alpha = pixel[3]
        blended = [
            (background + _trunc_div((pixel[k] - background) * alpha, 255)) & 0xFF
            for k, background in enumerate(_PINK)
        ]
        color = bytes((blended[2], blended[1], blended[0]))
    else:
        color = bytes((pixel[2], pixel[1], pixel[0]))
    if write_alpha:
        color += pixel[components - 1:components]
    return color


def _le(value: int, size: int) -> bytes:
    return (value & ((1 << (8 * size)) - 1)).to_bytes(size, "little")


def encode_bmp(
    width: int,
    height: int,
    components: int,
    data: Iterable[int] | bytes,
    *,
    flip_vertically: bool = False,
) -> bytes:
    """Encode as a 24-bit BMP; mono is expanded to grey and alpha is composited on pink."""
    _check_shape(width, height, components)
    raw = _pixel_bytes(data, width, height, components)
    pad = (-width * 3) & 3
    out = bytearray()
    out += b"BM"
    out += _le(14 + 40 + (width * 3 + pad) * height, 4)
    out += _le(0, 2) + _le(0, 2)
    out += _le(14 + 40, 4)
    out += _le(40, 4) + _le(width, 4) + _le(height, 4)
    out += _le(1, 2) + _le(24, 2)
    out += bytes(6 * 4)
    for row in _rows(raw, width, _row_order(height, flip_vertically), components):
        for pixel in row:
            out += _encode_pixel(pixel, write_alpha=False, expand_mono=True)
        out += bytes(pad)
    return bytes(out)


def _tga_header(width: int, height: int, components: int, image_type: int) -> bytes:
    has_alpha = components in (2, 4)
    color_bytes = components - 1 if has_alpha else components
    return (
        bytes((0, 0, image_type))
        + _le(0, 2) + _le(0, 2) + bytes((0,))
        + _le(0, 2) + _le(0, 2) + _le(width, 2) + _le(height, 2)
        + bytes(((color_bytes + has_alpha) * 8, has_alpha * 8))
    )


def _tga_packets(row: Sequence[bytes]) -> Iterator[tuple[bool, list[bytes]]]:
    """Split a row into (is_literal, pixels) packets."""
    width = len(row)
    i = 0
    while i < width:
        literal = True
        length = 1
        if i < width - 1:
            length += 1
            literal = row[i] != row[i + 1]
            if literal:
                previous = i
                for k in range(i + 2, width):
                    if length >= _TGA_MAX_PACKET:
                        break
                    if row[previous] != row[k]:
                        previous += 1
                        length += 1
                    else:
                        length -= 1
                        break
            else:
                for k in range(i + 2, width):
                    if length >= _TGA_MAX_PACKET or row[i] != row[k]:
                        break
                    length += 1
        yield literal, list(row[i:i + length])
        i += length


def encode_tga(
    width: int,
    height: int,
    components: int,
    data: Iterable[int] | bytes,
    *,
    rle: bool = True,
    flip_vertically: bool = False,
) -> bytes:
    """Encode as a TGA, run-length compressed unless rle is false."""
    _check_shape(width, height, components)
    raw = _pixel_bytes(data, width, height, components)
    has_alpha = components in (2, 4)
    color_bytes = components - 1 if has_alpha else components
    image_type = 3 if color_bytes < 2 else 2
    order = _row_order(height, flip_vertically)
    out = bytearray()
    if not rle:
        out += _tga_header(width, height, components, image_type)
        for row in _rows(raw, width, order, components):
            for pixel in row:
                out += _encode_pixel(pixel, write_alpha=has_alpha, expand_mono=False)
        return bytes(out)

    out += _tga_header(width, height, components, image_type + 8)
    for row in _rows(raw, width, order, components):
        for literal, pixels in _tga_packets(row):
            if literal:
                out.append((len(pixels) - 1) & 0xFF)
                for pixel in pixels:
                    out += _encode_pixel(pixel, write_alpha=has_alpha, expand_mono=False)
            else:
                out.append((len(pixels) - 129) & 0xFF)
                out += _encode_pixel(pixels[0], write_alpha=has_alpha, expand_mono=False)
    return bytes(out)


def write_bmp(
    path: str | os.PathLike,
    width: int,
    height: int,
    components: int,
    data: Iterable[int] | bytes,
    *,
    flip_vertically: bool = False,
) -> None:
    """Encode as BMP and write the file."""
    Path(path).write_bytes(encode_bmp(width, height, components, data, flip_vertically=flip_vertically))


def write_tga(
    path: str | os.PathLike,
    width: int,
    height: int,
    components: int,
    data: Iterable[int] | bytes,
    *,
    rle: bool = True,
    flip_vertically: bool = False,
) -> None:
    """Encode as TGA and write the file."""
    Path(path).write_bytes(
        encode_tga(width, height, components, data, rle=rle, flip_vertically=flip_vertically)
    )


def linear_to_rgbe(red: float, green: float, blue: float) -> bytes:
    """Pack a linear colour into the four bytes of a shared-exponent RGBE value."""
    largest = max(red, max(green, blue))
    if largest < 1e-32:
        return bytes(4)
    mantissa, exponent = math.frexp(largest)
    scale = mantissa * 256.0 / largest
    return bytes((
        int(red * scale) & 0xFF,
        int(green * scale) & 0xFF,
        int(blue * scale) & 0xFF,
        (exponent + 128) & 0xFF,
    ))


def _hdr_pixel(values: Sequence[float]) -> bytes:
    if len(values) >= 3:
        return linear_to_rgbe(values[0], values[1], values[2])
    return linear_to_rgbe(values[0], values[0], values[0])


def _hdr_rle_channel(channel: bytes) -> bytes:
    width = len(channel)
    out = bytearray()
    x = 0
    while x < width:
        r = x
        while r + 2 < width:
            if channel[r] == channel[r + 1] == channel[r + 2]:
                break
            r += 1
        if r + 2 >= width:
            r = width
        while x < r:
            length = min(r - x, _HDR_MAX_DUMP)
            out.append(length)
            out += channel[x:x + length]
            x += length
        if r + 2 < width:
            while r < width and channel[r] == channel[x]:
                r += 1
            while x < r:
                length = min(r - x, _HDR_MAX_RUN)
                out += bytes((length + 128, channel[x]))
                x += length
    return bytes(out)


def _hdr_scanline(width: int, components: int, scanline: Sequence[float]) -> bytes:
    pixels = [_hdr_pixel(scanline[i * components:(i + 1) * components]) for i in range(width)]
    if width < 8 or width >= 32768:
        return b"".join(pixels)
    out = bytearray((2, 2, (width & 0xFF00) >> 8, width & 0xFF))
    for channel in range(4):
        out += _hdr_rle_channel(bytes(pixel[channel] for pixel in pixels))
    return bytes(out)


def encode_hdr(
    width: int,
    height: int,
    components: int,
    data: Iterable[float],
    *,
    flip_vertically: bool = False,
) -> bytes:
    """Encode linear float data as a Radiance RGBE image; alpha is dropped, mono is replicated."""
    if width <= 0 or height <= 0:
        raise ValueError(f"image size must be positive, got {width}x{height}")
    _check_shape(width, height, components)
    values = [float(value) for value in data]
    needed = width * height * components
    if len(values) < needed:
        raise ValueError(f"expected at least {needed} values, got {len(values)}")
    out = bytearray(b"#?RADIANCE\n# Written by gfxkit\nFORMAT=32-bit_rle_rgbe\n")
    out += f"EXPOSURE=          1.0000000000000\n\n-Y {height} +X {width}\n".encode("ascii")
    row_size = width * components
    for i in range(height):
        row = height - 1 - i if flip_vertically else i
        out += _hdr_scanline(width, components, values[row * row_size:(row + 1) * row_size])
    return bytes(out)


def write_hdr(
    path: str | os.PathLike,
    width: int,
    height: int,
    components: int,
    data: Iterable[float],
    *,
    flip_vertically: bool = False,
) -> None:
    """Encode as Radiance HDR and write the file."""
    Path(path).write_bytes(encode_hdr(width, height, components, data, flip_vertically=flip_vertically))