"""Baseline JPEG encoder for 8-bit interleaved pixel data.

Pixels are stored row by row from the top-left corner. Each pixel holds
``components`` channels: 1 = Y, 2 = YA, 3 = RGB and 4 = RGBA. Alpha is
ignored. Quality runs from 1 to 100; 0 means the default of 90. Qualities up
to 90 subsample the chroma channels 2x2.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Sequence

_ZIGZAG = (
    0, 1, 5, 6, 14, 15, 27, 28, 2, 4, 7, 13, 16, 26, 29, 42, 3, 8, 12, 17, 25, 30, 41, 43, 9, 11, 18,
    24, 31, 40, 44, 53, 10, 19, 23, 32, 39, 45, 52, 54, 20, 22, 33, 38, 46, 51, 55, 60, 21, 34, 37, 47,
    50, 56, 59, 61, 35, 36, 48, 49, 57, 58, 62, 63,
)

# Number of Huffman codes of each length 1..16, followed by the symbols.
_DC_LUMINANCE_COUNTS = (0, 1, 5, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0)
_DC_LUMINANCE_VALUES = tuple(range(12))
_AC_LUMINANCE_COUNTS = (0, 2, 1, 3, 3, 2, 4, 3, 5, 5, 4, 4, 0, 0, 1, 0x7D)
_AC_LUMINANCE_VALUES = (
    0x01, 0x02, 0x03, 0x00, 0x04, 0x11, 0x05, 0x12, 0x21, 0x31, 0x41, 0x06, 0x13, 0x51, 0x61, 0x07, 0x22, 0x71, 0x14, 0x32, 0x81, 0x91, 0xA1, 0x08,
    0x23, 0x42, 0xB1, 0xC1, 0x15, 0x52, 0xD1, 0xF0, 0x24, 0x33, 0x62, 0x72, 0x82, 0x09, 0x0A, 0x16, 0x17, 0x18, 0x19, 0x1A, 0x25, 0x26, 0x27, 0x28,
    0x29, 0x2A, 0x34, 0x35, 0x36, 0x37, 0x38, 0x39, 0x3A, 0x43, 0x44, 0x45, 0x46, 0x47, 0x48, 0x49, 0x4A, 0x53, 0x54, 0x55, 0x56, 0x57, 0x58, 0x59,
    0x5A, 0x63, 0x64, 0x65, 0x66, 0x67, 0x68, 0x69, 0x6A, 0x73, 0x74, 0x75, 0x76, 0x77, 0x78, 0x79, 0x7A, 0x83, 0x84, 0x85, 0x86, 0x87, 0x88, 0x89,
    0x8A, 0x92, 0x93, 0x94, 0x95, 0x96, 0x97, 0x98, 0x99, 0x9A, 0xA2, 0xA3, 0xA4, 0xA5, 0xA6, 0xA7, 0xA8, 0xA9, 0xAA, 0xB2, 0xB3, 0xB4, 0xB5, 0xB6,
    0xB7, 0xB8, 0xB9, 0xBA, 0xC2, 0xC3, 0xC4, 0xC5, 0xC6, 0xC7, 0xC8, 0xC9, 0xCA, 0xD2, 0xD3, 0xD4, 0xD5, 0xD6, 0xD7, 0xD8, 0xD9, 0xDA, 0xE1, 0xE2,
    0xE3, 0xE4, 0xE5, 0xE6, 0xE7, 0xE8, 0xE9, 0xEA, 0xF1, 0xF2, 0xF3, 0xF4, 0xF5, 0xF6, 0xF7, 0xF8, 0xF9, 0xFA,
)
_DC_CHROMINANCE_COUNTS = (0, 3, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0)
_DC_CHROMINANCE_VALUES = tuple(range(12))
_AC_CHROMINANCE_COUNTS = (0, 2, 1, 2, 4, 4, 3, 4, 7, 5, 4, 4, 0, 1, 2, 0x77)
_AC_CHROMINANCE_VALUES = (
    0x00, 0x01, 0x02, 0x03, 0x11, 0x04, 0x05, 0x21, 0x31, 0x06, 0x12, 0x41, 0x51, 0x07, 0x61, 0x71, 0x13, 0x22, 0x32, 0x81, 0x08, 0x14, 0x42, 0x91,
    0xA1, 0xB1, 0xC1, 0x09, 0x23, 0x33, 0x52, 0xF0, 0x15, 0x62, 0x72, 0xD1, 0x0A, 0x16, 0x24, 0x34, 0xE1, 0x25, 0xF1, 0x17, 0x18, 0x19, 0x1A, 0x26,
    0x27, 0x28, 0x29, 0x2A, 0x35, 0x36, 0x37, 0x38, 0x39, 0x3A, 0x43, 0x44, 0x45, 0x46, 0x47, 0x48, 0x49, 0x4A, 0x53, 0x54, 0x55, 0x56, 0x57, 0x58,
    0x59, 0x5A, 0x63, 0x64, 0x65, 0x66, 0x67, 0x68, 0x69, 0x6A, 0x73, 0x74, 0x75, 0x76, 0x77, 0x78, 0x79, 0x7A, 0x82, 0x83, 0x84, 0x85, 0x86, 0x87,
    0x88, 0x89, 0x8A, 0x92, 0x93, 0x94, 0x95, 0x96, 0x97, 0x98, 0x99, 0x9A, 0xA2, 0xA3, 0xA4, 0xA5, 0xA6, 0xA7, 0xA8, 0xA9, 0xAA, 0xB2, 0xB3, 0xB4,
    0xB5, 0xB6, 0xB7, 0xB8, 0xB9, 0xBA, 0xC2, 0xC3, 0xC4, 0xC5, 0xC6, 0xC7, 0xC8, 0xC9, 0xCA, 0xD2, 0xD3, 0xD4, 0xD5, 0xD6, 0xD7, 0xD8, 0xD9, 0xDA,
    0xE2, 0xE3, 0xE4, 0xE5, 0xE6, 0xE7, 0xE8, 0xE9, 0xEA, 0xF2, 0xF3, 0xF4, 0xF5, 0xF6, 0xF7, 0xF8, 0xF9, 0xFA,
)

_Y_QUANT = (
    16, 11, 10, 16, 24, 40, 51, 61, 12, 12, 14, 19, 26, 58, 60, 55, 14, 13, 16, 24, 40, 57, 69, 56, 14, 17, 22, 29, 51, 87, 80, 62, 18, 22,
    37, 56, 68, 109, 103, 77, 24, 35, 55, 64, 81, 104, 113, 92, 49, 64, 78, 87, 103, 121, 120, 101, 72, 92, 95, 98, 112, 100, 103, 99,
)
_UV_QUANT = (
    17, 18, 24, 47, 99, 99, 99, 99, 18, 21, 26, 66, 99, 99, 99, 99, 24, 26, 56, 99, 99, 99, 99, 99, 47, 66, 99, 99, 99, 99, 99, 99,
) + (99,) * 32

_AASF = tuple(
    factor * 2.828427125
    for factor in (1.0, 1.387039845, 1.306562965, 1.175875602, 1.0, 0.785694958, 0.541196100, 0.275899379)
)

_HEAD0 = bytes((
    0xFF, 0xD8, 0xFF, 0xE0, 0, 0x10, ord("J"), ord("F"), ord("I"), ord("F"), 0, 1, 1, 0, 0, 1, 0, 1, 0, 0,
    0xFF, 0xDB, 0, 0x84, 0,
))
_HEAD2 = bytes((0xFF, 0xDA, 0, 0xC, 3, 1, 0, 2, 0x11, 3, 0x11, 0, 0x3F, 0))
_FILL_BITS = (0x7F, 7)
_DEFAULT_QUALITY = 90

Code = tuple[int, int]


def _huffman_codes(counts: Sequence[int], values: Sequence[int]) -> dict[int, Code]:
    """Canonical Huffman codes (code, length) for each symbol."""
    codes: dict[int, Code] = {}
    symbols = iter(values)
    code = 0
    for length, count in enumerate(counts, start=1):
        for _ in range(count):
            codes[next(symbols)] = (code, length)
            code += 1
        code <<= 1
    return codes


_Y_DC = _huffman_codes(_DC_LUMINANCE_COUNTS, _DC_LUMINANCE_VALUES)
_Y_AC = _huffman_codes(_AC_LUMINANCE_COUNTS, _AC_LUMINANCE_VALUES)
_UV_DC = _huffman_codes(_DC_CHROMINANCE_COUNTS, _DC_CHROMINANCE_VALUES)
_UV_AC = _huffman_codes(_AC_CHROMINANCE_COUNTS, _AC_CHROMINANCE_VALUES)
_NO_CODE: Code = (0, 0)


class _BitWriter:
    """Most-significant-bit-first writer with 0xFF byte stuffing."""

    def __init__(self, out: bytearray) -> None:
        self.out = out
        self.buffer = 0
        self.count = 0

    def write(self, bits: Code) -> None:
        code, length = bits
        self.count += length
        self.buffer |= code << (24 - self.count)
        while self.count >= 8:
            byte = (self.buffer >> 16) & 0xFF
            self.out.append(byte)
            if byte == 0xFF:
                self.out.append(0)
            self.buffer = (self.buffer << 8) & 0xFFFFFF
            self.count -= 8


def _dct(d: Sequence[float]) -> list[float]:
    """One-dimensional forward DCT of eight samples (AAN, unscaled)."""
    d0, d1, d2, d3, d4, d5, d6, d7 = d
    tmp0, tmp7 = d0 + d7, d0 - d7
    tmp1, tmp6 = d1 + d6, d1 - d6
    tmp2, tmp5 = d2 + d5, d2 - d5
    tmp3, tmp4 = d3 + d4, d3 - d4

    tmp10, tmp13 = tmp0 + tmp3, tmp0 - tmp3
    tmp11, tmp12 = tmp1 + tmp2, tmp1 - tmp2
    out0, out4 = tmp10 + tmp11, tmp10 - tmp11
    z1 = (tmp12 + tmp13) * 0.707106781
    out2, out6 = tmp13 + z1, tmp13 - z1

    tmp10 = tmp4 + tmp5
    tmp11 = tmp5 + tmp6
    tmp12 = tmp6 + tmp7
    z5 = (tmp10 - tmp12) * 0.382683433
    z2 = tmp10 * 0.541196100 + z5
    z4 = tmp12 * 1.306562965 + z5
    z3 = tmp11 * 0.707106781
    z11, z13 = tmp7 + z3, tmp7 - z3
    return [out0, z11 + z4, out2, z13 - z2, out4, z13 + z2, out6, z11 - z4]


def _magnitude_bits(value: int) -> Code:
    size = max(abs(value).bit_length(), 1)
    if value < 0:
        value -= 1
    return value & ((1 << size) - 1), size


def _encode_block(
    writer: _BitWriter,
    block: list[float],
    fdtbl: Sequence[float],
    dc: int,
    dc_codes: dict[int, Code],
    ac_codes: dict[int, Code],
) -> int:
    """Transform, quantize and entropy-code one 8x8 block; returns its DC value."""
    for r in range(8):
        block[r * 8:r * 8 + 8] = _dct(block[r * 8:r * 8 + 8])
    for c in range(8):
        block[c::8] = _dct(block[c::8])

    du = [0] * 64
    for j, (sample, scale) in enumerate(zip(block, fdtbl)):
        v = sample * scale
        du[_ZIGZAG[j]] = int(v - 0.5 if v < 0 else v + 0.5)

    diff = du[0] - dc
    if diff == 0:
        writer.write(dc_codes.get(0, _NO_CODE))
    else:
        bits = _magnitude_bits(diff)
        writer.write(dc_codes.get(bits[1], _NO_CODE))
        writer.write(bits)

    end_of_block = ac_codes[0x00]
    sixteen_zeros = ac_codes[0xF0]
    last = 63
    while last > 0 and du[last] == 0:
        last -= 1
    if last == 0:
        writer.write(end_of_block)
        return du[0]

    i = 1
    while i <= last:
        start = i
        while du[i] == 0 and i <= last:
            i += 1
        zeros = i - start
        if zeros >= 16:
            for _ in range(zeros >> 4):
                writer.write(sixteen_zeros)
            zeros &= 15
        bits = _magnitude_bits(du[i])
        writer.write(ac_codes.get((zeros << 4) + bits[1], _NO_CODE))
        writer.write(bits)
        i += 1
    if last != 63:
        writer.write(end_of_block)
    return du[0]


def _scaled_table(base: Sequence[int], quality: int) -> list[int]:
    table = [0] * 64
    for i, value in enumerate(base):
        scaled = (value * quality + 50) // 100
        table[_ZIGZAG[i]] = min(max(scaled, 1), 255)
    return table


def _divisors(table: Sequence[int]) -> list[float]:
    return [
        1 / (table[_ZIGZAG[row * 8 + col]] * _AASF[row] * _AASF[col])
        for row in range(8)
        for col in range(8)
    ]


def _sample(
    raw: bytes, width: int, height: int, components: int,
    x0: int, y0: int, size: int, flip_vertically: bool,
) -> tuple[list[float], list[float], list[float]]:
    """Convert a size x size tile to Y, U and V, repeating the last row and column past the edge."""
    green_offset = 1 if components > 2 else 0
    blue_offset = 2 if components > 2 else 0
    ys: list[float] = []
    us: list[float] = []
    vs: list[float] = []
    for row in range(y0, y0 + size):
        clamped = min(row, height - 1)
        source_row = height - 1 - clamped if flip_vertically else clamped
        base = source_row * width * components
        for col in range(x0, x0 + size):
            p = base + min(col, width - 1) * components
            r, g, b = raw[p], raw[p + green_offset], raw[p + blue_offset]
            ys.append(0.29900 * r + 0.58700 * g + 0.11400 * b - 128)
            us.append(-0.16874 * r - 0.33126 * g + 0.50000 * b)
            vs.append(0.50000 * r - 0.41869 * g - 0.08131 * b)
    return ys, us, vs


def _sub_block(samples: Sequence[float], stride: int, top: int, left: int) -> list[float]:
    return [samples[(top + r) * stride + left + c] for r in range(8) for c in range(8)]


def _average_2x2(samples: Sequence[float]) -> list[float]:
    out = []
    for yy in range(8):
        for xx in range(8):
            j = yy * 32 + xx * 2
            out.append((samples[j] + samples[j + 1] + samples[j + 16] + samples[j + 17]) * 0.25)
    return out


def encode_jpeg(
    width: int,
    height: int,
    components: int,
    data: Iterable[int] | bytes,
    *,
    quality: int = _DEFAULT_QUALITY,
    flip_vertically: bool = False,
) -> bytes:
    """Encode pixels as a baseline JPEG file."""
    if width <= 0 or height <= 0:
        raise ValueError(f"image size must be positive, got {width}x{height}")
    if not 1 <= components <= 4:
        raise ValueError(f"components must be 1..4, got {components}")
    raw = bytes(data)
    needed = width * height * components
    if len(raw) < needed:
        raise ValueError(f"expected at least {needed} bytes of pixel data, got {len(raw)}")

    quality = quality or _DEFAULT_QUALITY
    subsample = quality <= 90
    quality = min(max(quality, 1), 100)
    quality = 5000 // quality if quality < 50 else 200 - quality * 2

    y_table = _scaled_table(_Y_QUANT, quality)
    uv_table = _scaled_table(_UV_QUANT, quality)
    fdtbl_y = _divisors(y_table)
    fdtbl_uv = _divisors(uv_table)

    out = bytearray(_HEAD0)
    out += bytes(y_table)
    out.append(1)
    out += bytes(uv_table)
    out += bytes((
        0xFF, 0xC0, 0, 0x11, 8, (height >> 8) & 0xFF, height & 0xFF, (width >> 8) & 0xFF, width & 0xFF,
        3, 1, 0x22 if subsample else 0x11, 0, 2, 0x11, 1, 3, 0x11, 1, 0xFF, 0xC4, 0x01, 0xA2, 0,
    ))
    out += bytes(_DC_LUMINANCE_COUNTS) + bytes(_DC_LUMINANCE_VALUES)
    out.append(0x10)
    out += bytes(_AC_LUMINANCE_COUNTS) + bytes(_AC_LUMINANCE_VALUES)
    out.append(1)
    out += bytes(_DC_CHROMINANCE_COUNTS) + bytes(_DC_CHROMINANCE_VALUES)
    out.append(0x11)
    out += bytes(_AC_CHROMINANCE_COUNTS) + bytes(_AC_CHROMINANCE_VALUES)
    out += _HEAD2

    writer = _BitWriter(out)
    dc_y = dc_u = dc_v = 0
    tile = 16 if subsample else 8
    for y0 in range(0, height, tile):
        for x0 in range(0, width, tile):
            ys, us, vs = _sample(raw, width, height, components, x0, y0, tile, flip_vertically)
            if subsample:
                for top, left in ((0, 0), (0, 8), (8, 0), (8, 8)):
                    dc_y = _encode_block(writer, _sub_block(ys, 16, top, left), fdtbl_y, dc_y, _Y_DC, _Y_AC)
                dc_u = _encode_block(writer, _average_2x2(us), fdtbl_uv, dc_u, _UV_DC, _UV_AC)
                dc_v = _encode_block(writer, _average_2x2(vs), fdtbl_uv, dc_v, _UV_DC, _UV_AC)
            else:
                dc_y = _encode_block(writer, ys, fdtbl_y, dc_y, _Y_DC, _Y_AC)
                dc_u = _encode_block(writer, us, fdtbl_uv, dc_u, _UV_DC, _UV_AC)
                dc_v = _encode_block(writer, vs, fdtbl_uv, dc_v, _UV_DC, _UV_AC)

    writer.write(_FILL_BITS)
    out += b"\xFF\xD9"
    return bytes(out)


def write_jpeg(
    path: str | os.PathLike,
    width: int,
    height: int,
    components: int,
    data: Iterable[int] | bytes,
    *,
    quality: int = _DEFAULT_QUALITY,
    flip_vertically: bool = False,
) -> None:
    """Encode as JPEG and write the file."""
    Path(path).write_bytes(
        encode_jpeg(width, height, components, data, quality=quality, flip_vertically=flip_vertically)
    )