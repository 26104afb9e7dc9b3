"""A small zlib compressor with fixed Huffman codes, and CRC-32."""

from __future__ import annotations

from typing import Iterable

_HASH_SIZE = 16384
_WINDOW = 32768
_MAX_MATCH = 258
_MIN_QUALITY = 5
_ADLER_MOD = 65521
_ADLER_BLOCK = 5552

_LENGTH_BASE = (
    3, 4, 5, 6, 7, 8, 9, 10, 11, 13, 15, 17, 19, 23, 27, 31, 35, 43, 51, 59,
    67, 83, 99, 115, 131, 163, 195, 227, 258, 259,
)
_LENGTH_EXTRA = (
    0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 2, 2, 2, 2, 3, 3, 3, 3,
    4, 4, 4, 4, 5, 5, 5, 5, 0,
)
_DIST_BASE = (
    1, 2, 3, 4, 5, 7, 9, 13, 17, 25, 33, 49, 65, 97, 129, 193, 257, 385, 513, 769,
    1025, 1537, 2049, 3073, 4097, 6145, 8193, 12289, 16385, 24577, 32768,
)
_DIST_EXTRA = (
    0, 0, 0, 0, 1, 1, 2, 2, 3, 3, 4, 4, 5, 5, 6, 6, 7, 7, 8, 8,
    9, 9, 10, 10, 11, 11, 12, 12, 13, 13,
)

_MASK32 = 0xFFFFFFFF


def _make_crc_table() -> tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = (c >> 1) ^ 0xEDB88320 if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


_CRC_TABLE = _make_crc_table()


def crc32(data: Iterable[int] | bytes) -> int:
    """CRC-32 of data, as used by PNG chunks."""
    crc = _MASK32
    for byte in bytes(data):
        crc = (crc >> 8) ^ _CRC_TABLE[(byte ^ crc) & 0xFF]
    return crc ^ _MASK32


def _adler32(data: bytes) -> int:
    s1, s2 = 1, 0
    start = 0
    block = len(data) % _ADLER_BLOCK
    while start < len(data):
        for byte in data[start:start + block]:
            s1 += byte
            s2 += s1
        s1 %= _ADLER_MOD
        s2 %= _ADLER_MOD
        start += block
        block = _ADLER_BLOCK
    return (s2 << 16) | s1


def _bit_reverse(code: int, bits: int) -> int:
    result = 0
    for _ in range(bits):
        result = (result << 1) | (code & 1)
        code >>= 1
    return result


def _hash(data: bytes, i: int) -> int:
    h = data[i] + (data[i + 1] << 8) + (data[i + 2] << 16)
    h = (h ^ (h << 3)) & _MASK32
    h = (h + (h >> 5)) & _MASK32
    h = (h ^ (h << 4)) & _MASK32
    h = (h + (h >> 17)) & _MASK32
    h = (h ^ (h << 25)) & _MASK32
    h = (h + (h >> 6)) & _MASK32
    return h & (_HASH_SIZE - 1)


def _match_length(data: bytes, a: int, b: int, limit: int) -> int:
    limit = min(limit, _MAX_MATCH)
    count = 0
    while count < limit and data[a + count] == data[b + count]:
        count += 1
    return count


class _BitWriter:
    """Least-significant-bit-first writer into a byte array."""

    def __init__(self, out: bytearray) -> None:
        self.out = out
        self.buffer = 0
        self.count = 0

    def add(self, code: int, bits: int) -> None:
        self.buffer |= code << self.count
        self.count += bits
        while self.count >= 8:
            self.out.append(self.buffer & 0xFF)
            self.buffer >>= 8
            self.count -= 8

    def huffman(self, symbol: int) -> None:
        """Write a literal/length symbol with the fixed Huffman code."""
        if symbol <= 143:
            self.add(_bit_reverse(0x30 + symbol, 8), 8)
        elif symbol <= 255:
            self.add(_bit_reverse(0x190 + symbol - 144, 9), 9)
        elif symbol <= 279:
            self.add(_bit_reverse(symbol - 256, 7), 7)
        else:
            self.add(_bit_reverse(0xC0 + symbol - 280, 8), 8)

    def pad(self) -> None:
        while self.count:
            self.add(0, 1)


def zlib_compress(data: Iterable[int] | bytes, quality: int = 8) -> bytes:
    """Compress into a zlib stream of one fixed-Huffman block.

    quality bounds how many earlier positions are kept per hash bucket;
    values below 5 count as 5.
    """
    raw = bytes(data)
    length = len(raw)
    quality = max(quality, _MIN_QUALITY)

    out = bytearray((0x78, 0x5E))
    bits = _BitWriter(out)
    bits.add(1, 1)  # final block
    bits.add(1, 2)  # fixed Huffman codes

    table: dict[int, list[int]] = {}
    i = 0
    while i < length - 3:
        h = _hash(raw, i)
        best = 3
        best_pos: int | None = None
        bucket = table.setdefault(h, [])
        for pos in bucket:
            if pos > i - _WINDOW:
                d = _match_length(raw, pos, i, length - i)
                if d >= best:
                    best, best_pos = d, pos
        if len(bucket) == 2 * quality:
            del bucket[:quality]
        bucket.append(i)

        if best_pos is not None:
            # Lazy matching: emit a literal if the next position matches longer.
            for pos in table.get(_hash(raw, i + 1), ()):
                if pos > i - (_WINDOW - 1):
                    if _match_length(raw, pos, i + 1, length - i - 1) > best:
                        best_pos = None
                        break

        if best_pos is not None:
            distance = i - best_pos
            j = 0
            while best > _LENGTH_BASE[j + 1] - 1:
                j += 1
            bits.huffman(j + 257)
            if _LENGTH_EXTRA[j]:
                bits.add(best - _LENGTH_BASE[j], _LENGTH_EXTRA[j])
            j = 0
            while distance > _DIST_BASE[j + 1] - 1:
                j += 1
            bits.add(_bit_reverse(j, 5), 5)
            if _DIST_EXTRA[j]:
                bits.add(distance - _DIST_BASE[j], _DIST_EXTRA[j])
            i += best
        else:
            bits.huffman(raw[i])
            i += 1

    for byte in raw[i:]:
        bits.huffman(byte)
    bits.huffman(256)
    bits.pad()

    out += _adler32(raw).to_bytes(4, "big")
    return bytes(out)