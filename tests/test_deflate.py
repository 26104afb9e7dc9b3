import random
import zlib

import pytest

from gfxkit.deflate import crc32, zlib_compress


def _random_bytes(size, seed):
    rng = random.Random(seed)
    return bytes(rng.randrange(256) for _ in range(size))


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"a",
        b"abc",
        b"abcd",
        b"hello hello hello hello",
        bytes(range(256)) * 4,
        b"\x00" * 1000,
        b"\xff" * 300 + b"\x90" * 300,
    ],
)
def test_round_trip(data):
    assert zlib.decompress(zlib_compress(data)) == data


def test_round_trip_random_data():
    data = _random_bytes(5000, seed=1)
    assert zlib.decompress(zlib_compress(data)) == data


def test_round_trip_beyond_window():
    pattern = _random_bytes(700, seed=2)
    data = pattern * 60 + _random_bytes(40000, seed=3) + pattern * 3
    assert len(data) > 32768
    assert zlib.decompress(zlib_compress(data)) == data


def test_header_bytes():
    out = zlib_compress(b"some data to compress")
    assert out[:2] == b"\x78\x5e"


def test_trailer_is_adler32():
    data = _random_bytes(7000, seed=4)
    out = zlib_compress(data)
    assert out[-4:] == zlib.adler32(data).to_bytes(4, "big")


def test_empty_stream_bytes():
    assert zlib_compress(b"") == b"\x78\x5e\x03\x00\x00\x00\x00\x01"


def test_repetitive_data_shrinks():
    data = b"abcdefgh" * 2000
    assert len(zlib_compress(data)) < len(data) // 10


def test_low_quality_is_clamped():
    data = (b"the quick brown fox " * 50) + _random_bytes(500, seed=5)
    assert zlib_compress(data, 0) == zlib_compress(data, 5)


@pytest.mark.parametrize("quality", [5, 8, 16, 64])
def test_any_quality_round_trips(quality):
    data = (b"pattern-" * 300) + _random_bytes(300, seed=6) + (b"pattern-" * 300)
    assert zlib.decompress(zlib_compress(data, quality)) == data


def test_accepts_int_sequence():
    values = [1, 2, 3, 1, 2, 3, 1, 2, 3, 1, 2, 3]
    assert zlib.decompress(zlib_compress(values)) == bytes(values)


def test_rejects_text():
    with pytest.raises(TypeError):
        zlib_compress("text")


def test_crc32_check_value():
    assert crc32(b"123456789") == 0xCBF43926


def test_crc32_empty():
    assert crc32(b"") == 0


@pytest.mark.parametrize("seed", [7, 8, 9])
def test_crc32_matches_standard_library(seed):
    data = _random_bytes(1000, seed)
    assert crc32(data) == zlib.crc32(data)


def test_crc32_of_png_iend_tag():
    assert crc32(b"IEND") == zlib.crc32(b"IEND")
    assert crc32(b"IEND").to_bytes(4, "big") == b"\xaeB`\x82"