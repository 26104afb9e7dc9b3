import zlib

import pytest

from gfxkit.png import encode_png, paeth, write_png

SIGNATURE = bytes((137, 80, 78, 71, 13, 10, 26, 10))


def _chunks(png):
    assert png[:8] == SIGNATURE
    pos = 8
    chunks = []
    while pos < len(png):
        length = int.from_bytes(png[pos:pos + 4], "big")
        tag = png[pos + 4:pos + 8]
        payload = png[pos + 8:pos + 8 + length]
        crc = int.from_bytes(png[pos + 8 + length:pos + 12 + length], "big")
        assert zlib.crc32(tag + payload) == crc
        chunks.append((tag, payload))
        pos += 12 + length
    return chunks


def _unfilter(filtered, width, height, n):
    row_size = width * n
    rows = []
    prev = bytearray(row_size)
    for r in range(height):
        start = r * (row_size + 1)
        kind = filtered[start]
        line = filtered[start + 1:start + 1 + row_size]
        cur = bytearray(row_size)
        for i in range(row_size):
            a = cur[i - n] if i >= n else 0
            b = prev[i]
            c = prev[i - n] if i >= n else 0
            if kind == 0:
                pred = 0
            elif kind == 1:
                pred = a
            elif kind == 2:
                pred = b
            elif kind == 3:
                pred = (a + b) >> 1
            else:
                pred = paeth(a, b, c)
            cur[i] = (line[i] + pred) & 0xFF
        rows.append(bytes(cur))
        prev = cur
    return b"".join(rows)


def _decode(png):
    chunks = dict(_chunks(png))
    return zlib.decompress(chunks[b"IDAT"])


def _image(width, height, n):
    return bytes((x * 37 + y * 11 + c * 5) % 256
                 for y in range(height) for x in range(width) for c in range(n))


def test_paeth_picks_one_of_its_inputs():
    for a, b, c in [(1, 2, 3), (200, 10, 50), (0, 0, 0), (255, 0, 128)]:
        assert paeth(a, b, c) in (a, b, c)


def test_paeth_equal_left_and_upper_left_gives_up():
    assert paeth(7, 99, 7) == 99


def test_chunk_layout_and_header():
    png = encode_png(3, 2, 4, _image(3, 2, 4))
    chunks = _chunks(png)
    assert [tag for tag, _ in chunks] == [b"IHDR", b"IDAT", b"IEND"]
    header = chunks[0][1]
    assert int.from_bytes(header[0:4], "big") == 3
    assert int.from_bytes(header[4:8], "big") == 2
    assert header[8] == 8
    assert header[9] == 6
    assert png[-12:] == bytes.fromhex("0000000049454e44ae426082")


@pytest.mark.parametrize("n, color_type", [(1, 0), (2, 4), (3, 2), (4, 6)])
def test_color_type(n, color_type):
    png = encode_png(2, 2, n, _image(2, 2, n))
    assert _chunks(png)[0][1][9] == color_type


@pytest.mark.parametrize("n", [1, 2, 3, 4])
@pytest.mark.parametrize("forced", [-1, 0, 1, 2, 3, 4])
def test_round_trip(n, forced):
    width, height = 5, 4
    data = _image(width, height, n)
    filtered = _decode(encode_png(width, height, n, data, force_filter=forced))
    assert len(filtered) == height * (width * n + 1)
    if forced >= 0:
        assert all(filtered[r * (width * n + 1)] == forced for r in range(height))
    assert _unfilter(filtered, width, height, n) == data


def test_filter_none_stores_raw_rows():
    data = _image(3, 2, 3)
    filtered = _decode(encode_png(3, 2, 3, data, force_filter=0))
    assert filtered == b"\x00" + data[:9] + b"\x00" + data[9:]


def test_out_of_range_filter_means_automatic():
    data = _image(4, 3, 3)
    assert encode_png(4, 3, 3, data, force_filter=7) == encode_png(4, 3, 3, data)


def test_flip_vertically_reverses_rows():
    width, height, n = 3, 3, 3
    data = _image(width, height, n)
    row = width * n
    reversed_data = b"".join(data[r * row:(r + 1) * row] for r in reversed(range(height)))
    flipped = encode_png(width, height, n, data, flip_vertically=True)
    assert flipped == encode_png(width, height, n, reversed_data)
    assert _unfilter(_decode(flipped), width, height, n) == reversed_data


def test_stride_reads_subrectangle():
    width, height, n = 2, 3, 3
    wide = _image(4, height, n)
    inner = b"".join(wide[r * 12:r * 12 + width * n] for r in range(height))
    assert encode_png(width, height, n, wide, stride=12) == encode_png(width, height, n, inner)


def test_uniform_image_compresses():
    data = bytes(64 * 64 * 3)
    png = encode_png(64, 64, 3, data)
    assert len(png) < len(data)
    assert _unfilter(_decode(png), 64, 64, 3) == data


def test_errors():
    with pytest.raises(ValueError):
        encode_png(2, 2, 5, bytes(20))
    with pytest.raises(ValueError):
        encode_png(2, 2, 3, bytes(5))
    with pytest.raises(ValueError):
        encode_png(-1, 2, 3, bytes(12))


def test_write_png(tmp_path):
    data = _image(3, 3, 4)
    path = tmp_path / "image.png"
    write_png(path, 3, 3, 4, data, force_filter=1)
    assert path.read_bytes() == encode_png(3, 3, 4, data, force_filter=1)