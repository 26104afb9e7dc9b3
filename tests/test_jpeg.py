import pytest

from gfxkit.jpeg import encode_jpeg, write_jpeg

Y_TABLE_OFFSET = 25
UV_TABLE_OFFSET = Y_TABLE_OFFSET + 64 + 1
SOF_OFFSET = UV_TABLE_OFFSET + 64


def _gradient_rgb(width, height):
    return bytes(
        value
        for y in range(height)
        for x in range(width)
        for value in ((x * 13) % 256, (y * 29) % 256, ((x + y) * 7) % 256)
    )


def _scan_data(encoded):
    start = encoded.index(b"\xFF\xDA") + 14
    return encoded[start:-2]


def test_starts_with_soi_and_jfif_and_ends_with_eoi():
    encoded = encode_jpeg(4, 4, 3, _gradient_rgb(4, 4))
    assert encoded[:4] == b"\xFF\xD8\xFF\xE0"
    assert encoded[6:11] == b"JFIF\x00"
    assert encoded[-2:] == b"\xFF\xD9"


def test_frame_header_holds_dimensions():
    encoded = encode_jpeg(300, 5, 3, _gradient_rgb(300, 5))
    assert encoded[SOF_OFFSET:SOF_OFFSET + 2] == b"\xFF\xC0"
    assert encoded[SOF_OFFSET + 5:SOF_OFFSET + 7] == (5).to_bytes(2, "big")
    assert encoded[SOF_OFFSET + 7:SOF_OFFSET + 9] == (300).to_bytes(2, "big")


@pytest.mark.parametrize("quality, sampling", [(90, 0x22), (50, 0x22), (91, 0x11), (100, 0x11)])
def test_subsampling_follows_quality(quality, sampling):
    encoded = encode_jpeg(8, 8, 3, _gradient_rgb(8, 8), quality=quality)
    assert encoded[SOF_OFFSET + 11] == sampling


def test_quality_50_uses_standard_tables():
    encoded = encode_jpeg(8, 8, 1, bytes(64), quality=50)
    y_table = encoded[Y_TABLE_OFFSET:Y_TABLE_OFFSET + 64]
    uv_table = encoded[UV_TABLE_OFFSET:UV_TABLE_OFFSET + 64]
    assert y_table[0] == 16
    assert uv_table[0] == 17
    assert encoded[Y_TABLE_OFFSET + 64] == 1


def test_quality_100_table_is_all_ones():
    encoded = encode_jpeg(8, 8, 1, bytes(64), quality=100)
    assert set(encoded[Y_TABLE_OFFSET:Y_TABLE_OFFSET + 64]) == {1}
    assert set(encoded[UV_TABLE_OFFSET:UV_TABLE_OFFSET + 64]) == {1}


def test_lower_quality_gives_coarser_tables():
    low = encode_jpeg(8, 8, 1, bytes(64), quality=10)
    high = encode_jpeg(8, 8, 1, bytes(64), quality=80)
    low_table = low[Y_TABLE_OFFSET:Y_TABLE_OFFSET + 64]
    high_table = high[Y_TABLE_OFFSET:Y_TABLE_OFFSET + 64]
    assert all(a >= b for a, b in zip(low_table, high_table))
    assert sum(low_table) > sum(high_table)


def test_quality_zero_means_default():
    data = _gradient_rgb(10, 7)
    assert encode_jpeg(10, 7, 3, data, quality=0) == encode_jpeg(10, 7, 3, data, quality=90)


def test_quality_is_clamped():
    data = _gradient_rgb(9, 9)
    assert encode_jpeg(9, 9, 3, data, quality=150) == encode_jpeg(9, 9, 3, data, quality=100)
    assert encode_jpeg(9, 9, 3, data, quality=-5) == encode_jpeg(9, 9, 3, data, quality=1)


def test_grey_alpha_matches_grey():
    grey = bytes((i * 17) % 256 for i in range(20 * 12))
    grey_alpha = bytes(v for g in grey for v in (g, 77))
    assert encode_jpeg(20, 12, 2, grey_alpha) == encode_jpeg(20, 12, 1, grey)


def test_alpha_is_ignored_for_rgba():
    rgb = _gradient_rgb(11, 6)
    pixels = [rgb[i:i + 3] for i in range(0, len(rgb), 3)]
    rgba = b"".join(p + bytes((200,)) for p in pixels)
    assert encode_jpeg(11, 6, 4, rgba, quality=95) == encode_jpeg(11, 6, 3, rgb, quality=95)


def test_flip_matches_flipped_rows():
    width, height = 12, 10
    data = _gradient_rgb(width, height)
    row = width * 3
    flipped = b"".join(data[r * row:(r + 1) * row] for r in reversed(range(height)))
    assert encode_jpeg(width, height, 3, data, flip_vertically=True) == encode_jpeg(width, height, 3, flipped)


def test_scan_data_is_byte_stuffed():
    encoded = encode_jpeg(33, 17, 3, _gradient_rgb(33, 17), quality=100)
    scan = _scan_data(encoded)
    positions = [i for i, byte in enumerate(scan) if byte == 0xFF]
    assert all(i + 1 < len(scan) and scan[i + 1] == 0 for i in positions)


def test_uniform_image_is_smaller_than_detailed():
    uniform = encode_jpeg(32, 32, 3, bytes([120]) * (32 * 32 * 3))
    detailed = encode_jpeg(32, 32, 3, _gradient_rgb(32, 32))
    assert len(uniform) < len(detailed)


def test_deterministic():
    data = _gradient_rgb(17, 5)
    assert encode_jpeg(17, 5, 3, data) == encode_jpeg(17, 5, 3, list(data))


def test_write_jpeg_writes_encoded_bytes(tmp_path):
    data = _gradient_rgb(6, 6)
    path = tmp_path / "out.jpg"
    write_jpeg(path, 6, 6, 3, data, quality=75)
    assert path.read_bytes() == encode_jpeg(6, 6, 3, data, quality=75)


@pytest.mark.parametrize("width, height", [(0, 4), (4, 0), (-1, 4)])
def test_rejects_empty_size(width, height):
    with pytest.raises(ValueError):
        encode_jpeg(width, height, 3, bytes(48))


@pytest.mark.parametrize("components", [0, 5])
def test_rejects_bad_components(components):
    with pytest.raises(ValueError):
        encode_jpeg(2, 2, components, bytes(40))


def test_rejects_short_data():
    with pytest.raises(ValueError):
        encode_jpeg(4, 4, 3, bytes(47))