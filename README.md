# gfxkit

Image encoders and marching-cubes tables in pure Python, with no dependencies.

## Modules

- `gfxkit.rasterformats` encodes BMP, TGA and Radiance HDR images.
  - `encode_bmp` and `write_bmp` produce a 24-bit BMP. Grey input is expanded to RGB. Alpha is composited onto a pink background, and rows are padded to four bytes.
  - `encode_tga` and `write_tga` produce a TGA file, run-length compressed by default. Pass `rle=False` for raw pixels. Alpha is kept.
  - `encode_hdr` and `write_hdr` take linear floats and produce Radiance RGBE. Scanlines from 8 to 32767 pixels wide are run-length encoded. Alpha is dropped, and a single channel is copied into all three colours.
  - `linear_to_rgbe(red, green, blue)` packs one colour into four RGBE bytes.
- `gfxkit.png` has `encode_png` and `write_png`, plus the `paeth` predictor.
  - `stride` is the number of bytes between the starts of two rows; `0` means the rows are packed.
  - `compression_level` defaults to 8.
  - `force_filter` set to 0–4 uses that filter for every row. Any other value picks, row by row, the filter whose output has the smallest sum of signed bytes.
- `gfxkit.jpeg` has `encode_jpeg` and `write_jpeg`, which produce baseline JPEG.
  - `quality` runs from 1 to 100; `0` means the default of 90.
  - At a quality of 90 or below, chroma is subsampled 2x2. Alpha is ignored.
- `gfxkit.deflate` has `zlib_compress(data, quality=8)` and `crc32(data)`.
  - `zlib_compress` writes a zlib stream made of one fixed-Huffman block, using hash-chain matching with lazy evaluation.
  - `quality` limits how many earlier positions each hash bucket keeps; the minimum is 5.
- `gfxkit.triangulation` holds the marching-cubes tables `EDGE_TABLE` and `TRIANGLE_TABLE`.
  - `edge_mask(cube_index)` returns the 12-bit edge mask of a corner case.
  - `triangles(cube_index)` returns the triangles of a corner case, each as three edge indices.
  - An index outside 0–255 raises `ValueError`.

Every encoder takes `width`, `height`, `components` and `data`, plus a keyword-only `flip_vertically`. Pixel data is a flat sequence of channel values, stored left to right and top to bottom. `components` is 1 (Y), 2 (YA), 3 (RGB) or 4 (RGBA). BMP, TGA, PNG and JPEG take 8-bit values, and HDR takes floats.

The `encode_*` functions return `bytes`. The `write_*` functions take a path first and write the file. Sizes that are not valid, a component count outside 1–4 and too little pixel data all raise `ValueError`. HDR and JPEG also require a width and height of at least 1.

## Example

```python
from gfxkit.png import write_png
from gfxkit.jpeg import encode_jpeg

# A 2x2 RGB image: red, green / blue, white.
pixels = bytes([255, 0, 0,  0, 255, 0,
                0, 0, 255,  255, 255, 255])
write_png("tiny.png", 2, 2, 3, pixels)
jpeg_bytes = encode_jpeg(2, 2, 3, pixels, quality=95)
```

## What it does not do

gfxkit only writes images. It cannot read or decode any format. Apart from the lookup tables, it has no marching-cubes mesher. There is no command-line tool; use it as a library.

## Installation and tests

```
pip install .
pip install .[test]
pytest
```