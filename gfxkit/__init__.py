"""BMP, TGA, HDR, PNG and JPEG encoders, a zlib compressor and marching-cubes tables."""

__version__ = "0.1.0"

__all__ = ["triangulation", "rasterformats", "deflate", "png", "jpeg"]