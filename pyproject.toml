[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gfxkit"
version = "0.1.0"
description = "Pure-Python BMP, TGA, Radiance HDR, PNG and JPEG encoders, a small zlib compressor and marching-cubes lookup tables"
requires-python = ">=3.10"
dependencies = []
keywords = ["graphics", "image", "encoder", "png", "jpeg", "bmp", "tga", "hdr", "zlib", "marching cubes"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gfxkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
