[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iipserve"
version = "0.1.0"
description = "Request parsing and response building for an IIP, IIIF and DeepZoom tiled image server"
requires-python = ">=3.10"
dependencies = []
keywords = ["iip", "iiif", "deepzoom", "image server", "tiles", "pyramid"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["iipserve"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
