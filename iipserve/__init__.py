"""URL decoding, image source detection, request parsing and response text for an IIP, IIIF and DeepZoom image server."""

__version__ = "0.1.0"