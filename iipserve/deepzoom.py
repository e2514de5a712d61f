"""Parsing and answering of DeepZoom (.dzi and tile) requests."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .response import VERSION

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


@dataclass(frozen=True)
class DeepZoomRequest:
    """A parsed DeepZoom request: a descriptor or a single tile."""

    prefix: str
    is_descriptor: bool
    resolution: int = 0
    x: int = 0
    y: int = 0


def parse_request(argument: str) -> DeepZoomRequest:
    """Parse ``image.dzi`` or ``image_files/r/x_y.jpg`` requests."""
    suffix = argument[argument.rfind(".") + 1 :]
    if suffix == "dzi":
        return DeepZoomRequest(prefix=argument[:-4], is_descriptor=True)

    files = argument.rfind("_files/")
    prefix = argument if files < 0 else argument[:files]

    n1 = argument.rfind("/")
    n2 = argument[: max(n1, 0)].rfind("/") + 1
    resolution = _atoi(argument[n2:n1] if n1 >= 0 else argument[n2:])

    dot = argument.rfind(".")
    name = argument[n1 + 1 : dot] if dot > n1 else argument[n1 + 1 :]
    x_text, sep, y_text = name.partition("_")
    if not sep:
        y_text = name
    return DeepZoomRequest(
        prefix=prefix,
        is_descriptor=False,
        resolution=resolution,
        x=_atoi(x_text),
        y=_atoi(y_text),
    )


def dzi_levels(width: int, height: int) -> int:
    """Return the DeepZoom level count: ceil(log2(max(width, height)))."""
    largest = max(width, height)
    if largest <= 0:
        raise ValueError("image dimensions must be positive")
    return (largest - 1).bit_length()


def map_resolution(requested: int, levels: int, num_resolutions: int) -> int:
    """Map a DeepZoom level onto one of the image's real resolutions."""
    resolution = requested - (levels - num_resolutions) - 1
    return max(0, min(resolution, num_resolutions - 1))


def tile_index(x: int, y: int, width: int, tile_width: int) -> int:
    """Return the row-major tile index for tile column ``x`` and row ``y``."""
    columns = -(-width // tile_width)
    return y * columns + x


def dzi_descriptor(
    tile_size: int, width: int, height: int, timestamp: str, cache_control: str
) -> str:
    """Return the HTTP headers and XML body of a .dzi descriptor."""
    return (
        f"Server: iipsrv/{VERSION}\r\n"
        "Content-Type: application/xml\r\n"
        f"Last-Modified: {timestamp}\r\n"
        f"{cache_control}\r\n"
        "\r\n"
        '<?xml version="1.0" encoding="UTF-8"?>\r\n'
        '<Image xmlns="http://schemas.microsoft.com/deepzoom/2008"\r\n'
        f'TileSize="{tile_size}" Overlap="0" Format="jpg">'
        f'<Size Width="{width}" Height="{height}"/>'
        "</Image>"
    )