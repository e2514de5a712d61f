"""Geometry and header helpers for CVT (region export) responses."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .response import VERSION

STRIP_HEIGHT = 128
_ASPECT_TOLERANCE = 1.001


@dataclass(frozen=True)
class Viewport:
    """A pixel region of an image at a particular resolution."""

    left: int
    top: int
    width: int
    height: int


def _round(value: float) -> int:
    """Round half away from zero."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def clamp_viewport(
    left: int, top: int, width: int, height: int, image_width: int, image_height: int
) -> Viewport:
    """Shrink a region so that it does not extend past the image edges."""
    if width + left > image_width:
        width = image_width - left
    if height + top > image_height:
        height = image_height - top
    return Viewport(left, top, width, height)


def output_size(
    view_width: int,
    view_height: int,
    requested_width: int,
    requested_height: int,
    image_width: int,
    image_height: int,
    allow_upscaling: bool,
    maintain_aspect: bool,
) -> tuple[int, int]:
    """Return the final (width, height) of a resampled region.

    Without upscaling the size is capped at the image size of the chosen
    resolution. With the aspect ratio maintained the result fits within
    the requested size; differences under 0.1% are left alone.
    """
    if view_width <= 0 or view_height <= 0:
        raise ValueError("view dimensions must be positive")

    width, height = requested_width, requested_height
    if not allow_upscaling:
        width = min(width, image_width)
        height = min(height, image_height)

    if maintain_aspect:
        if height <= 0:
            raise ValueError("requested height must be positive")
        ratio = (width / view_width) / (height / view_height)
        if ratio < _ASPECT_TOLERANCE:
            height = _round((width / view_width) * view_height)
        elif ratio > _ASPECT_TOLERANCE:
            width = _round((height / view_height) * view_width)

    return width, height


def stretch_range(
    histogram: Sequence[int], bpc: int, fixed_point: bool
) -> tuple[int, int]:
    """Return the (low, high) range of occupied histogram bins.

    The histogram is computed at 8 bits; for deeper fixed-point images
    the bounds are scaled up to the native bit depth.
    """
    occupied = [index for index, count in enumerate(histogram) if count != 0]
    if not occupied:
        raise ValueError("histogram has no occupied bins")
    low, high = occupied[0], occupied[-1]
    if bpc > 8 and fixed_point:
        shift = bpc - 8
        low <<= shift
        high <<= shift
    return low, high


def strip_heights(height: int, strip_height: int = STRIP_HEIGHT) -> list[int]:
    """Return the heights of the strips an image is compressed in."""
    if strip_height <= 0:
        raise ValueError("strip height must be positive")
    full, rest = divmod(height, strip_height)
    heights = [strip_height] * full
    if rest:
        heights.append(rest)
    return heights


def download_name(path: str) -> str:
    """Return the file name of ``path`` without directory or suffix."""
    start = path.rfind("/") + 1
    dot = path.rfind(".")
    if dot >= start:
        return path[start:dot]
    return path[start:]


def response_headers(
    path: str, cache_control: str, timestamp: str, mime_type: str, suffix: str
) -> str:
    """Return the HTTP headers that precede the image data."""
    return (
        f"Server: iipsrv/{VERSION}\r\n"
        "X-Powered-By: IIPImage\r\n"
        f"{cache_control}\r\n"
        f"Last-Modified: {timestamp}\r\n"
        f"Content-Type: {mime_type}\r\n"
        f'Content-Disposition: inline;filename="{download_name(path)}.{suffix}"\r\n'
        "\r\n"
    )