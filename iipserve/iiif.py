"""Parsing of IIIF Image API requests and generation of info.json."""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass

from .response import VERSION

IIIF_SYNTAX = (
    "IIIF syntax is {identifier}/{region}/{size}/{rotation}/{quality}{.format}"
)
IIIF_PROFILE = "http://iiif.io/api/image/2/level1.json"
IIIF_CONTEXT = "http://iiif.io/api/image/2/context.json"
IIIF_PROTOCOL = "http://iiif.io/api/image"

_ALLOWED_ROTATIONS = (0.0, 90.0, 180.0, 270.0, 360.0)

_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_UNSIGNED = re.compile(r"\s*\+?(\d+)")


class IIIFError(ValueError):
    """Raised for a malformed or unsupported IIIF request."""


class Quality(enum.Enum):
    """Output qualities that can be requested."""

    COLOR = "color"
    GREY = "gray"
    BITONAL = "bitonal"


@dataclass(frozen=True)
class Region:
    """A requested region as fractions of the full image size."""

    left: float = 0.0
    top: float = 0.0
    width: float = 1.0
    height: float = 1.0


@dataclass(frozen=True)
class ImageRequest:
    """A fully parsed IIIF image request."""

    region: Region
    width: int
    height: int
    maintain_aspect: bool
    rotation: float
    flip: int
    quality: Quality


def _atof(text: str) -> float:
    match = _FLOAT.match(text)
    return float(match.group(1)) if match else 0.0


def _read_float(text: str, message: str) -> float:
    match = _FLOAT.match(text)
    if match is None:
        raise IIIFError(message)
    return float(match.group(1))


def _read_unsigned(text: str, message: str) -> int:
    match = _UNSIGNED.match(text)
    if match is None:
        raise IIIFError(message)
    return int(match.group(1))


def _round(value: float) -> int:
    """Round half away from zero."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def _tokens(text: str, separator: str) -> list[str]:
    return [token for token in text.split(separator) if token]


def split_request(argument: str) -> tuple[str, str, str]:
    """Split a decoded request into (identifier, suffix, parameters).

    For ``{id}/info.json`` the parameters are empty. For image requests
    the identifier is everything before the last four path segments. A
    request with no slash at all yields an empty suffix, meaning the
    client should be redirected to the info document.
    """
    last = argument.rfind("/")
    if last < 0:
        return argument, "", ""
    suffix = argument[last + 1 :]
    if suffix[:4] == "info":
        return argument[:last], suffix, ""
    position = last
    for _ in range(3):
        position = argument.rfind("/", 0, position)
        if position < 0:
            raise IIIFError("IIIF: Not enough parameters")
    return argument[:position], suffix, argument[position + 1 :]


def parse_region(text: str, width: int, height: int) -> Region:
    """Parse ``full``, ``square``, ``x,y,w,h`` or ``pct:x,y,w,h``."""
    region_text = text.lower()
    if region_text == "full":
        return Region()
    if region_text == "square":
        if height > width:
            size = width / height
            return Region(0.0, (1.0 - size) / 2.0, 1.0, size)
        if width > height:
            size = height / width
            return Region((1.0 - size) / 2.0, 0.0, size, 1.0)
        return Region()

    is_pct = region_text.startswith("pct:")
    if is_pct:
        region_text = region_text[4:]

    tokens = _tokens(region_text, ",")
    values = [0.0, 0.0, 1.0, 1.0]
    count = 0
    for token in tokens[:4]:
        values[count] = _atof(token)
        count += 1

    if values[2] <= 0.0 or values[3] <= 0.0 or len(tokens) > 4 or count < 4:
        raise IIIFError("IIIF: incorrect region format: " + region_text)

    wd, hd = (100.0, 100.0) if is_pct else (float(width), float(height))
    return Region(values[0] / wd, values[1] / hd, values[2] / wd, values[3] / hd)


def parse_size(
    text: str, region_width: int, region_height: int, max_size: int
) -> tuple[int, int, bool]:
    """Parse a size parameter into (width, height, maintain_aspect).

    ``region_width`` and ``region_height`` are the pixel size of the
    requested region. A ``max_size`` of 0 or less means no limit.
    """
    size_text = text.lower()
    if region_width <= 0 or region_height <= 0:
        raise IIIFError("IIIF: invalid size")
    width, height = region_width, region_height
    ratio = region_width / region_height
    maintain_aspect = True

    if size_text in ("full", "max"):
        pass
    elif size_text.startswith("pct:"):
        scale = _read_float(size_text[size_text.find(":") + 1 :], "invalid size")
        width = _round(width * scale / 100.0)
        height = _round(height * scale / 100.0)
    else:
        if size_text.startswith("!"):
            size_text = size_text[1:]
        else:
            maintain_aspect = False

        pos = size_text.find(",")
        if pos < 0:
            raise IIIFError("invalid size: no comma found")
        if pos == 0:
            height = _read_unsigned(size_text[1:], "invalid height")
            width = _round(height * ratio)
            maintain_aspect = True
        elif pos == len(size_text) - 1:
            width = _read_unsigned(size_text, "invalid width")
            height = _round(width / ratio)
            maintain_aspect = True
        else:
            width = _read_unsigned(size_text[:pos], "invalid width")
            height = _read_unsigned(size_text[pos + 1 :], "invalid height")

    if width == 0 or height == 0:
        raise IIIFError("IIIF: invalid size")

    if max_size > 0 and (width > max_size or height > max_size):
        if ratio > 1.0:
            width = max_size
            height = _round(max_size * ratio) if maintain_aspect else max_size
        else:
            height = max_size
            width = _round(max_size / ratio) if maintain_aspect else max_size

    return width, height, maintain_aspect


def parse_rotation(text: str) -> tuple[float, int]:
    """Parse a rotation into (degrees, flip).

    A leading ``!`` requests a horizontal flip (1); ``!180`` becomes a
    vertical flip (2) with no rotation.
    """
    flip = 0
    if text.startswith("!"):
        flip = 1
        text = text[1:]
    rotation = _read_float(text, "IIIF: invalid rotation")
    if rotation not in _ALLOWED_ROTATIONS:
        raise IIIFError(
            "IIIF: currently implemented rotation angles are 0, 90, 180 and 270 degrees"
        )
    if rotation == 180.0 and flip == 1:
        return 0.0, 2
    return rotation, flip


def parse_quality(text: str) -> Quality:
    """Parse ``{quality}{.format}``; only JPEG output is supported."""
    quality = text.lower()
    pos = quality.rfind(".")
    if pos >= 0:
        output_format = quality[pos + 1 :]
        quality = quality[:pos]
        if output_format != "jpg":
            raise IIIFError("IIIF :: Only JPEG output supported")
    if quality in ("native", "color", "default"):
        return Quality.COLOR
    if quality in ("grey", "gray"):
        return Quality.GREY
    if quality == "bitonal":
        return Quality.BITONAL
    raise IIIFError(
        "unsupported quality parameter - must be one of native, color or grey"
    )


def parse_image_request(
    params: str, width: int, height: int, max_size: int
) -> ImageRequest:
    """Parse ``{region}/{size}/{rotation}/{quality}{.format}``."""
    tokens = _tokens(params, "/")
    if len(tokens) > 4:
        head = tokens[:4]
    else:
        head = tokens

    region = Region()
    out_width = out_height = 0
    maintain_aspect = True
    rotation, flip = 0.0, 0
    quality = Quality.COLOR

    if len(head) > 0:
        region = parse_region(head[0], width, height)
    if len(head) > 1:
        out_width, out_height, maintain_aspect = parse_size(
            head[1],
            _round(region.width * width),
            _round(region.height * height),
            max_size,
        )
    if len(head) > 2:
        rotation, flip = parse_rotation(head[2])
    if len(head) > 3:
        quality = parse_quality(head[3])

    if len(tokens) > 4:
        raise IIIFError("IIIF: Query has too many parameters. " + IIIF_SYNTAX)
    if len(tokens) < 4:
        raise IIIFError("IIIF: Query has too few parameters. " + IIIF_SYNTAX)

    return ImageRequest(
        region=region,
        width=out_width,
        height=out_height,
        maintain_aspect=maintain_aspect,
        rotation=rotation,
        flip=flip,
        quality=quality,
    )


def info_json(
    identifier: str,
    width: int,
    height: int,
    widths: list[int],
    heights: list[int],
    tile_width: int,
    tile_height: int,
    max_size: int,
) -> str:
    """Return the info.json document for an image.

    ``widths`` and ``heights`` list the resolution sizes from full size
    down to the smallest. Sizes at or above ``max_size`` are not listed
    unless ``max_size`` is 0. ``identifier`` is inserted as given.
    """
    levels = len(widths)
    lines = [
        "{",
        f'  "@context" : "{IIIF_CONTEXT}",',
        f'  "@id" : "{identifier}",',
        f'  "protocol" : "{IIIF_PROTOCOL}",',
        f'  "width" : {width},',
        f'  "height" : {height},',
        '  "sizes" : [',
    ]
    sizes = [f'     {{ "width" : {widths[-1]}, "height" : {heights[-1]} }}']
    for w, h in zip(widths[levels - 2 : 0 : -1], heights[levels - 2 : 0 : -1]):
        if max_size == 0 or (w < max_size and h < max_size):
            sizes.append(f'     {{ "width" : {w}, "height" : {h} }}')
    scale_factors = ", ".join(str(1 << i) for i in range(levels))
    lines.append(",\n".join(sizes))
    lines += [
        "  ],",
        '  "tiles" : [',
        f'     {{ "width" : {tile_width}, "height" : {tile_height}, '
        f'"scaleFactors" : [ {scale_factors} ] }}',
        "  ],",
        '  "profile" : [',
        f'     "{IIIF_PROFILE}",',
        '     { "formats" : [ "jpg" ],',
        '       "qualities" : [ "native","color","gray","bitonal" ],',
        '       "supports" : ["regionByPct","regionSquare","sizeByForcedWh",'
        '"sizeByWh","sizeAboveFull","rotationBy90s","mirroring"],',
        f'       "maxWidth" : {max_size},',
        f'       "maxHeight" : {max_size}',
        "     }",
        "  ]",
        "}",
    ]
    return "\n".join(lines)


def redirect_header(location: str) -> str:
    """Return a 303 redirect to the info document under ``location``."""
    return (
        "Status: 303 See Other\r\n"
        f"Location: {location}/info.json\r\n"
        f"Server: iipsrv/{VERSION}\r\n"
        "\r\n"
    )