"""Pyramidal image sources: format detection, sequences and metadata."""

from __future__ import annotations

import copy as _copy
import enum
import glob
import os
from email.utils import formatdate


class FileError(RuntimeError):
    """Raised when an image file cannot be found, opened or read."""


class ImageFormat(enum.Enum):
    """Image file formats that can be recognised."""

    TIF = "tif"
    JPEG2000 = "jpeg2000"
    UNSUPPORTED = "unsupported"


_J2K_SIGNATURE = bytes([0x00, 0x00, 0x00, 0x0C, 0x6A, 0x50, 0x20, 0x20, 0x0D, 0x0A])
_TIFF_SIGNATURES = (
    bytes([0x49, 0x20, 0x49]),  # TIFF
    bytes([0x49, 0x49, 0x2A, 0x00]),  # Little endian TIFF
    bytes([0x4D, 0x4D, 0x00, 0x2A]),  # Big endian TIFF
    bytes([0x4D, 0x4D, 0x00, 0x2B]),  # BigTIFF
    bytes([0x49, 0x49, 0x2B, 0x00]),  # BigTIFF
)

_SUFFIX_FORMATS = {
    "jp2": ImageFormat.JPEG2000,
    "jpx": ImageFormat.JPEG2000,
    "j2k": ImageFormat.JPEG2000,
    "tif": ImageFormat.TIF,
    "tiff": ImageFormat.TIF,
}

_HEADER_LENGTH = 10


def detect_format(header: bytes) -> ImageFormat:
    """Identify an image format from the first bytes of a file."""
    header = bytes(header)
    if header[:_HEADER_LENGTH] == _J2K_SIGNATURE:
        return ImageFormat.JPEG2000
    if any(header.startswith(sig) for sig in _TIFF_SIGNATURES):
        return ImageFormat.TIF
    return ImageFormat.UNSUPPORTED


def http_date(timestamp: float) -> str:
    """Format a Unix timestamp as an HTTP (RFC 1123) date in GMT."""
    return formatdate(int(timestamp), usegmt=True)


class IIPImage:
    """An image source, either a single file or a sequence of files.

    Sequences are named ``<prefix><path><pattern>XXX_YYY.<suffix>`` where
    XXX is the horizontal angle and YYY the vertical angle.
    """

    def __init__(self, path: str = "") -> None:
        self.path = path
        self.file_system_prefix = ""
        self.file_name_pattern = ""
        self.is_file = False
        self.suffix = ""
        self.virtual_levels = 0
        self.format = ImageFormat.UNSUPPORTED
        self.horizontal_angles: list[int] = []
        self.vertical_angles: list[int] = []
        self.lut: list[int] = []
        self.image_widths: list[int] = []
        self.image_heights: list[int] = []
        self.tile_width = 0
        self.tile_height = 0
        self.colourspace = None
        self.num_resolutions = 0
        self.bpc = 0
        self.channels = 0
        self.sample_type = None
        self.min: list[float] = []
        self.max: list[float] = []
        self.quality_layers = 0
        self.is_set = False
        self.current_x = 0
        self.current_y = 90
        self.histogram: list[int] = []
        self.metadata: dict[str, str] = {}
        self.timestamp = 0

    @property
    def _full_path(self) -> str:
        return self.file_system_prefix + self.path

    def initialise(self) -> None:
        """Detect the image type and the available sequence angles."""
        self._test_image_type()
        if not self.is_file:
            self._measure_horizontal_angles()
            self._measure_vertical_angles()
        else:
            self.horizontal_angles = [0]
            self.vertical_angles = [90]

    def _test_image_type(self) -> None:
        path = self._full_path
        if os.path.isfile(path):
            try:
                stat = os.stat(path)
                with open(path, "rb") as handle:
                    header = handle.read(_HEADER_LENGTH)
            except OSError as exc:
                raise FileError(f"Unable to open file '{path}'") from exc
            if len(header) < _HEADER_LENGTH:
                raise FileError(
                    f"Unable to read initial byte sequence from file '{path}'"
                )
            self.is_file = True
            self.timestamp = int(stat.st_mtime)
            self.format = detect_format(header)
            return

        pattern = glob.escape(path + self.file_name_pattern) + "000_090.*"
        matches = glob.glob(pattern)
        if not matches:
            raise FileError(path + " is neither a file nor part of an image sequence")
        if len(matches) != 1:
            raise FileError(
                "There are multiple file extensions matching "
                + path + self.file_name_pattern + "000_090.*"
            )
        match = matches[0]
        self.is_file = False
        self.suffix = match.rpartition(".")[2]
        self.format = _SUFFIX_FORMATS.get(self.suffix, ImageFormat.UNSUPPORTED)
        self.update_timestamp(match)

    def _measure_vertical_angles(self) -> None:
        base = self._full_path + self.file_name_pattern
        angles = []
        for name in glob.glob(glob.escape(base) + "000_*." + glob.escape(self.suffix)):
            end = len(name) - len(self.suffix) - 1
            try:
                angles.append(int(name[end - 3 : end]))
            except ValueError:
                continue
        self.vertical_angles = sorted(angles)

    def _measure_horizontal_angles(self) -> None:
        base = self._full_path + self.file_name_pattern
        angles = []
        for name in glob.glob(glob.escape(base) + "*_090." + glob.escape(self.suffix)):
            try:
                angles.append(int(name[len(base) : name.rfind("_")]))
            except ValueError:
                continue
        self.horizontal_angles = sorted(angles)

    def file_name(self, x: int, y: int) -> str:
        """Return the file path for a horizontal and vertical angle."""
        if self.is_file:
            return self._full_path
        return f"{self._full_path}{self.file_name_pattern}{x:03d}_{y:03d}.{self.suffix}"

    def update_timestamp(self, path: str) -> None:
        """Set the modification timestamp from the file at ``path``."""
        try:
            self.timestamp = int(os.stat(path).st_mtime)
        except OSError as exc:
            raise FileError("Unable to open file " + path) from exc

    def http_timestamp(self) -> str:
        """Return the modification time as an HTTP date."""
        return http_date(self.timestamp)

    def copy(self) -> "IIPImage":
        """Return an independent copy of this image description."""
        return _copy.deepcopy(self)

    def open_image(self) -> None:
        """Open the image at the current position.

        The modification timestamp is refreshed from the file when it is
        present. This base class has no pixel decoder, so it always ends by
        raising FileError; format-specific subclasses override it.
        """
        path = self.file_name(self.current_x, self.current_y)
        try:
            self.timestamp = int(os.stat(path).st_mtime)
        except OSError:
            pass
        raise FileError(
            f"IIPImage openImage called: no decoder for {self.format.value} image '{path}'"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IIPImage):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)