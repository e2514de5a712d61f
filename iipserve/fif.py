"""Opening of image sources for a request, with an in-memory image cache."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from email.utils import mktime_tz, parsedate_tz

from .image import IIPImage
from .url import URL

MAX_IMAGE_CACHE = 1000


class NotModified(Exception):
    """Raised when the image has not changed since the client's copy."""

    status = 304


class UnsupportedImage(ValueError):
    """Raised when no handler exists for the detected image format."""


class ImageCache:
    """A bounded cache of image descriptions keyed by request path.

    When full, the entry with the smallest key is dropped to make room,
    mirroring an ordered map whose first element is evicted.
    """

    def __init__(self, max_items: int = MAX_IMAGE_CACHE) -> None:
        self.max_items = max_items
        self._items: dict[str, IIPImage] = {}

    def get(self, key: str) -> IIPImage | None:
        """Return a copy of the cached image for ``key``, or None."""
        image = self._items.get(key)
        return image.copy() if image is not None else None

    def put(self, key: str, image: IIPImage) -> None:
        """Store a copy of ``image``, evicting an entry if the cache is full."""
        if key not in self._items and self._items and len(self._items) >= self.max_items:
            del self._items[min(self._items)]
        self._items[key] = image.copy()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items


def sanitize_path(src: str) -> str:
    """Decode a URL-encoded path and strip every ``../`` from it."""
    argument = URL(src).decode()
    while "../" in argument:
        index = argument.find("../")
        argument = argument[:index] + argument[index + 3 :]
    return argument


def is_not_modified(image_timestamp: int, header: str) -> bool:
    """Whether an If-Modified-Since header covers the image timestamp.

    An unparseable header is treated as not covering the image.
    """
    parsed = parsedate_tz(header)
    if parsed is None:
        return False
    return image_timestamp <= mktime_tz(parsed)


def open_image(
    argument: str,
    cache: ImageCache,
    opener: Mapping[object, Callable[[IIPImage], IIPImage]],
    filesystem_prefix: str = "",
    filename_pattern: str = "",
    if_modified_since: str | None = None,
) -> IIPImage:
    """Locate, open and cache the image named by a request path.

    ``opener`` maps each supported image format to a factory that builds a
    format-specific image from the generic description. Raises
    ``FileError`` if the image cannot be found, ``UnsupportedImage`` if its
    format has no factory, and ``NotModified`` if the client's copy is
    current.
    """
    path = sanitize_path(argument)

    cached = cache.get(path)
    timestamp = 0
    if cached is not None:
        description = cached
        timestamp = cached.timestamp
    else:
        description = IIPImage(path)
        description.file_name_pattern = filename_pattern
        description.file_system_prefix = filesystem_prefix
        description.initialise()

    factory = opener.get(description.format)
    if factory is None:
        raise UnsupportedImage("Unsupported image type: " + path)
    image = factory(description)

    image.open_image()

    if 0 < timestamp < image.timestamp:
        reload = getattr(image, "load_image_info", None)
        if reload is not None:
            reload(image.current_x, image.current_y)

    cache.put(path, image)

    if if_modified_since is not None and is_not_modified(
        image.timestamp, if_modified_since
    ):
        raise NotModified(path)

    return image