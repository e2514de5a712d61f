# iipserve

Building blocks for a tiled image server that speaks the IIP, IIIF and
DeepZoom protocols. The package covers URL decoding, image source
detection, the image description cache, request parsing and the text of
responses and headers. It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests, install `.[test]` as well and run `pytest`.

## Modules

- `iipserve.url`: `URL(url).decode()` turns `+` into a space and decodes
  `%XX` sequences. Malformed `%` sequences pass through unchanged. An
  embedded `%00` is dropped and `URL.warning` records it. `URL.escape()`
  decodes the URL and then escapes backslashes and double quotes so the
  text can go into JSON.
- `iipserve.timer`: `Timer` measures elapsed wall time in microseconds
  with `elapsed_us()`. It starts when it is created. `start()` restarts
  it, and so does entering it with `with`.
- `iipserve.response`: `IIPResponse` collects IIP protocol reply lines
  with `add_line`, `add_value`, `add_string` and `add_pair`, and errors
  with `set_error`. It also holds the CORS, Cache-Control and
  Last-Modified headers. `format_response()` renders the whole reply.
  When an error has been set, it renders a 400 error reply instead.
  `advert()` returns the HTML banner page.
- `iipserve.image`: `IIPImage` describes a pyramidal image source, either
  a single file or a numbered sequence named `...XXX_YYY.suffix`.
  `initialise()` detects the format and the available angles, and
  `file_name(x, y)` builds the path for a given angle pair.
  `detect_format()` recognises TIFF, BigTIFF and JPEG2000 from their
  magic bytes. `http_date()` formats a timestamp as an HTTP date.
  Failures raise `FileError`.
- `iipserve.fif`: `open_image()` does the following for a requested path:
  1. Sanitises the path with `sanitize_path()`, which URL-decodes it and
     strips every `../`.
  2. Looks the path up in an `ImageCache`, a bounded cache that keeps
     copies of image descriptions.
  3. Builds the format-specific image through a mapping of
     `ImageFormat` to factory that the caller supplies.
  4. Opens the image.
  5. Raises `NotModified` when an `If-Modified-Since` value covers the
     image timestamp (see `is_not_modified()`).

  Formats with no factory raise `UnsupportedImage`.
- `iipserve.deepzoom`:
  - `parse_request()` handles `image.dzi` and `image_files/r/x_y.jpg`.
  - `dzi_levels()` returns the DeepZoom level count.
  - `map_resolution()` maps a DeepZoom level onto a real resolution.
  - `tile_index()` gives the row-major tile number.
  - `dzi_descriptor()` builds the `.dzi` XML reply.
- `iipserve.iiif`:
  - `split_request()` separates the identifier, the suffix and the
    parameters.
  - `parse_image_request()` parses
    `{region}/{size}/{rotation}/{quality}{.format}` into an `ImageRequest`.
    It uses `parse_region`, `parse_size`, `parse_rotation` and
    `parse_quality`, and raises `IIIFError` on bad input.
  - `info_json()` builds the image information document.
  - `redirect_header()` builds a 303 redirect to `info.json`.
- `iipserve.cvt`: helpers for region exports:
  - `clamp_viewport()` returns a `Viewport` that stays inside the image.
  - `output_size()` applies the upscaling and aspect-ratio rules.
  - `stretch_range()` gives the contrast stretch range from a histogram.
  - `strip_heights()` lays out the 128-row compression strips.
  - `download_name()` and `response_headers()` build the
    Content-Disposition name and the response headers.

## Example

```python
from iipserve.url import URL
from iipserve.iiif import parse_image_request, split_request

path = URL("image.tif/full/512%2C/0/default.jpg").decode()
identifier, suffix, params = split_request(path)
request = parse_image_request(params, 4096, 2048, 0)
assert (request.width, request.height) == (512, 256)
```

## What it does not do

- It is not a running server. There is no command, no FastCGI or HTTP
  listener and no request dispatch.
- It decodes no pixels and encodes no JPEG. `IIPImage.open_image()` has
  no decoder, so it always raises `FileError`. Reading tiles, processing
  images and compressing output are left to format-specific subclasses
  and factories that the caller supplies.