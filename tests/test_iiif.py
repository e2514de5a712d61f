import json

import pytest

from iipserve.iiif import (
    IIIF_CONTEXT,
    IIIF_PROFILE,
    IIIFError,
    ImageRequest,
    Quality,
    Region,
    info_json,
    parse_image_request,
    parse_quality,
    parse_region,
    parse_rotation,
    parse_size,
    redirect_header,
    split_request,
)


def test_split_image_request():
    assert split_request("img.tif/full/full/0/default.jpg") == (
        "img.tif",
        "default.jpg",
        "full/full/0/default.jpg",
    )


def test_split_nested_identifier():
    ident, suffix, params = split_request("a/b/img.tif/full/max/90/gray.jpg")
    assert ident == "a/b/img.tif"
    assert params == "full/max/90/gray.jpg"
    assert suffix == "gray.jpg"


def test_split_info_request():
    assert split_request("path/img.tif/info.json") == ("path/img.tif", "info.json", "")


def test_split_without_slash_means_redirect():
    assert split_request("img.tif") == ("img.tif", "", "")


def test_split_not_enough_parameters():
    with pytest.raises(IIIFError, match="Not enough parameters"):
        split_request("a/b/c")


def test_region_full():
    assert parse_region("FULL", 100, 200) == Region(0.0, 0.0, 1.0, 1.0)


def test_region_square_tall():
    region = parse_region("square", 100, 200)
    assert region.left == 0.0
    assert region.width == 1.0
    assert region.height == pytest.approx(0.5)
    assert region.top == pytest.approx(0.25)


def test_region_square_wide():
    region = parse_region("square", 200, 100)
    assert region.top == 0.0
    assert region.height == 1.0
    assert region.width == pytest.approx(0.5)
    assert region.left == pytest.approx(0.25)


def test_region_square_on_square_image():
    assert parse_region("square", 64, 64) == Region()


def test_region_pixels():
    region = parse_region("10,20,50,100", 100, 200)
    assert region.left == pytest.approx(10 / 100)
    assert region.top == pytest.approx(20 / 200)
    assert region.width == pytest.approx(50 / 100)
    assert region.height == pytest.approx(100 / 200)


def test_region_percent():
    region = parse_region("pct:10,20,30,40", 123, 456)
    assert region.left == pytest.approx(10 / 100)
    assert region.top == pytest.approx(20 / 100)
    assert region.width == pytest.approx(30 / 100)
    assert region.height == pytest.approx(40 / 100)


@pytest.mark.parametrize("text", ["10,20,0,5", "1,2,3", "1,2,3,4,5", "1,2,3,-4"])
def test_region_invalid(text):
    with pytest.raises(IIIFError, match="incorrect region format"):
        parse_region(text, 100, 100)


def test_size_full_and_max():
    assert parse_size("full", 200, 100, 0) == (200, 100, True)
    assert parse_size("MAX", 200, 100, 0) == (200, 100, True)


def test_size_percent():
    assert parse_size("pct:50", 200, 100, 0) == (200 // 2, 100 // 2, True)


def test_size_width_only_keeps_aspect():
    assert parse_size("50,", 200, 100, 0) == (50, 50 // 2, True)


def test_size_height_only_keeps_aspect():
    assert parse_size(",50", 200, 100, 0) == (50 * 2, 50, True)


def test_size_forced():
    assert parse_size("80,20", 200, 100, 0) == (80, 20, False)


def test_size_best_fit():
    assert parse_size("!80,20", 200, 100, 0) == (80, 20, True)


@pytest.mark.parametrize(
    "text,message",
    [
        ("abc", "no comma"),
        ("0,10", "invalid size"),
        (",x", "invalid height"),
        ("x,10", "invalid width"),
        ("10,y", "invalid height"),
        ("pct:abc", "invalid size"),
    ],
)
def test_size_invalid(text, message):
    with pytest.raises(IIIFError, match=message):
        parse_size(text, 200, 100, 0)


def test_size_limited_by_max_size_forced():
    assert parse_size("400,100", 200, 100, 300) == (300, 300, False)


def test_size_within_max_size_is_unchanged():
    assert parse_size("80,20", 200, 100, 300) == (80, 20, False)


def test_rotation_plain():
    assert parse_rotation("90") == (90.0, 0)


def test_rotation_mirrored():
    assert parse_rotation("!0") == (0.0, 1)
    assert parse_rotation("!270") == (270.0, 1)


def test_rotation_mirrored_180_is_vertical_flip():
    assert parse_rotation("!180") == (0.0, 2)


@pytest.mark.parametrize("text", ["45", "x", "!", ""])
def test_rotation_invalid(text):
    with pytest.raises(IIIFError):
        parse_rotation(text)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("default.jpg", Quality.COLOR),
        ("native", Quality.COLOR),
        ("Color.JPG", Quality.COLOR),
        ("gray.jpg", Quality.GREY),
        ("grey", Quality.GREY),
        ("bitonal.jpg", Quality.BITONAL),
    ],
)
def test_quality(text, expected):
    assert parse_quality(text) is expected


def test_quality_wrong_format():
    with pytest.raises(IIIFError, match="Only JPEG"):
        parse_quality("color.png")


def test_quality_unknown():
    with pytest.raises(IIIFError, match="unsupported quality"):
        parse_quality("sepia.jpg")


def test_image_request_full():
    request = parse_image_request("full/max/0/default.jpg", 200, 100, 0)
    assert request == ImageRequest(
        region=Region(),
        width=200,
        height=100,
        maintain_aspect=True,
        rotation=0.0,
        flip=0,
        quality=Quality.COLOR,
    )


def test_image_request_region_and_size():
    request = parse_image_request("0,0,100,50/50,/!90/gray.jpg", 200, 100, 0)
    assert request.width == 50
    assert request.height == 25
    assert request.rotation == 90.0
    assert request.flip == 1
    assert request.quality is Quality.GREY


def test_image_request_too_few():
    with pytest.raises(IIIFError, match="too few"):
        parse_image_request("full/max/0", 200, 100, 0)


def test_image_request_too_many():
    with pytest.raises(IIIFError, match="too many"):
        parse_image_request("full/max/0/default.jpg/extra", 200, 100, 0)


def test_info_json_is_valid_json():
    text = info_json(
        "http://localhost/iiif/img.tif",
        1000,
        800,
        [1000, 500, 250],
        [800, 400, 200],
        256,
        256,
        0,
    )
    data = json.loads(text)
    assert data["@context"] == IIIF_CONTEXT
    assert data["@id"] == "http://localhost/iiif/img.tif"
    assert data["width"] == 1000
    assert data["height"] == 800
    assert data["sizes"] == [
        {"width": 250, "height": 200},
        {"width": 500, "height": 400},
    ]
    assert data["tiles"][0]["scaleFactors"] == [1, 2, 4]
    assert data["tiles"][0]["width"] == 256
    assert data["profile"][0] == IIIF_PROFILE
    assert data["profile"][1]["maxWidth"] == 0


def test_info_json_respects_max_size():
    data = json.loads(
        info_json("id", 1000, 800, [1000, 500, 250], [800, 400, 200], 256, 256, 300)
    )
    assert data["sizes"] == [{"width": 250, "height": 200}]
    assert data["profile"][1]["maxHeight"] == 300


def test_info_json_single_resolution():
    data = json.loads(info_json("id", 64, 32, [64], [32], 64, 64, 0))
    assert data["sizes"] == [{"width": 64, "height": 32}]
    assert data["tiles"][0]["scaleFactors"] == [1]


def test_redirect_header():
    header = redirect_header("http://localhost/iiif/img.tif")
    assert header.startswith("Status: 303 See Other\r\n")
    assert "Location: http://localhost/iiif/img.tif/info.json\r\n" in header
    assert header.endswith("\r\n\r\n")