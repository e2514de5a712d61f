import re

from iipserve.response import VERSION, IIPResponse


def test_fresh_response_is_empty():
    response = IIPResponse()
    assert response.is_set() is False
    assert response.error_is_set() is False
    assert response.image_sent is False
    assert response.cors == ""
    assert response.cache_control == ""


def test_protocol_marks_set():
    response = IIPResponse()
    response.set_protocol("IIP:1.0")
    assert response.is_set() is True
    assert "\r\n\r\nIIP:1.0\r\n" in response.format_response()


def test_format_response_headers_and_body():
    response = IIPResponse()
    response.set_cache_control("max-age=604800")
    response.set_last_modified("Thu, 01 Jan 1970 00:00:00 GMT")
    response.add_line("Hello")
    text = response.format_response()
    lines = text.split("\r\n")
    assert lines[0] == "Server: iipsrv/" + VERSION
    assert lines[1] == "X-Powered-By: IIPImage"
    assert lines[2] == "Cache-Control: max-age=604800"
    assert lines[3] == "Last-Modified: Thu, 01 Jan 1970 00:00:00 GMT"
    assert lines[4] == "Content-Type: application/vnd.netfpx"
    assert text.endswith("\r\nHello\r\n")


def test_add_value_and_pair():
    response = IIPResponse()
    response.add_value("Max-size", 100)
    response.add_pair("Tile-size", 256, 128)
    lines = response.format_response().split("\r\n")
    assert "Max-size:100" in lines
    assert "Tile-size:256 128" in lines


def test_add_string_length_prefix():
    response = IIPResponse()
    response.add_string("Comment", "hello")
    assert "Comment/5:hello\r\n" in response.format_response()


def test_add_string_length_counts_bytes():
    response = IIPResponse()
    value = "ü"
    response.add_string("X", value)
    match = re.search(r"X/(\d+):", response.format_response())
    assert int(match.group(1)) == len(value.encode("utf-8"))


def test_error_layout():
    response = IIPResponse()
    response.add_line("body-text")
    response.set_error("1 3", "FIF")
    assert response.error_is_set() is True
    assert response.is_set() is True
    text = response.format_response()
    assert "Status: 400 Bad Request" in text
    assert "Cache-Control: no-cache" in text
    assert "body-text" not in text
    assert text.endswith("\r\n\r\nError/7:1 3 FIF\r\n")


def test_errors_accumulate():
    response = IIPResponse()
    response.set_error("2 1", "CVT")
    response.set_error("1 3", "FIF")
    text = response.format_response()
    assert text.index("CVT") < text.index("FIF")
    assert text.count("Error/") == 2


def test_cors_empty_is_ignored():
    response = IIPResponse()
    response.set_cors("")
    assert response.cors == ""


def test_cors_included_in_response():
    response = IIPResponse()
    response.set_cors("*")
    assert response.cors.startswith("Access-Control-Allow-Origin: *\r\n")
    assert "Access-Control-Allow-Headers: X-Requested-With" in response.format_response()


def test_cors_included_in_error_response():
    response = IIPResponse()
    response.set_cors("*")
    response.set_error("1 3", "FIF")
    assert "Access-Control-Allow-Origin: *" in response.format_response()


def test_image_sent_flag():
    response = IIPResponse()
    response.set_image_sent()
    assert response.image_sent is True


def test_advert():
    advert = IIPResponse().advert()
    assert advert.startswith("Server: iipsrv/" + VERSION + "\r\nContent-Type: text/html\r\n")
    assert "Status: 400 Bad Request" in advert
    assert "Version " + VERSION in advert
    assert advert.endswith("</html>")