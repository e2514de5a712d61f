"""Building of non-image IIP protocol responses, including errors."""

from __future__ import annotations

VERSION = "0.9.9.9"
EOF = "\r\n"


class IIPResponse:
    """Accumulates headers and body lines for a textual IIP response."""

    def __init__(self) -> None:
        self._server = "Server: iipsrv/" + VERSION
        self._powered = "X-Powered-By: IIPImage"
        self._modified = ""
        self._cache_control = ""
        self._mime_type = "Content-Type: application/vnd.netfpx"
        self._protocol = ""
        self._body = ""
        self._error = ""
        self._cors = ""
        self._sent = False

    def set_protocol(self, protocol: str) -> None:
        """Set the IIP protocol version line."""
        self._protocol = protocol

    def set_last_modified(self, timestamp: str) -> None:
        """Set the Last-Modified header from an RFC 1123 timestamp."""
        self._modified = "Last-Modified: " + timestamp

    def add_line(self, text: str) -> None:
        """Append a raw response line."""
        self._body += text + EOF

    def add_value(self, name: str, value: int) -> None:
        """Append a ``name:value`` line."""
        self._body += f"{name}:{int(value)}{EOF}"

    def add_string(self, name: str, value: str) -> None:
        """Append a ``name/length:value`` line, length counted in bytes."""
        length = len(value.encode("utf-8"))
        self._body += f"{name}/{length}:{value}{EOF}"

    def add_pair(self, name: str, first: int, second: int) -> None:
        """Append a ``name:first second`` line."""
        self._body += f"{name}:{int(first)} {int(second)}{EOF}"

    def set_error(self, code: str, arg: str) -> None:
        """Record an error with its code and the offending argument."""
        length = len(code.encode("utf-8")) + len(arg.encode("utf-8")) + 1
        self._error += f"Error/{length}:{code} {arg}{EOF}"

    def set_cors(self, origin: str) -> None:
        """Set the Access-Control headers; an empty origin is ignored."""
        if origin:
            self._cors = (
                "Access-Control-Allow-Origin: " + origin + EOF
                + "Access-Control-Allow-Headers: X-Requested-With"
            )

    @property
    def cors(self) -> str:
        """The CORS header block, or an empty string."""
        return self._cors

    def set_cache_control(self, value: str) -> None:
        """Set the Cache-Control header value."""
        self._cache_control = "Cache-Control: " + value

    @property
    def cache_control(self) -> str:
        """The full Cache-Control header line."""
        return self._cache_control

    def format_response(self) -> str:
        """Return the full response text, headers followed by the body."""
        if self._error:
            parts = [self._server, "Cache-Control: no-cache", self._mime_type]
            if self._cors:
                parts.append(self._cors)
            parts += [
                "Status: 400 Bad Request",
                'Content-Disposition: inline;filename="IIPisAMadGameClosedToOurUnderstanding.netfpx"',
                "",
            ]
            return EOF.join(parts) + EOF + self._error
        parts = [
            self._server,
            self._powered,
            self._cache_control,
            self._modified,
            self._mime_type,
        ]
        if self._cors:
            parts.append(self._cors)
        parts += ["", self._protocol]
        return EOF.join(parts) + EOF + self._body

    def is_set(self) -> bool:
        """Whether any error, body or protocol has been set."""
        return bool(self._error or self._body or self._protocol)

    def error_is_set(self) -> bool:
        """Whether an error has been recorded."""
        return bool(self._error)

    def set_image_sent(self) -> None:
        """Mark that a response has been sent to the client."""
        self._sent = True

    @property
    def image_sent(self) -> bool:
        """Whether a response has already been sent."""
        return self._sent

    def advert(self) -> str:
        """Return the HTML banner page served for bare requests."""
        head = (
            self._server + EOF
            + "Content-Type: text/html" + EOF
            + "Status: 400 Bad Request" + EOF
            + 'Content-Disposition: inline;filename="iipsrv.html"' + EOF + EOF
        )
        page = (
            '<!DOCTYPE html><html lang="en"><head><meta charset="utf-8"/>'
            "<title>IIPImage Server</title>"
            '<meta name="DC.title" content="IIPImage Server"/></head>'
            '<body style="font-family:Helvetica,sans-serif; margin:4em">'
            "<center><h1>IIPImage Server</h1><h2>Version "
            + VERSION
            + "</h2></center></body></html>"
        )
        return head + page