"""Decoding and escaping of URL path arguments."""

from __future__ import annotations

import string

_HEX_DIGITS = frozenset(string.hexdigits)


class URL:
    """A URL path that can be decoded, filtered and escaped for JSON."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.warning = ""

    def decode(self) -> str:
        """Decode '+' and %XX sequences, dropping embedded NULL bytes.

        Malformed percent sequences are passed through untouched. If a
        %00 sequence is found it is removed and ``warning`` is set.
        """
        out = bytearray()
        text = self.url
        i = 0
        while i < len(text):
            ch = text[i]
            if ch == "+":
                out += b" "
            elif ch == "%":
                pair = text[i + 1 : i + 3]
                if len(pair) == 2 and all(c in _HEX_DIGITS for c in pair):
                    if pair == "00":
                        self.warning = (
                            "Warning! Detected embedded NULL byte in URL: " + self.url
                        )
                    else:
                        out.append(int(pair, 16))
                    i += 2
                else:
                    out += b"%"
            else:
                out += ch.encode("utf-8", "surrogateescape")
            i += 1
        return out.decode("utf-8", "surrogateescape")

    def escape(self) -> str:
        """Decode the URL and escape backslashes and double quotes."""
        return self.decode().replace("\\", "\\\\").replace('"', '\\"')