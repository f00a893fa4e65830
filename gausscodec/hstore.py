"""Text encoding and decoding of hstore values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

_WHITESPACE = frozenset(b" \t\n\r")


def quote(s: Optional[str]) -> str:
    """Escape and quote an hstore key or value; None becomes NULL."""
    if s is None:
        return "NULL"
    if not isinstance(s, str):
        raise TypeError("not a string or None")
    s = s.replace("\\", "\\\\")
    return '"' + s.replace('"', '\\"') + '"'


def _pair_value(raw: bytearray, did_quote: bool) -> Optional[str]:
    text = raw.decode("utf-8")
    if not did_quote and len(raw) == 4 and text.lower() == "null":
        return None
    return text


@dataclass
class Hstore:
    """An hstore value: a mapping of keys to strings or None, or None for NULL."""

    map: Optional[dict[str, Optional[str]]] = None

    def scan(self, value) -> None:
        """Replace the mapping with one parsed from the server's text form."""
        if value is None:
            self.map = None
            return
        if isinstance(value, str):
            value = value.encode("utf-8")
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError("hstore value must be bytes or str")
        data = bytes(value)

        result: dict[str, Optional[str]] = {}
        pair = [bytearray(), bytearray()]
        pi = 0
        in_quote = False
        did_quote = False
        saw_slash = False

        for b in data:
            if saw_slash:
                pair[pi].append(b)
                saw_slash = False
                continue
            if b == ord("\\"):
                saw_slash = True
                continue
            if b == ord('"'):
                in_quote = not in_quote
                did_quote = True
                continue
            if not in_quote:
                if b in _WHITESPACE or b == ord("="):
                    continue
                if b == ord(">"):
                    pi = 1
                    did_quote = False
                    continue
                if b == ord(","):
                    result[pair[0].decode("utf-8")] = _pair_value(pair[1], did_quote)
                    pair = [bytearray(), bytearray()]
                    pi = 0
                    continue
            pair[pi].append(b)

        # The last pair is only kept when the input is longer than one byte.
        if len(data) > 1:
            result[pair[0].decode("utf-8")] = _pair_value(pair[1], did_quote)
        self.map = result

    def value(self) -> Optional[bytes]:
        """Return the text form to send to the server, or None for NULL."""
        if self.map is None:
            return None
        parts = (f"{quote(key)}=>{quote(val)}" for key, val in self.map.items())
        return ",".join(parts).encode("utf-8")