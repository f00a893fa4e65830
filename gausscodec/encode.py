"""Encoding and decoding of values in the server's text and binary formats."""

from __future__ import annotations

import binascii
import codecs
import math
import re
import struct
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal
from enum import IntEnum
from typing import Any, Optional, Union

_SERVER_ENCODINGS = {"UTF8": "UTF-8"}

_TIME_2400 = re.compile(r"^(24:00(?::00(?:\.0+)?)?)(?:[Z+-].*)?$")
_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_TIME_RE = re.compile(r"^(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?")
_ZONE_RE = re.compile(r"^([+-])(\d{2})(?::(\d{2}))?(?::(\d{2}))?$")
_OCTAL_RE = re.compile(rb"^[0-7]{3}$")

_NS_PER_SEC = 1_000_000_000

INFINITY_TS_ENABLED_ALREADY = "pq: infinity timestamp enabled already"
INFINITY_TS_NEGATIVE_MUST_BE_SMALLER = (
    "pq: infinity timestamp: negative value must be smaller (before) than positive"
)


class TypeOid(IntEnum):
    """Type identifiers of the server's built-in types."""

    BOOL = 16
    BYTEA = 17
    CHAR = 18
    INT8 = 20
    INT2 = 21
    INT4 = 23
    TEXT = 25
    BLOB = 88
    FLOAT4 = 700
    FLOAT8 = 701
    UNKNOWN = 705
    VARCHAR = 1043
    DATE = 1082
    TIME = 1083
    TIMESTAMP = 1114
    TIMESTAMPTZ = 1184
    TIMETZ = 1266
    UUID = 2950


class Format(IntEnum):
    """Wire format of a value."""

    TEXT = 0
    BINARY = 1


@dataclass
class ServerStatus:
    """Session parameters that affect encoding and decoding."""

    server_version: int = 0
    encoding: Optional[str] = None
    current_location: Optional[tzinfo] = None


def _days_from_civil(y: int, m: int, d: int) -> int:
    y -= m <= 2
    era = y // 400
    yoe = y - era * 400
    doy = (153 * (m + (-3 if m > 2 else 9)) + 2) // 5 + d - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def _civil_from_days(z: int) -> tuple[int, int, int]:
    z += 719468
    era = z // 146097
    doe = z - era * 146097
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    y = yoe + era * 400
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    d = doy - (153 * mp + 2) // 5 + 1
    m = mp + 3 if mp < 10 else mp - 9
    return y + (m <= 2), m, d


@dataclass(frozen=True)
class Timestamp:
    """A point in time with a fixed UTC offset, valid for any year."""

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    nanosecond: int = 0
    offset: int = 0
    tz: Optional[tzinfo] = field(default=None, compare=False, repr=False)

    @classmethod
    def _make(cls, year, month, day, hour=0, minute=0, second=0, nanosecond=0, offset=0):
        year += (month - 1) // 12
        month = (month - 1) % 12 + 1
        days = _days_from_civil(year, month, 1) + day - 1
        local = (days * 86400 + hour * 3600 + minute * 60 + second) * _NS_PER_SEC + nanosecond
        return cls._from_local(local, offset)

    @classmethod
    def _from_local(cls, local_ns: int, offset: int) -> "Timestamp":
        secs, nsec = divmod(local_ns, _NS_PER_SEC)
        days, sod = divmod(secs, 86400)
        y, m, d = _civil_from_days(days)
        return cls(y, m, d, sod // 3600, sod % 3600 // 60, sod % 60, nsec, offset)

    def _instant(self) -> int:
        days = _days_from_civil(self.year, self.month, self.day)
        secs = days * 86400 + self.hour * 3600 + self.minute * 60 + self.second - self.offset
        return secs * _NS_PER_SEC + self.nanosecond

    def _add_years(self, years: int) -> "Timestamp":
        return self._make(self.year + years, self.month, self.day, self.hour,
                          self.minute, self.second, self.nanosecond, self.offset)

    def utc(self) -> "Timestamp":
        """Return the same instant with a zero offset."""
        return self._from_local(self._instant(), 0)

    def to_datetime(self) -> datetime:
        """Return an aware datetime; raises ValueError outside years 1 to 9999."""
        if not 1 <= self.year <= 9999:
            raise ValueError(f"year {self.year} is out of range")
        zone = self.tz or timezone(timedelta(seconds=self.offset))
        return datetime(self.year, self.month, self.day, self.hour, self.minute,
                        self.second, self.nanosecond // 1000, tzinfo=zone)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "Timestamp":
        """Build from a datetime; a naive one is taken as UTC."""
        off = dt.utcoffset()
        offset = int(off.total_seconds()) if off is not None else 0
        return cls(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second,
                   dt.microsecond * 1000, offset, dt.tzinfo)


TimeLike = Union[Timestamp, datetime]


def _as_timestamp(value: TimeLike) -> Timestamp:
    return value if isinstance(value, Timestamp) else Timestamp.from_datetime(value)


# (negative, positive) bounds while the infinity mapping is active.
_infinity_bounds: Optional[tuple[Timestamp, Timestamp]] = None


def enable_infinity_ts(negative: TimeLike, positive: TimeLike) -> None:
    """Map the server's -infinity/infinity timestamps to the given bounds."""
    global _infinity_bounds
    if _infinity_bounds is not None:
        raise RuntimeError(INFINITY_TS_ENABLED_ALREADY)
    neg, pos = _as_timestamp(negative), _as_timestamp(positive)
    if not neg._instant() < pos._instant():
        raise ValueError(INFINITY_TS_NEGATIVE_MUST_BE_SMALLER)
    _infinity_bounds = (neg, pos)


def disable_infinity_ts() -> bool:
    """Turn off the infinity timestamp mapping; return whether it was on."""
    global _infinity_bounds
    was_enabled = _infinity_bounds is not None
    _infinity_bounds = None
    return was_enabled


def get_encoding(name: str) -> str:
    """Return the codec name for a server encoding name."""
    name = name.upper()
    return codecs.lookup(_SERVER_ENCODINGS.get(name, name)).name


def _format_float(v: float) -> str:
    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "+Inf" if v > 0 else "-Inf"
    s = format(Decimal(repr(v)), "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def encode(status: ServerStatus, value: Any, type_oid: int) -> bytes:
    """Encode a parameter value in text format for the given type."""
    if isinstance(value, bool):
        return b"true" if value else b"false"
    if isinstance(value, int):
        return str(value).encode()
    if isinstance(value, float):
        return _format_float(value).encode()
    if isinstance(value, (bytes, bytearray, str)):
        raw = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        if type_oid == TypeOid.BYTEA:
            return encode_bytea(status.server_version, raw)
        if type_oid == TypeOid.BLOB:
            return raw.hex().encode()
        return raw
    if isinstance(value, (Timestamp, datetime)):
        return format_ts(value)
    raise TypeError(f"encode: unknown type for {type(value).__name__}")


def binary_encode(status: ServerStatus, value: Any) -> bytes:
    """Encode a parameter for binary transfer: bytes pass through unchanged."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return encode(status, value, TypeOid.UNKNOWN)


def _decode_hex(data: bytes) -> bytes:
    return binascii.unhexlify(data)


def decode(status: ServerStatus, data: bytes, type_oid: int, fmt: Format) -> Any:
    """Decode a value received from the server."""
    if status.encoding is not None:
        data = data.decode(status.encoding, errors="replace").encode("utf-8")
    if fmt == Format.BINARY:
        return _binary_decode(data, type_oid)
    if fmt == Format.TEXT:
        return _text_decode(status, data, type_oid)
    raise ValueError(f"unknown format {fmt}")


def _binary_decode(data: bytes, type_oid: int) -> Any:
    if type_oid == TypeOid.BYTEA:
        return data
    if type_oid == TypeOid.INT8:
        return struct.unpack(">q", data)[0]
    if type_oid == TypeOid.INT4:
        return struct.unpack(">i", data)[0]
    if type_oid == TypeOid.INT2:
        return struct.unpack(">h", data)[0]
    if type_oid == TypeOid.UUID:
        if len(data) != 16:
            raise ValueError(f"pq: unable to decode uuid; bad length: {len(data)}")
        return str(uuid.UUID(bytes=data)).encode()
    if type_oid == TypeOid.BLOB:
        return _decode_hex(data)
    raise ValueError(f"don't know how to decode binary parameter of type {int(type_oid)}")


def _text_decode(status: ServerStatus, data: bytes, type_oid: int) -> Any:
    if type_oid in (TypeOid.CHAR, TypeOid.VARCHAR, TypeOid.TEXT):
        return data.decode("utf-8")
    if type_oid == TypeOid.BYTEA:
        return parse_bytea(data)
    if type_oid == TypeOid.TIMESTAMPTZ:
        return _parse_ts(status.current_location, data.decode())
    if type_oid in (TypeOid.TIMESTAMP, TypeOid.DATE):
        return _parse_ts(None, data.decode())
    if type_oid in (TypeOid.TIME, TypeOid.TIMETZ):
        return parse_time(data, type_oid)
    if type_oid == TypeOid.BOOL:
        return data[:1] in (b"t", b"1")
    if type_oid in (TypeOid.INT8, TypeOid.INT4, TypeOid.INT2):
        text = data.decode()
        if not _INT_RE.match(text):
            raise ValueError(f"invalid syntax: {text!r}")
        return int(text)
    if type_oid in (TypeOid.FLOAT4, TypeOid.FLOAT8):
        return float(data.decode())
    if type_oid == TypeOid.BLOB:
        return _decode_hex(data)
    return data


def escape_text(text: Union[str, bytes]) -> bytes:
    """Escape backslash, newline, carriage return and tab as COPY text needs."""
    raw = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    return (raw.replace(b"\\", b"\\\\").replace(b"\n", b"\\n")
            .replace(b"\r", b"\\r").replace(b"\t", b"\\t"))


def encode_copy_text(status: ServerStatus, value: Any) -> bytes:
    """Encode a value in the text format used by COPY."""
    if value is None:
        return b"\\N"
    if isinstance(value, bool):
        return b"true" if value else b"false"
    if isinstance(value, int):
        return str(value).encode()
    if isinstance(value, float):
        return _format_float(value).encode()
    if isinstance(value, (bytes, bytearray)):
        return escape_text(encode_bytea(status.server_version, bytes(value)))
    if isinstance(value, str):
        return escape_text(value)
    if isinstance(value, (Timestamp, datetime)):
        return format_ts(value)
    raise TypeError(f"encode: unknown type for {type(value).__name__}")


def parse_time(data: Union[bytes, str], type_oid: int) -> Timestamp:
    """Parse a time or timetz value; 24:00 rolls over to the next day."""
    text = data.decode() if isinstance(data, bytes) else data
    is_2400 = False
    match = _TIME_2400.match(text)
    if match:
        text = "00:00:00" + text[len(match.group(1)):]
        is_2400 = True
    m = _TIME_RE.match(text)
    if not m:
        raise ValueError(f"decode: cannot parse {text!r} as time")
    hour, minute, second = (int(g) for g in m.group(1, 2, 3))
    if hour > 23 or minute > 59 or second > 59:
        raise ValueError(f"decode: time {text!r} out of range")
    frac = m.group(4) or ""
    nanos = int(frac[:9].ljust(9, "0")) if frac else 0
    rest = text[m.end():]
    offset = 0
    if type_oid == TypeOid.TIMETZ:
        z = _ZONE_RE.match(rest)
        if not z:
            raise ValueError(f"decode: cannot parse zone in {text!r}")
        sign = -1 if z.group(1) == "-" else 1
        offset = sign * (int(z.group(2)) * 3600 + int(z.group(3) or 0) * 60 + int(z.group(4) or 0))
    elif rest:
        raise ValueError(f"decode: extra text {rest!r}")
    ts = Timestamp(0, 1, 1, hour, minute, second, nanos, offset)
    if is_2400:
        ts = Timestamp._make(0, 1, 2, hour, minute, second, nanos, offset)
    return ts


def _parse_ts(location: Optional[tzinfo], text: str) -> Any:
    bounds = _infinity_bounds
    if text == "-infinity":
        return bounds[0] if bounds is not None else text.encode()
    if text == "infinity":
        return bounds[1] if bounds is not None else text.encode()
    return parse_timestamp(location, text)


def _atoi(text: str, begin: int, end: int) -> int:
    if begin < 0 or end < 0 or begin > end or end > len(text):
        raise ValueError("invalid timestamp")
    part = text[begin:end]
    if not _INT_RE.match(part):
        raise ValueError(f"expected number; got '{text}'")
    return int(part)


def _expect(text: str, char: str, pos: int) -> None:
    if pos + 1 > len(text):
        raise ValueError("invalid timestamp")
    if text[pos] != char:
        raise ValueError(f"expected '{char}' at position {pos}; got '{text[pos]}'")


def parse_timestamp(location: Optional[tzinfo], text: str) -> Timestamp:
    """Parse the server's ISO text form of a date or timestamp."""
    mon_sep = text.find("-")
    year = _atoi(text, 0, mon_sep)
    day_sep = mon_sep + 3
    month = _atoi(text, mon_sep + 1, day_sep)
    _expect(text, "-", day_sep)
    time_sep = day_sep + 3
    day = _atoi(text, day_sep + 1, time_sep)

    min_len = mon_sep + len("01-01") + 1
    is_bc = text.endswith(" BC")
    if is_bc:
        min_len += 3

    hour = minute = second = 0
    if len(text) > min_len:
        _expect(text, " ", time_sep)
        min_sep = time_sep + 3
        _expect(text, ":", min_sep)
        hour = _atoi(text, time_sep + 1, min_sep)
        sec_sep = min_sep + 3
        _expect(text, ":", sec_sep)
        minute = _atoi(text, min_sep + 1, sec_sep)
        second = _atoi(text, sec_sep + 1, sec_sep + 3)

    idx = mon_sep + len("01-01 00:00:00") + 1
    nanos = 0
    tz_off = 0
    if idx < len(text) and text[idx] == ".":
        start = idx + 1
        found = re.search(r"[-+Z ]", text[start:])
        frac_len = found.start() if found else len(text) - start
        frac = _atoi(text, start, start + frac_len)
        nanos = frac * (_NS_PER_SEC // 10 ** frac_len)
        idx += frac_len + 1
    if idx < len(text) and text[idx] in "+-":
        sign = -1 if text[idx] == "-" else 1
        tz_hours = _atoi(text, idx + 1, idx + 3)
        idx += 3
        tz_min = tz_sec = 0
        if idx < len(text) and text[idx] == ":":
            tz_min = _atoi(text, idx + 1, idx + 3)
            idx += 3
        if idx < len(text) and text[idx] == ":":
            tz_sec = _atoi(text, idx + 1, idx + 3)
            idx += 3
        tz_off = sign * (tz_hours * 3600 + tz_min * 60 + tz_sec)
    elif idx < len(text) and text[idx] == "Z":
        idx += 1

    if is_bc:
        year = 1 - year
        idx += 3
    if idx < len(text):
        raise ValueError(f"expected end of input, got {text[idx:]}")

    ts = Timestamp._make(year, month, day, hour, minute, second, nanos, tz_off)
    if location is not None:
        try:
            local = ts.to_datetime().astimezone(location)
        except (ValueError, OverflowError):
            local = None
        if local is not None:
            off = local.utcoffset()
            if off is not None and int(off.total_seconds()) == tz_off:
                ts = replace(ts, tz=location)
    return ts


def format_ts(ts: TimeLike) -> bytes:
    """Format a time, mapping out-of-bounds values to infinity when enabled."""
    t = _as_timestamp(ts)
    bounds = _infinity_bounds
    if bounds is not None:
        negative, positive = bounds
        if t._instant() <= negative._instant():
            return b"-infinity"
        if t._instant() >= positive._instant():
            return b"infinity"
    return format_timestamp(t)


def format_timestamp(ts: TimeLike) -> bytes:
    """Format a time in the server's text form, with a BC suffix before year 1."""
    t = _as_timestamp(ts)
    bc = False
    if t.year <= 0:
        t = t._add_years(-2 * t.year + 1)
        bc = True
    out = f"{t.year:04d}-{t.month:02d}-{t.day:02d} {t.hour:02d}:{t.minute:02d}:{t.second:02d}"
    if t.nanosecond:
        out += "." + f"{t.nanosecond:09d}".rstrip("0")
    if t.offset == 0:
        out += "Z"
    else:
        sign = "-" if t.offset < 0 else "+"
        mag = abs(t.offset)
        out += f"{sign}{mag // 3600:02d}:{mag % 3600 // 60:02d}"
        if mag % 60:
            out += f":{mag % 60:02d}"
    if bc:
        out += " BC"
    return out.encode()


def parse_bytea(data: bytes) -> bytes:
    """Parse a bytea value in hex or legacy escape output format."""
    if data[:2] == b"\\x":
        return binascii.unhexlify(data[2:])
    result = bytearray()
    s = bytes(data)
    while s:
        if s[0] == 0x5C:
            if len(s) >= 2 and s[1] == 0x5C:
                result.append(0x5C)
                s = s[2:]
                continue
            if len(s) < 4:
                raise ValueError(f"invalid bytea sequence {list(s)}")
            digits = s[1:4]
            if not _OCTAL_RE.match(digits) or int(digits, 8) > 255:
                raise ValueError(f"could not parse bytea value: {digits!r}")
            result.append(int(digits, 8))
            s = s[4:]
        else:
            i = s.find(b"\\")
            if i == -1:
                result += s
                break
            result += s[:i]
            s = s[i:]
    return bytes(result)


def encode_bytea(server_version: int, data: bytes) -> bytes:
    """Encode bytes as bytea text: hex from server version 9.0, else escape."""
    if server_version >= 90000:
        return b"\\x" + data.hex().encode()
    out = bytearray()
    for b in data:
        if b == 0x5C:
            out += b"\\\\"
        elif b < 0x20 or b > 0x7E:
            out += f"\\{b:03o}".encode()
        else:
            out.append(b)
    return bytes(out)


@dataclass
class NullTime:
    """A time that may be NULL."""

    time: Optional[TimeLike] = None
    valid: bool = False

    def scan(self, value: Any) -> None:
        """Take a scanned value; anything but a time makes this NULL."""
        if isinstance(value, (Timestamp, datetime)):
            self.time, self.valid = value, True
        else:
            self.time, self.valid = None, False

    def value(self) -> Optional[TimeLike]:
        """Return the time, or None when NULL."""
        return self.time if self.valid else None