# gausscodec

Value codecs for the PostgreSQL / openGauss wire protocol, usable without a
database connection. It has no dependencies beyond the standard library.

## What it provides

- `gausscodec.encode` – converts Python values to and from the server's text
  and binary representations:
  - `encode`, `binary_encode` and `decode` for parameters and result columns,
    driven by a `TypeOid` and a `Format`, with per-session settings
    (`server_version`, `encoding`, `current_location`) held in a
    `ServerStatus`;
  - `parse_timestamp`, `format_timestamp` and `format_ts` for the server's
    timestamp text (including `BC` years and second-level zone offsets).
    Parsing returns a `Timestamp`, which can hold years that `datetime`
    cannot; `Timestamp.to_datetime`, `Timestamp.from_datetime` and
    `Timestamp.utc` convert between the two;
  - `parse_time` for `time` and `timetz` values, with `24:00` rolled over to
    the next day;
  - `enable_infinity_ts` / `disable_infinity_ts` to map `-infinity` and
    `infinity` to chosen bounds when decoding, and times at or beyond those
    bounds to `-infinity` / `infinity` in `format_ts`;
  - `parse_bytea` and `encode_bytea` for both the hex and escape bytea forms
    (hex is produced from server version 90000);
  - `encode_copy_text` and `escape_text` for `COPY ... FROM STDIN` text rows,
    with `None` written as `\N`;
  - `NullTime`, a nullable time holder with `scan` and `value`;
  - `get_encoding` to resolve a server encoding name to a Python codec name.
- `gausscodec.hstore` – `Hstore` parses (`scan`) and renders (`value`) hstore
  text; `quote` escapes a single key or value, with `None` becoming `NULL`.
- `gausscodec.logger` – `LogLevel`, `log_level_from_string`, the `Logger`
  protocol, a `PrintfLogger` writing timestamped lines to a stream (standard
  output by default), `DEFAULT_LOGGER` at debug level, and `log_query_args`
  to shorten long arguments (over 64 bytes) before logging them.
- `gausscodec.gss` – the abstract `GSS` authentication interface and
  `register_gss_provider` / `gss_provider` to plug in a provider factory.

## Examples

```python
from gausscodec.encode import (
    ServerStatus, TypeOid, Format, encode, decode, parse_timestamp, format_timestamp,
)

status = ServerStatus(server_version=90000)

encode(status, b"\x00\xff", TypeOid.BYTEA)           # b"\\x00ff"
decode(status, b"42", TypeOid.INT8, Format.TEXT)      # 42

ts = parse_timestamp(None, "2001-02-03 04:05:06.123-07")
format_timestamp(ts)                                  # b"2001-02-03 04:05:06.123-07:00"
```

```python
from gausscodec.hstore import Hstore

h = Hstore()
h.scan(b'"a"=>"1", "b"=>NULL')
h.map                                                 # {"a": "1", "b": None}
h.value()                                             # b'"a"=>"1","b"=>NULL'
```

```python
import sys
from gausscodec.logger import PrintfLogger, LogLevel, log_level_from_string

log = PrintfLogger(log_level_from_string("debug"), sys.stdout)
log.log(LogLevel.INFO, "query", {"sql": "select 1"})
```

## What it does not do

This package only converts values. It does not open connections, speak the
network protocol, run queries, handle transactions, COPY streams or
LISTEN/NOTIFY, and it ships no GSS or Kerberos implementation: `GSS` is only
an interface for a provider you register yourself.

## Tests

Install with the `test` extra and run `pytest`.