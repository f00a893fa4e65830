import io

import pytest

from gausscodec.logger import (
    LogLevel,
    Logger,
    PrintfLogger,
    log_level_from_string,
    log_query_args,
)


@pytest.mark.parametrize(
    "name", ["trace", "debug", "info", "warn", "error", "none"]
)
def test_level_name_round_trip(name):
    level = log_level_from_string(name)
    assert str(level) == name


@pytest.mark.parametrize(
    "name, value",
    [("trace", 6), ("debug", 5), ("info", 4), ("warn", 3), ("error", 2), ("none", 1)],
)
def test_level_values(name, value):
    assert int(log_level_from_string(name)) == value


def test_level_values_order():
    levels = [
        log_level_from_string(name)
        for name in ["trace", "debug", "info", "warn", "error", "none"]
    ]
    assert levels == sorted(levels, reverse=True)
    assert levels[0] == LogLevel.TRACE
    assert levels[-1] == LogLevel.NONE


def test_invalid_level_string():
    with pytest.raises(ValueError, match="invalid log level"):
        log_level_from_string("verbose")


def test_query_args_short_bytes_hex():
    data = b"\x00\x01abc"
    assert log_query_args([data]) == [data.hex()]


def test_query_args_long_bytes_truncated():
    data = bytes(range(100))
    (out,) = log_query_args([data])
    assert out.startswith(data[:64].hex())
    assert "(truncated" in out
    assert data[64:].hex() not in out


def test_query_args_long_string_truncated():
    text = "a" * 70
    (out,) = log_query_args([text])
    assert out.startswith("a" * 64 + " (truncated")
    assert "a" * 65 not in out


def test_query_args_passthrough():
    values = [5, 2.5, None, "short"]
    assert log_query_args(values) == values


def test_printf_logger_writes_level_message_and_data():
    stream = io.StringIO()
    logger = PrintfLogger(LogLevel.DEBUG, stream)
    logger.log(LogLevel.INFO, "hello", {"k": "v"})
    out = stream.getvalue()
    assert out.endswith(" info hello k v \n")
    assert out.count("\n") == 1


def test_printf_logger_filters_by_level():
    stream = io.StringIO()
    logger = PrintfLogger(LogLevel.ERROR, stream)
    logger.log(LogLevel.DEBUG, "hidden", None)
    assert stream.getvalue() == ""
    logger.log(LogLevel.ERROR, "shown", None)
    assert "error shown" in stream.getvalue()


def _emit_through(logger: Logger) -> None:
    logger.log(LogLevel.WARN, "via protocol", None)


def test_printf_logger_usable_as_logger():
    stream = io.StringIO()
    logger = PrintfLogger(LogLevel.INFO, stream)
    assert isinstance(logger, Logger)
    _emit_through(logger)
    assert "warn via protocol" in stream.getvalue()