import pytest

from gausscodec.hstore import Hstore, quote

SMORGASBORD = {
    "nullstring": "NULL",
    "actuallynull": None,
    "NULL": "NULL string key",
    "withbracket": "value>42",
    "withequal": "value=42",
    '"withquotes1"': 'this "should" be fine',
    '"withquotes"2"': 'this "should\\" also be fine',
    "embedded1": "value1=>x1",
    "embedded2": '"value2"=>x2',
    "withnewlines": "\n\nvalue\t=>2",
    "<<all sorts of crazy>>": 'this, "should,\\" also, => be fine',
}


def _round_trip(mapping):
    parsed = Hstore()
    parsed.scan(Hstore(mapping).value())
    return parsed.map


def test_null_hstore():
    hs = Hstore({"a": "b"})
    hs.scan(None)
    assert hs.map is None
    assert hs.value() is None


def test_empty_hstore():
    hs = Hstore()
    hs.scan(b"")
    assert hs.map == {}
    assert Hstore({}).value() == b""


def test_one_pair_value():
    assert Hstore({"key1": "value1"}).value() == b'"key1"=>"value1"'


@pytest.mark.parametrize(
    "mapping",
    [
        {"key1": "value1"},
        {"key1": "value1", "key2": "value2", "key3": "value3"},
        SMORGASBORD,
    ],
)
def test_round_trip(mapping):
    assert _round_trip(mapping) == mapping


def test_scan_unquoted_null_is_none_quoted_is_string():
    hs = Hstore()
    hs.scan(b'"a"=>NULL, "b"=>"NULL"')
    assert hs.map == {"a": None, "b": "NULL"}


def test_scan_accepts_str():
    hs = Hstore()
    hs.scan('"key1"=>"value1"')
    assert hs.map == {"key1": "value1"}


def test_scan_rejects_other_types():
    with pytest.raises(TypeError):
        Hstore().scan(42)


def test_quote_escapes():
    assert quote(None) == "NULL"
    assert quote('a"b\\') == '"a\\"b\\\\"'


def test_quote_rejects_non_string():
    with pytest.raises(TypeError):
        quote(3)