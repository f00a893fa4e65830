import pytest

from gausscodec.gss import GSS, gss_provider, register_gss_provider


class _EchoGSS(GSS):
    def get_init_token(self, host, service):
        return f"{service}/{host}".encode()

    def get_init_token_from_spn(self, spn):
        return spn.encode()

    def continue_(self, in_token):
        return True, in_token[::-1]


@pytest.fixture(autouse=True)
def _reset_provider():
    previous = gss_provider()
    yield
    register_gss_provider(previous)


def test_register_and_fetch_provider():
    register_gss_provider(_EchoGSS)
    factory = gss_provider()
    assert factory is _EchoGSS
    gss = factory()
    assert gss.get_init_token("host", "postgres") == b"postgres/host"
    assert gss.get_init_token_from_spn("postgres/host") == b"postgres/host"
    assert gss.continue_(b"ab") == (True, b"ba")


def test_unregister_provider():
    register_gss_provider(_EchoGSS)
    register_gss_provider(None)
    assert gss_provider() is None


def test_gss_is_abstract():
    with pytest.raises(TypeError):
        GSS()