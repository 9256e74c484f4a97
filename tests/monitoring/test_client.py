"""Testes do FetchClient: cabeçalhos, TLS/timeout e mapeamento de erros."""

import io
import socket

import pytest
import requests

from bunnycdn_exporter.monitoring.client import (
    BunnyAPIError,
    FetchClient,
    FetchError,
    ParseError,
    TransportError,
)


def _response(status, body=b"[]", url="https://api.test/pullzone"):
    resp = requests.Response()
    resp.status_code = status
    resp.raw = io.BytesIO(body)
    resp.url = url
    resp.request = requests.Request("GET", url).prepare()
    return resp


class FakeSession:
    def __init__(self, result):
        self.result = result
        self.calls = []
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    def close(self):
        self.closed = True


def test_fetch_sends_headers_timeout_and_verify():
    """Cada chamada leva AccessKey, Accept, timeout e verify configurados."""
    session = FakeSession(_response(200, b"[]"))
    client = FetchClient("https://api.test/", "secret", ssl_verify=False, timeout=2.5, session=session)

    with client.fetch("/pullzone") as resp:
        assert resp.content == b"[]"

    url, kwargs = session.calls[0]
    assert url == "https://api.test/pullzone"
    assert kwargs["headers"] == {"AccessKey": "secret", "Accept": "application/json"}
    assert kwargs["timeout"] == 2.5
    assert kwargs["verify"] is False
    assert kwargs["stream"] is True


def test_url_for_adds_leading_slash():
    client = FetchClient("https://api.test/api", "k", session=FakeSession(None))
    assert client.url_for("statistics?a=1") == "https://api.test/api/statistics?a=1"


@pytest.mark.parametrize("status", [301, 401, 404, 500, 503])
def test_non_2xx_raises_fetch_error_with_status_and_url(status):
    """Status fora de 2xx vira FetchError com status e URL."""
    resp = _response(status, b"error", url="https://api.test/statistics?pullZone=1")
    client = FetchClient("https://api.test", "k", session=FakeSession(resp))

    with pytest.raises(FetchError) as exc_info:
        client.fetch("/statistics?pullZone=1")

    assert exc_info.value.status == status
    assert exc_info.value.url == "https://api.test/statistics?pullZone=1"
    assert str(status) in str(exc_info.value)
    assert resp.raw.closed


@pytest.mark.parametrize(
    "exc",
    [
        requests.ConnectionError("connection refused"),
        requests.Timeout("timed out"),
        requests.exceptions.SSLError("bad certificate"),
    ],
)
def test_transport_failures_raise_transport_error(exc):
    client = FetchClient("https://api.test", "k", session=FakeSession(exc))
    with pytest.raises(TransportError) as exc_info:
        client.fetch("/pullzone")
    assert exc_info.value.__cause__ is exc


def test_error_hierarchy():
    """Os três tipos de erro partilham a mesma base."""
    for cls in (TransportError, FetchError, ParseError):
        assert issubclass(cls, BunnyAPIError)


def test_close_and_context_manager():
    session = FakeSession(None)
    with FetchClient("https://api.test", "k", session=session) as client:
        assert client.base_uri == "https://api.test"
    assert session.closed


def test_real_http_roundtrip(fake_bunny):
    """Contra um servidor local: cabeçalhos chegam e 404 vira FetchError."""
    fake_bunny.routes["/pullzone"] = (200, [])
    client = FetchClient(fake_bunny.url, "api_key", timeout=2)

    with client.fetch("/pullzone") as resp:
        assert resp.json() == []
    headers = fake_bunny.requests[0]["headers"]
    assert headers["AccessKey"] == "api_key"
    assert headers["Accept"] == "application/json"

    with pytest.raises(FetchError) as exc_info:
        client.fetch("/unknown")
    assert exc_info.value.status == 404
    assert exc_info.value.url.endswith("/unknown")
    client.close()


def test_connection_refused_is_transport_error():
    # porta livre: reservada e fechada logo em seguida
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    client = FetchClient(f"http://127.0.0.1:{port}", "k", timeout=1)
    with pytest.raises(TransportError):
        client.fetch("/pullzone")
