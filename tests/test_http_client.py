"""
Tests for the httpx-backed transport, driven through httpx.MockTransport.
"""

import asyncio

import httpx
import pytest

from writefreely.adapters import http_client
from writefreely.adapters.http_client import HttpxTransport, build_async_client
from writefreely.core.config import AppSettings
from writefreely.core.domain.http import TransportRequest

URL = "https://write.as/api/posts"


@pytest.fixture
def settings():
    return AppSettings(user_agent="writefreely-tests/1.0", http_timeout_seconds=5.0)


def _transport(settings, handler):
    client = build_async_client(settings, transport=httpx.MockTransport(handler))
    return HttpxTransport(settings, client=client)


def test_success_returns_body_and_status(settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, content=b'{"code":201,"data":{}}')

    transport = _transport(settings, handler)
    request = TransportRequest(
        method="POST",
        url=URL,
        headers={"Authorization": "abc", "Content-Type": "application/json; charset=utf-8"},
        body=b'{"body":"hi"}',
    )

    response = asyncio.run(transport.send(request))

    assert response.status == 201
    assert response.body == b'{"code":201,"data":{}}'
    assert response.error is None

    sent = seen[0]
    assert sent.method == "POST"
    assert str(sent.url) == URL
    assert sent.headers["Authorization"] == "abc"
    assert sent.headers["Content-Type"] == "application/json; charset=utf-8"
    assert sent.headers["User-Agent"] == "writefreely-tests/1.0"
    assert sent.headers["Accept"] == "application/json"
    assert sent.content == b'{"body":"hi"}'


def test_error_status_is_not_a_transport_error(settings):
    transport = _transport(settings, lambda request: httpx.Response(404, content=b'{"code":404}'))

    response = asyncio.run(transport.send(TransportRequest(method="GET", url=URL)))

    assert response.status == 404
    assert response.error is None


def test_remote_protocol_error_is_flagged(settings):
    def handler(request):
        raise httpx.RemoteProtocolError("Server disconnected without sending a response.", request=request)

    transport = _transport(settings, handler)

    response = asyncio.run(transport.send(TransportRequest(method="DELETE", url=URL)))

    assert response.status is None
    assert response.error is not None
    assert response.error.protocol_error is True
    assert "disconnected" in response.error.message


def test_connect_error_is_a_plain_failure(settings):
    def handler(request):
        raise httpx.ConnectError("", request=request)

    transport = _transport(settings, handler)

    response = asyncio.run(transport.send(TransportRequest(method="GET", url=URL)))

    assert response.error is not None
    assert response.error.protocol_error is False
    assert response.error.message == "ConnectError"


def test_opens_a_client_per_request_without_injected_client(settings, monkeypatch):
    built = []

    def fake_builder(settings_arg, **kwargs):
        built.append(settings_arg)
        return httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"{}")))

    monkeypatch.setattr(http_client, "build_async_client", fake_builder)
    transport = HttpxTransport(settings)

    asyncio.run(transport.send(TransportRequest(method="GET", url=URL)))
    asyncio.run(transport.send(TransportRequest(method="GET", url=URL)))

    assert built == [settings, settings]
