"""REST collaborator: plugin chain, status handling and client ownership."""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel
import pytest

from tessera.errors import APIError, RateLimitError
from tessera.rest import RESTClient
from tests.helpers import ScriptedTransport

pytestmark = pytest.mark.unit


class Greeting(BaseModel):
    text: str


class AppendPlugin:
    def __init__(self, suffix: bytes, seen: list[bytes]) -> None:
        self.suffix = suffix
        self.seen = seen

    def apply(self, response: httpx.Response, data: bytes) -> bytes:
        self.seen.append(data)
        return data + self.suffix


class ExplodingPlugin:
    def apply(self, response: httpx.Response, data: bytes) -> bytes:
        raise ValueError("cannot rewrite")


def _rest(transport: ScriptedTransport, **kwargs) -> RESTClient:
    return RESTClient(
        "https://api.example.test/base",
        base_headers={"X-Test": "1"},
        base_error_context="Example",
        http_client=transport.client(),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_fetch_joins_path_and_sends_headers_and_json() -> None:
    transport = ScriptedTransport([httpx.Response(200, content=b"ok")])
    rest = _rest(transport)

    data = await rest.fetch("POST", "/v1/things", json_body={"a": 1})

    assert data == b"ok"
    request = transport.last_request
    assert request.method == "POST"
    assert str(request.url) == "https://api.example.test/base/v1/things"
    assert request.headers["X-Test"] == "1"
    assert transport.last_json() == {"a": 1}


@pytest.mark.asyncio
async def test_plugins_run_in_order() -> None:
    seen: list[bytes] = []
    transport = ScriptedTransport([httpx.Response(200, content=b"x")])
    rest = _rest(
        transport,
        response_plugins=[AppendPlugin(b"1", seen), AppendPlugin(b"2", seen)],
    )

    assert await rest.fetch("GET", "v1/things") == b"x12"
    assert seen == [b"x", b"x1"]


@pytest.mark.asyncio
async def test_plugins_run_before_error_body_is_read() -> None:
    messages_seen: list[bytes] = []

    def to_message(data: bytes) -> str:
        messages_seen.append(data)
        return data.decode()

    transport = ScriptedTransport([httpx.Response(400, content=b"bad")])
    rest = _rest(
        transport,
        response_plugins=[AppendPlugin(b"!", [])],
        error_body_to_message=to_message,
    )

    with pytest.raises(APIError, match=r"\(status=400\): bad!"):
        await rest.fetch("GET", "v1/things")
    assert messages_seen == [b"bad!"]


@pytest.mark.asyncio
async def test_non_2xx_uses_error_body_message(caplog) -> None:
    transport = ScriptedTransport([httpx.Response(503, content=b"Overloaded")])
    rest = _rest(transport, error_body_to_message=lambda data: data.decode())

    with caplog.at_level(logging.WARNING, logger="tessera.rest"):
        with pytest.raises(APIError) as exc_info:
            await rest.fetch("GET", "v1/things")

    err = exc_info.value
    assert str(err) == "Example request failed (status=503): Overloaded"
    assert err.status_code == 503
    assert err.retryable is True
    assert err.context == "Example"
    assert "returned 503" in caplog.text


@pytest.mark.asyncio
async def test_unparseable_error_body_falls_back_to_reason_phrase() -> None:
    def to_message(data: bytes) -> str:
        raise ValueError("not an error envelope")

    transport = ScriptedTransport([httpx.Response(502, content=b"<html/>")])
    rest = _rest(transport, error_body_to_message=to_message)

    with pytest.raises(APIError) as exc_info:
        await rest.fetch("GET", "v1/things")

    assert str(exc_info.value).endswith(": HTTP 502 Bad Gateway")


@pytest.mark.asyncio
async def test_rate_limit_status_maps_to_rate_limit_error() -> None:
    transport = ScriptedTransport(
        [httpx.Response(429, headers={"Retry-After": "1.5"}, content=b"")]
    )

    with pytest.raises(RateLimitError) as exc_info:
        await _rest(transport).fetch("GET", "v1/things")

    assert exc_info.value.retry_after_s == 1.5


@pytest.mark.asyncio
async def test_transport_failure_maps_to_api_error() -> None:
    transport = ScriptedTransport([httpx.ConnectError("connection refused")])

    with pytest.raises(APIError) as exc_info:
        await _rest(transport).fetch("GET", "v1/things")

    err = exc_info.value
    assert err.phase == "request"
    assert err.retryable is True
    assert isinstance(err.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_failing_plugin_maps_to_api_error() -> None:
    transport = ScriptedTransport([httpx.Response(200, content=b"x")])
    rest = _rest(transport, response_plugins=[ExplodingPlugin()])

    with pytest.raises(APIError) as exc_info:
        await rest.fetch("GET", "v1/things")

    err = exc_info.value
    assert err.phase == "plugin"
    assert err.retryable is False
    assert "ExplodingPlugin" in str(err)


@pytest.mark.asyncio
async def test_fetch_and_decode() -> None:
    transport = ScriptedTransport([httpx.Response(200, json={"text": "hello"})])

    greeting = await _rest(transport).fetch_and_decode("GET", "v1/hi", Greeting)

    assert greeting == Greeting(text="hello")


@pytest.mark.asyncio
async def test_decode_failure_maps_to_api_error() -> None:
    transport = ScriptedTransport([httpx.Response(200, json={"other": 1})])

    with pytest.raises(APIError) as exc_info:
        await _rest(transport).fetch_and_decode("GET", "v1/hi", Greeting)

    err = exc_info.value
    assert err.phase == "decode"
    assert err.retryable is False
    assert "Greeting" in str(err)


@pytest.mark.asyncio
async def test_injected_client_is_not_closed() -> None:
    http_client = ScriptedTransport().client()

    async with RESTClient("https://api.example.test", http_client=http_client):
        pass

    assert not http_client.is_closed
    await http_client.aclose()


@pytest.mark.asyncio
async def test_owned_client_is_closed() -> None:
    rest = RESTClient("https://api.example.test")

    await rest.aclose()

    assert rest._client.is_closed


@pytest.mark.asyncio
async def test_timeout_applies_to_injected_client() -> None:
    transport = ScriptedTransport([httpx.Response(200, content=b"ok")])
    rest = RESTClient(
        "https://api.example.test", timeout_s=5.0, http_client=transport.client()
    )

    await rest.fetch("GET", "v1/things")

    assert transport.last_request.extensions["timeout"] == {
        "connect": 5.0,
        "read": 5.0,
        "write": 5.0,
        "pool": 5.0,
    }
