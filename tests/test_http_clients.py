"""Tests for HTTP-based adapters."""

import asyncio
import base64
from datetime import timedelta
from urllib.parse import parse_qs

import httpx
import pytest

from nutrilink.adapters.fatsecret_client import AccessToken, HttpxFatSecretClient
from nutrilink.errors import DecodeError, ExternalServiceError
from tests.conftest import NOW, FixedClock, search_payload

TOKEN_URL = "https://oauth.test/connect/token"
SEARCH_URL = "https://platform.test/rest/foods/search/v2"


def _token_body(value: str = "fresh-token", expires_in: int = 86400) -> dict:
    return {
        "access_token": value,
        "token_type": "Bearer",
        "expires_in": expires_in,
        "scope": "premier",
    }


def _client(handler, clock: FixedClock) -> HttpxFatSecretClient:  # type: ignore[no-untyped-def]
    return HttpxFatSecretClient(
        client_id="client-id",
        client_secret="client-secret",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        token_url=TOKEN_URL,
        search_url=SEARCH_URL,
        clock=clock.now,
    )


def _recording_handler(seen: list[httpx.Request], token_status: int = 200):  # type: ignore[no-untyped-def]
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path.endswith("/connect/token"):
            if token_status != 200:
                return httpx.Response(token_status, json={"error": "invalid_client"})
            return httpx.Response(200, json=_token_body())
        return httpx.Response(200, json=search_payload())

    return handler


def test_first_search_fetches_token_with_basic_auth(clock: FixedClock) -> None:
    seen: list[httpx.Request] = []
    client = _client(_recording_handler(seen), clock)

    payload = asyncio.run(client.search_foods("banana"))

    token_request, search_request = seen
    expected = base64.b64encode(b"client-id:client-secret").decode()
    assert token_request.method == "POST"
    assert token_request.headers["Authorization"] == f"Basic {expected}"
    assert parse_qs(token_request.content.decode()) == {
        "grant_type": ["client_credentials"],
        "scope": ["premier"],
    }
    assert search_request.method == "GET"
    assert search_request.headers["Authorization"] == "Bearer fresh-token"
    assert search_request.url.params["search_expression"] == "banana"
    assert search_request.url.params["max_results"] == "20"
    assert search_request.url.params["format"] == "json"
    assert payload["foods_search"]["results"]["food"][0]["food_name"] == "Banana"
    assert client.token == AccessToken("fresh-token", NOW + timedelta(seconds=86400))


def test_token_expiring_in_30_seconds_is_refreshed(clock: FixedClock) -> None:
    seen: list[httpx.Request] = []
    client = _client(_recording_handler(seen), clock)
    client.token = AccessToken("old-token", NOW + timedelta(seconds=30))

    asyncio.run(client.search_foods("rice"))

    assert [request.method for request in seen] == ["POST", "GET"]
    assert seen[1].headers["Authorization"] == "Bearer fresh-token"


def test_token_expiring_in_300_seconds_is_reused(clock: FixedClock) -> None:
    seen: list[httpx.Request] = []
    client = _client(_recording_handler(seen), clock)
    client.token = AccessToken("old-token", NOW + timedelta(seconds=300))

    asyncio.run(client.search_foods("rice"))
    asyncio.run(client.search_foods("oats"))

    assert [request.method for request in seen] == ["GET", "GET"]
    assert all(r.headers["Authorization"] == "Bearer old-token" for r in seen)


def test_token_is_refreshed_once_clock_crosses_margin(clock: FixedClock) -> None:
    seen: list[httpx.Request] = []
    client = _client(_recording_handler(seen), clock)
    client.token = AccessToken("old-token", NOW + timedelta(seconds=300))

    asyncio.run(client.search_foods("rice"))
    clock.advance(seconds=241)
    asyncio.run(client.search_foods("rice"))

    assert [request.method for request in seen] == ["GET", "POST", "GET"]


def test_failed_refresh_keeps_unexpired_token(clock: FixedClock) -> None:
    seen: list[httpx.Request] = []
    client = _client(_recording_handler(seen, token_status=503), clock)
    previous = AccessToken("old-token", NOW + timedelta(seconds=30))
    client.token = previous

    with pytest.raises(ExternalServiceError) as excinfo:
        asyncio.run(client.search_foods("rice"))

    assert excinfo.value.status_code == 503
    assert client.token == previous


def test_failed_refresh_drops_expired_token(clock: FixedClock) -> None:
    seen: list[httpx.Request] = []
    client = _client(_recording_handler(seen, token_status=401), clock)
    client.token = AccessToken("old-token", NOW - timedelta(seconds=1))

    with pytest.raises(ExternalServiceError):
        asyncio.run(client.search_foods("rice"))

    assert client.token is None


def test_search_non_200_raises_with_status(clock: FixedClock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/connect/token"):
            return httpx.Response(200, json=_token_body())
        return httpx.Response(429, json={})

    client = _client(handler, clock)

    with pytest.raises(ExternalServiceError) as excinfo:
        asyncio.run(client.search_foods("rice"))

    assert excinfo.value.status_code == 429
    assert client.token is not None


def test_search_error_body_raises(clock: FixedClock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/connect/token"):
            return httpx.Response(200, json=_token_body())
        return httpx.Response(
            200, json={"error": {"code": 13, "message": "Invalid token"}}
        )

    client = _client(handler, clock)

    with pytest.raises(ExternalServiceError, match="Invalid token"):
        asyncio.run(client.search_foods("rice"))


def test_malformed_token_response_raises_decode_error(clock: FixedClock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token_type": "Bearer"})

    client = _client(handler, clock)

    with pytest.raises(DecodeError):
        asyncio.run(client.search_foods("rice"))
    assert client.token is None


def test_non_json_search_body_raises_decode_error(clock: FixedClock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/connect/token"):
            return httpx.Response(200, json=_token_body())
        return httpx.Response(200, content=b"<html>maintenance</html>")

    client = _client(handler, clock)

    with pytest.raises(DecodeError):
        asyncio.run(client.search_foods("rice"))


def test_cancelled_refresh_leaves_token_untouched(clock: FixedClock) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(10)
        return httpx.Response(200, json=_token_body())

    client = _client(handler, clock)
    previous = AccessToken("old-token", NOW + timedelta(seconds=30))
    client.token = previous

    async def scenario() -> None:
        task = asyncio.create_task(client.search_foods("rice"))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert client.token == previous


def test_transport_failure_raises_external_service_error(clock: FixedClock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler, clock)

    with pytest.raises(ExternalServiceError) as excinfo:
        asyncio.run(client.search_foods("rice"))

    assert excinfo.value.status_code is None
