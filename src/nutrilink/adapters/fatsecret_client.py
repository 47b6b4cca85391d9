"""FatSecret Platform API client with OAuth2 client-credentials tokens."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

import httpx
from pydantic import ValidationError

from nutrilink.adapters.fatsecret_models import TokenResponse
from nutrilink.errors import DecodeError, ExternalServiceError

DEFAULT_TOKEN_URL = "https://oauth.fatsecret.com/connect/token"
DEFAULT_SEARCH_URL = "https://platform.fatsecret.com/rest/foods/search/v2"
HTTP_OK = 200

_logger = logging.getLogger(__name__)


class FatSecretClient(Protocol):
    """Interface for FatSecret API interactions."""

    async def search_foods(
        self, query: str, max_results: int = 20
    ) -> dict[str, object]:
        """Search foods by expression and return raw API data."""


@dataclass(frozen=True)
class AccessToken:
    """Bearer token with its absolute expiry."""

    value: str
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class HttpxFatSecretClient(FatSecretClient):
    """HTTPX-backed FatSecret client.

    The token is cached in memory and reused until it is within
    ``refresh_margin`` of expiring. It is replaced only after a new token has
    been fully received and decoded, so a failed or cancelled request never
    leaves a half-written token behind. Two concurrent refreshes may both
    fetch a token; the last one to finish is kept.
    """

    client_id: str
    client_secret: str
    http_client: httpx.AsyncClient
    token_url: str = DEFAULT_TOKEN_URL
    search_url: str = DEFAULT_SEARCH_URL
    scope: str = "premier"
    clock: Callable[[], datetime] = _utcnow
    refresh_margin: timedelta = timedelta(seconds=60)
    timeout: float = 15
    token: AccessToken | None = None

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        client_id: str,
        client_secret: str,
        token_url: str = DEFAULT_TOKEN_URL,
        search_url: str = DEFAULT_SEARCH_URL,
        scope: str = "premier",
    ) -> "HttpxFatSecretClient":
        """Create a FatSecret client with a managed httpx session."""
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            http_client=httpx.AsyncClient(),
            token_url=token_url,
            search_url=search_url,
            scope=scope,
        )

    async def ensure_token(self) -> AccessToken:
        """Return the cached token, refreshing it if it is missing or expiring."""
        token = self.token
        if token is not None and token.expires_at - self.clock() > self.refresh_margin:
            return token
        return await self.refresh_token()

    async def refresh_token(self) -> AccessToken:
        """Fetch a new token.

        On failure the previous token is kept only while it has not expired.
        """
        previous = self.token
        try:
            token = await self._request_token()
        except (ExternalServiceError, DecodeError):
            if previous is not None and previous.expires_at <= self.clock():
                self.token = None
            raise
        self.token = token
        _logger.info("FatSecret token refreshed, expires_at=%s", token.expires_at)
        return token

    async def search_foods(
        self, query: str, max_results: int = 20
    ) -> dict[str, object]:
        """Search foods by expression."""
        token = await self.ensure_token()
        try:
            response = await self.http_client.get(
                self.search_url,
                params={
                    "search_expression": query,
                    "max_results": max_results,
                    "format": "json",
                },
                headers={"Authorization": f"Bearer {token.value}"},
                timeout=self.timeout,
            )
        except httpx.TransportError as exc:
            raise ExternalServiceError(None, f"FatSecret unreachable: {exc}") from exc
        if response.status_code != HTTP_OK:
            raise ExternalServiceError(
                response.status_code, f"FatSecret error {response.status_code}"
            )
        payload = _decode_json(response)
        error = payload.get("error")
        if isinstance(error, dict):
            raise ExternalServiceError(
                response.status_code,
                f"FatSecret error {error.get('code')}: {error.get('message')}",
            )
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request_token(self) -> AccessToken:
        try:
            response = await self.http_client.post(
                self.token_url,
                data={"grant_type": "client_credentials", "scope": self.scope},
                auth=(self.client_id, self.client_secret),
                timeout=self.timeout,
            )
        except httpx.TransportError as exc:
            raise ExternalServiceError(None, f"Token endpoint unreachable: {exc}") from exc
        if response.status_code != HTTP_OK:
            raise ExternalServiceError(
                response.status_code, f"Token error {response.status_code}"
            )
        try:
            parsed = TokenResponse.model_validate(_decode_json(response))
        except ValidationError as exc:
            raise DecodeError("Malformed token response") from exc
        return AccessToken(
            value=parsed.access_token,
            expires_at=self.clock() + timedelta(seconds=parsed.expires_in),
        )


def _decode_json(response: httpx.Response) -> dict[str, object]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise DecodeError("Response body is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise DecodeError("Expected a JSON object")
    return payload
