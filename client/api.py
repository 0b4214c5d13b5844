"""
AuthApiClient — async HTTP client for the Auth API.

Wraps ``httpx.AsyncClient`` and maps responses onto a small exception
hierarchy:

  • ``AuthApiError``        — server answered with a non-2xx status
  • ``TokenRejectedError``  — ``/user/me`` refused the token
  • ``ApiUnreachableError`` — transport failure, no answer at all
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from config.settings import config

logger = logging.getLogger(__name__)


class AuthApiError(Exception):
    """Non-2xx response from the Auth API."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TokenRejectedError(AuthApiError):
    """The server refused the session token (invalid, expired, unknown user)."""


class ApiUnreachableError(Exception):
    """The Auth API could not be reached."""


def _json_object(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_message(response: httpx.Response) -> str:
    """Pull ``message`` (or FastAPI's ``detail``) out of an error body."""
    body = _json_object(response)
    if body:
        for key in ("message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or f"HTTP {response.status_code}"


class AuthApiClient:
    """Thin async client for ``/login``, ``/register`` and ``/user/me``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or config.backend_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=config.request_timeout if timeout is None else timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "AuthApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiUnreachableError(f"Could not reach {self.base_url}: {exc}") from exc

    async def login(self, username: str, password: str) -> str:
        """Return the session token for valid credentials."""
        response = await self._request(
            "POST", "/login", json={"username": username, "password": password}
        )
        if response.is_error:
            raise AuthApiError(_error_message(response), response.status_code)
        token = _json_object(response).get("token")
        if not isinstance(token, str) or not token:
            raise AuthApiError("Login response did not contain a token", response.status_code)
        return token

    async def register(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Create an account; the response body is returned as-is (may be empty)."""
        response = await self._request("POST", "/register", json=dict(data))
        if response.is_error:
            raise AuthApiError(_error_message(response), response.status_code)
        return _json_object(response)

    async def fetch_profile(self, token: str) -> Dict[str, Any]:
        """Return the ``user`` record the token belongs to."""
        response = await self._request(
            "GET", "/user/me", headers={"Authorization": f"Bearer {token}"}
        )
        if response.is_error:
            raise TokenRejectedError(_error_message(response), response.status_code)
        user = _json_object(response).get("user")
        if not isinstance(user, dict):
            raise TokenRejectedError("Profile response did not contain a user", response.status_code)
        return user
