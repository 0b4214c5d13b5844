"""
SessionStateManager — client-side authentication state.

Owns the in-memory ``user`` value, the persisted session token and the
transitions between them:

    LOADING ──(no stored token)──────────────► UNAUTHENTICATED
    LOADING ──(stored token, profile ok)──────► AUTHENTICATED
    LOADING ──(stored token rejected)─────────► UNAUTHENTICATED  (token cleared)
    LOADING ──(server unreachable)────────────► UNAUTHENTICATED  (token kept)
    UNAUTHENTICATED ──login + profile ok──────► AUTHENTICATED
    AUTHENTICATED ──logout────────────────────► UNAUTHENTICATED

Every user action bumps a generation counter; a validation that finishes
after a newer action is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from client.api import (
    ApiUnreachableError,
    AuthApiClient,
    AuthApiError,
    TokenRejectedError,
)
from client.navigation import Navigator, Route
from client.storage import TOKEN_KEY, TokenStorage

logger = logging.getLogger(__name__)

Listener = Callable[["SessionStateManager"], None]


class AuthStatus(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class LoginInProgressError(RuntimeError):
    """A second login was started while one is still pending."""


class PartialLoginError(Exception):
    """
    Credentials were accepted but the profile could not be loaded.

    The freshly stored token has been removed again, so the session is
    left unauthenticated.
    """

    def __init__(self, message: str, cause: Exception):
        super().__init__(message)
        self.message = message
        self.cause = cause


class SessionStateManager:
    """
    Parameters
    ----------
    api : AuthApiClient
        Client for ``/login``, ``/register`` and ``/user/me``.
    storage : TokenStorage
        Durable slot holding the session token under ``"token"``.
    navigator : Navigator
        Receives ``Route.PROFILE`` / ``Route.SUCCESS`` / ``Route.HOME``.
    """

    def __init__(
        self,
        api: AuthApiClient,
        storage: TokenStorage,
        navigator: Navigator,
    ):
        self._api = api
        self._storage = storage
        self._navigator = navigator

        self.user: Optional[Dict[str, Any]] = None
        self.status: AuthStatus = AuthStatus.LOADING
        self.connectivity_error: Optional[ApiUnreachableError] = None

        self._generation = 0
        self._validation: Optional[asyncio.Task] = None
        self._login_pending = False
        self._closed = False
        self._listeners: List[Listener] = []

    async def __aenter__(self) -> "SessionStateManager":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ── State ───────────────────────────────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        return self.status is AuthStatus.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.status is AuthStatus.LOADING

    @property
    def token(self) -> Optional[str]:
        return self._storage.get(TOKEN_KEY)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(self)`` after every state change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, user: Optional[Dict[str, Any]], status: AuthStatus) -> None:
        if self._closed:
            return
        self.user = user
        self.status = status
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Session listener %r failed", listener)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("SessionStateManager is closed")

    def _discard_token(self, token: str) -> None:
        """Remove ``token`` unless storage has moved on to another one."""
        if self._storage.get(TOKEN_KEY) == token:
            self._storage.remove(TOKEN_KEY)

    def _supersede(self) -> int:
        """Start a new generation and drop any in-flight validation."""
        self._generation += 1
        task = self._validation
        if task is not None and not task.done():
            task.cancel()
        self._validation = None
        return self._generation

    # ── Startup validation ──────────────────────────────────────────────

    def initialize(self) -> Optional[asyncio.Task]:
        """
        Rehydrate the session from storage.

        Must be called from a running event loop. Returns the background
        validation task, or ``None`` when there is no stored token.
        """
        self._ensure_open()
        generation = self._supersede()
        token = self._storage.get(TOKEN_KEY)
        if not token:
            self._set_state(None, AuthStatus.UNAUTHENTICATED)
            return None

        self._set_state(None, AuthStatus.LOADING)
        self._validation = asyncio.get_running_loop().create_task(
            self._validate(token, generation)
        )
        return self._validation

    async def _validate(self, token: str, generation: int) -> None:
        try:
            user = await self._api.fetch_profile(token)
        except TokenRejectedError as exc:
            if generation != self._generation:
                return
            logger.info("Stored token rejected (%s): clearing session", exc.status_code)
            self._storage.remove(TOKEN_KEY)
            self.connectivity_error = None
            self._set_state(None, AuthStatus.UNAUTHENTICATED)
        except ApiUnreachableError as exc:
            if generation != self._generation:
                return
            logger.warning("Could not validate stored token, keeping it: %s", exc)
            self.connectivity_error = exc
            self._set_state(None, AuthStatus.UNAUTHENTICATED)
        else:
            if generation != self._generation:
                return
            self.connectivity_error = None
            self._set_state(user, AuthStatus.AUTHENTICATED)

    async def wait_until_ready(self) -> AuthStatus:
        """Wait for the in-flight validation (if any) and return the status."""
        task = self._validation
        if task is not None and not task.done():
            await asyncio.wait({task})
        return self.status

    # ── User actions ────────────────────────────────────────────────────

    async def login(self, username: str, password: str) -> Optional[str]:
        """
        Log in and navigate to the profile view.

        Returns the server's message when the credentials are rejected,
        ``None`` on success. Raises ``PartialLoginError`` if the profile
        fetch after a successful login fails, ``ApiUnreachableError`` if
        the login request itself cannot be sent.
        """
        self._ensure_open()
        if self._login_pending:
            raise LoginInProgressError("a login is already in progress")

        self._login_pending = True
        try:
            started = self._generation
            try:
                token = await self._api.login(username, password)
            except AuthApiError as exc:
                logger.info("Login rejected for %r: %s", username, exc.message)
                return exc.message

            if started != self._generation or self._closed:
                # logged out (or torn down) while /login was in flight
                logger.info("Discarding login for %r superseded by a newer action", username)
                return None

            generation = self._supersede()
            self._storage.set(TOKEN_KEY, token)
            self._set_state(None, AuthStatus.LOADING)

            try:
                user = await self._api.fetch_profile(token)
            except (TokenRejectedError, ApiUnreachableError) as exc:
                if generation == self._generation or self._closed:
                    self._discard_token(token)
                    self._set_state(None, AuthStatus.UNAUTHENTICATED)
                raise PartialLoginError(
                    "Login succeeded but the profile could not be loaded", exc
                ) from exc

            if self._closed:
                self._discard_token(token)
                return None
            if generation != self._generation:
                # logout already cleared the token
                return None

            self.connectivity_error = None
            self._set_state(user, AuthStatus.AUTHENTICATED)
            logger.info("Logged in as %s", user.get("username", username))
            self._navigator.navigate(Route.PROFILE)
            return None
        finally:
            self._login_pending = False

    async def register(self, data: Mapping[str, Any]) -> Optional[str]:
        """
        Create an account and navigate to the success view.

        Returns the server's message on rejection. Does not log in.
        """
        self._ensure_open()
        try:
            await self._api.register(data)
        except AuthApiError as exc:
            logger.info("Registration rejected: %s", exc.message)
            return exc.message
        self._navigator.navigate(Route.SUCCESS)
        return None

    def logout(self) -> None:
        """Forget the session and navigate home. Always succeeds."""
        self._supersede()
        self._storage.remove(TOKEN_KEY)
        self.connectivity_error = None
        self._set_state(None, AuthStatus.UNAUTHENTICATED)
        self._navigator.navigate(Route.HOME)

    async def close(self) -> None:
        """
        Cancel in-flight validation; no state changes happen afterwards.

        A login still waiting on its profile removes the token it stored.
        """
        if self._closed:
            return
        task = self._validation
        self._supersede()
        self._closed = True
        self._listeners.clear()
        if task is not None and not task.done():
            await asyncio.wait({task})
