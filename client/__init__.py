"""
client — session state for an Auth API frontend.

Provides:
  • ``SessionStateManager`` — login / register / logout / startup rehydration
  • ``AuthApiClient`` — httpx client for the Auth API
  • Token storage (file and in-memory) and navigation targets
"""

from __future__ import annotations

from typing import Optional

from client.api import ApiUnreachableError, AuthApiClient, AuthApiError, TokenRejectedError
from client.navigation import Navigator, RecordingNavigator, Route
from client.session import AuthStatus, LoginInProgressError, PartialLoginError, SessionStateManager
from client.storage import TOKEN_KEY, FileTokenStorage, MemoryTokenStorage, TokenStorage
from config.settings import config


def create_session_manager(navigator: Navigator, *, storage: Optional[TokenStorage] = None) -> SessionStateManager:
    """Build a manager wired to ``config.backend_url`` and ``config.token_store_path``."""
    return SessionStateManager(
        api=AuthApiClient(config.backend_url),
        storage=storage or FileTokenStorage(config.token_store_path),
        navigator=navigator,
    )


__all__ = [
    "ApiUnreachableError",
    "AuthApiClient",
    "AuthApiError",
    "AuthStatus",
    "FileTokenStorage",
    "LoginInProgressError",
    "MemoryTokenStorage",
    "Navigator",
    "PartialLoginError",
    "RecordingNavigator",
    "Route",
    "SessionStateManager",
    "TOKEN_KEY",
    "TokenRejectedError",
    "TokenStorage",
    "create_session_manager",
]
