from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, Union

import httpx
from loguru import logger

from firebase_storage.settings import StorageSettings

AuthTokenFactory = Callable[[], Union[str, None, Awaitable[Union[str, None]]]]


@dataclass
class FirebaseStorageOptions:
    """Runtime options shared by every request a client issues.

    ``auth_token_factory`` may be a plain or an async callable; it is invoked
    once per HTTP client so refreshed tokens are picked up. ``transport``
    replaces the network transport of every client (``httpx.MockTransport``
    in tests).
    """

    auth_token_factory: AuthTokenFactory | None = None
    throw_on_cancel: bool = False
    http_timeout: float | None = 100.0
    progress_interval: float = 0.5
    chunk_size: int = 64 * 1024
    transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "FirebaseStorageOptions":
        return cls(
            auth_token_factory=lambda: settings.auth_token,
            throw_on_cancel=settings.throw_on_cancel,
            http_timeout=settings.http_timeout,
            progress_interval=settings.progress_interval,
            chunk_size=settings.chunk_size,
        )

    async def get_auth_token(self) -> str | None:
        if self.auth_token_factory is None:
            return None
        token = self.auth_token_factory()
        if inspect.isawaitable(token):
            token = await token
        return token or None

    async def create_http_client(self) -> httpx.AsyncClient:
        headers: dict[str, str] = {}
        token = await self.get_auth_token()
        if token:
            headers["Authorization"] = f"Firebase {token}"
        else:
            logger.debug("No auth token available, sending anonymous requests")
        return httpx.AsyncClient(
            headers=headers,
            timeout=self.http_timeout,
            transport=self.transport,
        )


__all__ = ["AuthTokenFactory", "FirebaseStorageOptions"]
