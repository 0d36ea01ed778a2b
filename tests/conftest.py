from __future__ import annotations

import asyncio
from typing import Any, Callable

import httpx
import pytest

from firebase_storage import FirebaseStorage, FirebaseStorageOptions

BUCKET = "demo-app.appspot.com"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.requests: list[httpx.Request] = []

        async def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            result = handler(request)
            if not isinstance(result, httpx.Response):
                result = await result
            return result

        super().__init__(record)


class SlowUploadTransport(httpx.AsyncBaseTransport):
    """Consumes the request body chunk by chunk with a pause after each."""

    def __init__(self, delay: float, token: str = "slow-token") -> None:
        self.delay = delay
        self.token = token
        self.received = bytearray()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        async for chunk in request.stream:
            self.received.extend(chunk)
            await asyncio.sleep(self.delay)
        return httpx.Response(200, json={"downloadTokens": self.token})


@pytest.fixture()
def make_options() -> Callable[..., FirebaseStorageOptions]:
    def _make(handler: Callable[[httpx.Request], Any], **overrides: Any) -> FirebaseStorageOptions:
        overrides.setdefault("progress_interval", 0.01)
        return FirebaseStorageOptions(transport=RecordingTransport(handler), **overrides)

    return _make


@pytest.fixture()
def make_storage(make_options) -> Callable[..., FirebaseStorage]:
    def _make(handler: Callable[[httpx.Request], Any], **overrides: Any) -> FirebaseStorage:
        return FirebaseStorage(BUCKET, make_options(handler, **overrides))

    return _make


@pytest.fixture()
def slow_transport() -> type[SlowUploadTransport]:
    return SlowUploadTransport
