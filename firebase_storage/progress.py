"""Upload progress events, the byte-counting request body and the channel
that fans progress out to subscribers."""

from __future__ import annotations

import asyncio
import inspect
import io
import os
from dataclasses import dataclass
from typing import Any, AsyncIterator, BinaryIO, Callable, Union

from loguru import logger

UploadSource = Union[BinaryIO, bytes, bytearray, memoryview]
ProgressListener = Callable[["UploadProgress"], Any]

_CLOSED = object()


@dataclass(frozen=True)
class UploadProgress:
    position: int
    length: int

    @property
    def percentage(self) -> float:
        if self.length <= 0:
            return 100.0
        return self.position * 100.0 / self.length


class ProgressBody:
    """Async request body that reads ``stream`` in chunks and counts what it
    hands to the transport.

    ``length`` is the number of bytes between the stream's position at
    construction and its end. ``position`` only ever grows and is capped at
    ``length``.
    """

    def __init__(self, source: UploadSource, chunk_size: int = 64 * 1024) -> None:
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        if not source.seekable():
            raise ValueError("Upload source must be seekable")
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._stream = source
        self._chunk_size = chunk_size
        start = source.tell()
        end = source.seek(0, os.SEEK_END)
        source.seek(start)
        self.length = end - start
        self.position = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        loop = asyncio.get_running_loop()
        while self.position < self.length:
            size = min(self._chunk_size, self.length - self.position)
            chunk = await loop.run_in_executor(None, self._stream.read, size)
            if not chunk:
                break
            chunk = chunk[: self.length - self.position]
            self.position += len(chunk)
            yield chunk

    def snapshot(self) -> UploadProgress:
        return UploadProgress(self.position, self.length)


class ProgressChannel:
    """Multi-subscriber progress notifications.

    Listeners registered with :meth:`subscribe` are called for every event
    (awaitable results are awaited). Iterating the channel with ``async for``
    yields events published after iteration started and ends when the channel
    is closed.
    """

    def __init__(self) -> None:
        self._listeners: list[ProgressListener] = []
        self._queues: set[asyncio.Queue] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: ProgressListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def publish(self, event: UploadProgress) -> None:
        if self._closed:
            return
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Progress listener {listener!r} failed", listener=listener)
        for queue in self._queues:
            queue.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for queue in self._queues:
            queue.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[UploadProgress]:
        if self._closed:
            return
        queue: asyncio.Queue = asyncio.Queue()
        self._queues.add(queue)
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item
        finally:
            self._queues.discard(queue)


__all__ = [
    "UploadSource",
    "ProgressListener",
    "UploadProgress",
    "ProgressBody",
    "ProgressChannel",
]
