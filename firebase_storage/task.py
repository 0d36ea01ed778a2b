"""Upload task: one streamed upload plus the progress sampling tied to it."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Generator

import httpx
from loguru import logger

from firebase_storage.exceptions import NO_RESPONSE, StorageError
from firebase_storage.options import FirebaseStorageOptions
from firebase_storage.progress import ProgressBody, ProgressChannel, UploadSource


class UploadTask:
    """Uploads ``stream`` to ``url`` as soon as it is constructed.

    Awaiting the task yields the download URL (``download_url`` followed by
    the token from the upload response). Progress is published on
    :attr:`progress` every ``options.progress_interval`` seconds until the
    upload is finished; no final 100% event is sent.

    On cancellation, through ``cancel_event`` or :meth:`cancel`, the task
    either raises ``asyncio.CancelledError`` (``options.throw_on_cancel``) or
    resolves to an empty string. Cancelling the coroutine awaiting the task
    (``wait_for`` timeouts, shutdown) always raises.

    Must be created while an event loop is running. Closing ``stream`` before
    the task finishes is the caller's responsibility.
    """

    def __init__(
        self,
        options: FirebaseStorageOptions,
        url: str,
        download_url: str,
        stream: UploadSource,
        cancel_event: asyncio.Event | None = None,
        mime_type: str | None = None,
    ) -> None:
        self._options = options
        self._target_url = url
        self._download_url = download_url
        self._body = ProgressBody(stream, options.chunk_size)
        self._cancel_requested = asyncio.Event()
        self._cancel_events = [self._cancel_requested]
        if cancel_event is not None:
            self._cancel_events.append(cancel_event)
        self._mime_type = mime_type
        self._finished = False
        self.progress = ProgressChannel()
        self._task = asyncio.get_running_loop().create_task(self._run())

    @property
    def target_url(self) -> str:
        return self._target_url

    @property
    def total_bytes(self) -> int:
        return self._body.length

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        if self._task.done():
            return False
        self._cancel_requested.set()
        return True

    def cancel_requested(self) -> bool:
        return any(event.is_set() for event in self._cancel_events)

    def __await__(self) -> Generator[Any, None, str]:
        return self._task.__await__()

    async def _run(self) -> str:
        sampler = asyncio.create_task(self._report_progress_loop())
        try:
            return await self._upload_file()
        except asyncio.CancelledError:
            # only our own signals resolve to ""; the awaiting caller's cancellation always propagates
            if self._options.throw_on_cancel or not self.cancel_requested():
                raise
            logger.debug("Upload to {url} cancelled", url=self._target_url)
            return ""
        finally:
            self._finished = True
            sampler.cancel()
            await asyncio.wait({sampler})
            self.progress.close()

    async def _upload_file(self) -> str:
        response_data = NO_RESPONSE
        headers = {"Content-Length": str(self._body.length)}
        if self._mime_type:
            headers["Content-Type"] = self._mime_type

        try:
            async with await self._options.create_http_client() as client:
                if self.cancel_requested():
                    raise asyncio.CancelledError()
                logger.debug(
                    "Uploading {length} bytes to {url}",
                    length=self._body.length,
                    url=self._target_url,
                )
                response = await self._send(
                    client.post(self._target_url, content=self._body, headers=headers)
                )
                response_data = response.text
                response.raise_for_status()

                data = response.json()
                if not isinstance(data, dict):
                    raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
                token = data["downloadTokens"]
                if not isinstance(token, str):
                    raise TypeError(f"'downloadTokens' must be a string, got {type(token).__name__}")

                logger.debug("Upload to {url} finished", url=self._target_url)
                return self._download_url + token
        except Exception as exc:
            raise StorageError(self._target_url, response_data, exc) from exc

    async def _send(self, request: Awaitable[httpx.Response]) -> httpx.Response:
        sending = asyncio.ensure_future(request)
        waiters = {asyncio.ensure_future(event.wait()) for event in self._cancel_events}
        try:
            await asyncio.wait({sending, *waiters}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()
            if not sending.done():
                sending.cancel()
                await asyncio.wait({sending})

        if sending.cancelled():
            raise asyncio.CancelledError()
        return sending.result()

    async def _report_progress_loop(self) -> None:
        while not self._finished:
            await asyncio.sleep(self._options.progress_interval)
            if self._finished:
                break
            await self.progress.publish(self._body.snapshot())


__all__ = ["UploadTask"]
