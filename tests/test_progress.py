from __future__ import annotations

import asyncio
import io

import pytest

from firebase_storage.progress import ProgressBody, ProgressChannel, UploadProgress


class _ForwardOnly(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False


def test_upload_progress_percentage():
    assert UploadProgress(250, 1000).percentage == 25.0
    assert UploadProgress(1000, 1000).percentage == 100.0
    assert UploadProgress(0, 0).percentage == 100.0


def test_upload_progress_is_frozen():
    progress = UploadProgress(1, 2)
    with pytest.raises(AttributeError):
        progress.position = 2  # type: ignore[misc]


def test_progress_body_measures_remaining_length():
    stream = io.BytesIO(b"0123456789")
    stream.seek(3)

    body = ProgressBody(stream)

    assert body.length == 7
    assert body.position == 0
    assert stream.tell() == 3


def test_progress_body_accepts_bytes():
    assert ProgressBody(b"abc").length == 3
    assert ProgressBody(bytearray(b"abcd")).length == 4


def test_progress_body_rejects_unseekable_stream():
    with pytest.raises(ValueError):
        ProgressBody(_ForwardOnly())


def test_progress_body_rejects_bad_chunk_size():
    with pytest.raises(ValueError):
        ProgressBody(b"abc", chunk_size=0)


@pytest.mark.asyncio()
async def test_progress_body_counts_streamed_chunks():
    body = ProgressBody(b"a" * 25, chunk_size=10)
    seen: list[int] = []
    chunks: list[bytes] = []

    async for chunk in body:
        chunks.append(chunk)
        seen.append(body.position)

    assert b"".join(chunks) == b"a" * 25
    assert seen == [10, 20, 25]
    assert body.snapshot() == UploadProgress(25, 25)


@pytest.mark.asyncio()
async def test_progress_body_stops_at_measured_length():
    stream = io.BytesIO(b"abcdef")
    body = ProgressBody(stream, chunk_size=4)
    stream.seek(0, io.SEEK_END)
    stream.write(b"appended")
    stream.seek(0)

    chunks = [chunk async for chunk in body]

    assert b"".join(chunks) == b"abcdef"
    assert body.snapshot() == UploadProgress(6, 6)


@pytest.mark.asyncio()
async def test_channel_delivers_to_every_listener():
    channel = ProgressChannel()
    first: list[UploadProgress] = []
    second: list[UploadProgress] = []

    async def async_listener(event: UploadProgress) -> None:
        await asyncio.sleep(0)
        second.append(event)

    channel.subscribe(first.append)
    channel.subscribe(async_listener)
    await channel.publish(UploadProgress(1, 10))

    assert first == [UploadProgress(1, 10)]
    assert second == [UploadProgress(1, 10)]


@pytest.mark.asyncio()
async def test_channel_unsubscribe():
    channel = ProgressChannel()
    events: list[UploadProgress] = []

    unsubscribe = channel.subscribe(events.append)
    await channel.publish(UploadProgress(1, 10))
    unsubscribe()
    await channel.publish(UploadProgress(2, 10))

    assert events == [UploadProgress(1, 10)]
    unsubscribe()  # no-op when already removed


@pytest.mark.asyncio()
async def test_channel_ignores_events_after_close():
    channel = ProgressChannel()
    events: list[UploadProgress] = []
    channel.subscribe(events.append)

    channel.close()
    await channel.publish(UploadProgress(5, 10))

    assert channel.closed
    assert events == []
    assert [event async for event in channel] == []


@pytest.mark.asyncio()
async def test_channel_iteration_stops_on_close():
    channel = ProgressChannel()
    received: list[UploadProgress] = []

    async def consume() -> None:
        async for event in channel:
            received.append(event)

    consumer = asyncio.create_task(consume())
    await asyncio.sleep(0)
    await channel.publish(UploadProgress(3, 9))
    await channel.publish(UploadProgress(6, 9))
    channel.close()
    await asyncio.wait_for(consumer, timeout=1)

    assert received == [UploadProgress(3, 9), UploadProgress(6, 9)]


@pytest.mark.asyncio()
async def test_channel_survives_failing_listener():
    channel = ProgressChannel()
    events: list[UploadProgress] = []

    def broken(event: UploadProgress) -> None:
        raise RuntimeError("listener bug")

    channel.subscribe(broken)
    channel.subscribe(events.append)
    await channel.publish(UploadProgress(1, 2))

    assert events == [UploadProgress(1, 2)]
