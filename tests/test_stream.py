from __future__ import annotations

import asyncio
from typing import List

import pytest

from strata.core.chunks import (
    ErrorChunk,
    FinishChunk,
    StreamChunk,
    TextChunk,
    UsageChunk,
)
from strata.core.errors import AdapterStreamError
from strata.core.message import Usage
from strata.core.stream import (
    ChunkStream,
    ListChunkStream,
    collect_chunks,
    join_text,
    text_stream,
)


class BufferingStream(ChunkStream):
    """Holds every text fragment until the source ends."""

    def __init__(self, upstream: ListChunkStream) -> None:
        super().__init__()
        self._upstream = upstream
        self._held: List[str] = []

    async def _get_next_chunk(self) -> StreamChunk:
        return await self._upstream.__anext__()

    def _process_chunk(self, chunk: StreamChunk) -> List[StreamChunk]:
        if isinstance(chunk, TextChunk):
            self._held.append(chunk.text)
            return []
        return [chunk]

    def _flush(self) -> List[StreamChunk]:
        held, self._held = "".join(self._held), []
        return [TextChunk(held)] if held else []

    async def _on_close(self) -> None:
        await self._upstream.aclose()


def test_list_stream_yields_items_in_order() -> None:
    chunks = asyncio.run(collect_chunks(text_stream("a", "b", "c")))
    assert chunks == [TextChunk("a"), TextChunk("b"), TextChunk("c")]


def test_stream_stops_after_finish_chunk() -> None:
    stream = ListChunkStream([TextChunk("a"), FinishChunk(), TextChunk("ignored")])

    async def run() -> List[StreamChunk]:
        return [chunk async for chunk in stream]

    chunks = asyncio.run(run())
    assert chunks == [TextChunk("a"), FinishChunk()]
    assert stream.closed
    assert stream.close_count == 1


def test_stream_stops_after_error_chunk() -> None:
    failure = RuntimeError("boom")
    stream = ListChunkStream([ErrorChunk(failure), TextChunk("ignored")])

    chunks = asyncio.run(collect_chunks(stream))
    assert chunks == [ErrorChunk(failure)]


def test_close_is_idempotent() -> None:
    stream = text_stream("a")

    async def run() -> None:
        await stream.aclose()
        await stream.aclose()
        await stream.close()
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    asyncio.run(run())
    assert stream.close_count == 1


def test_concurrent_close_runs_hook_once() -> None:
    stream = text_stream("a")

    async def run() -> None:
        await asyncio.gather(stream.aclose(), stream.aclose(), stream.aclose())

    asyncio.run(run())
    assert stream.close_count == 1


def test_unsupported_chunk_raises_stream_error() -> None:
    stream = ListChunkStream([TextChunk("a"), {"type": "text"}])  # type: ignore[list-item]

    async def run() -> None:
        assert await stream.__anext__() == TextChunk("a")
        with pytest.raises(AdapterStreamError):
            await stream.__anext__()

    asyncio.run(run())
    assert stream.closed


def test_buffered_output_is_flushed_before_source_error() -> None:
    failure = ConnectionError("reset")
    upstream = ListChunkStream([TextChunk("a"), TextChunk("b"), failure])
    stream = BufferingStream(upstream)
    received: List[StreamChunk] = []

    async def run() -> None:
        with pytest.raises(ConnectionError) as excinfo:
            async for chunk in stream:
                received.append(chunk)
        assert excinfo.value is failure

    asyncio.run(run())
    assert received == [TextChunk("ab")]
    assert stream.closed
    assert upstream.closed


def test_flush_happens_when_source_is_exhausted() -> None:
    upstream = ListChunkStream([TextChunk("a"), UsageChunk(Usage()), TextChunk("b")])
    chunks = asyncio.run(collect_chunks(BufferingStream(upstream)))
    assert join_text(chunks) == "ab"
    assert isinstance(chunks[0], UsageChunk)


def test_cancellation_propagates_and_closes() -> None:
    class SlowStream(ChunkStream):
        closed_calls = 0

        async def _get_next_chunk(self) -> StreamChunk:
            await asyncio.sleep(10)
            return TextChunk("late")

        async def _on_close(self) -> None:
            type(self).closed_calls += 1

    stream = SlowStream()

    async def run() -> None:
        task = asyncio.create_task(stream.__anext__())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())
    assert stream.closed
    assert SlowStream.closed_calls == 1


def test_collect_chunks_closes_stream_on_early_exit() -> None:
    stream = ListChunkStream([TextChunk("a"), ValueError("bad")])

    with pytest.raises(ValueError):
        asyncio.run(collect_chunks(stream))
    assert stream.closed
