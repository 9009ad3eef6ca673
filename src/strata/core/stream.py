"""Pull-based chunk stream primitives."""

from __future__ import annotations

import abc
import asyncio
from collections import deque
from collections.abc import AsyncIterator, Iterable
from typing import Deque, List, Union

from .chunks import CHUNK_CLASSES, ReasoningChunk, StreamChunk, TextChunk, is_terminal
from .errors import AdapterStreamError


class ChunkStream(AsyncIterator[StreamChunk], metaclass=abc.ABCMeta):
    """Shared async iterator behind every incremental model response.

    Subclasses source chunks by implementing :meth:`_get_next_chunk`. Each
    chunk passes through :meth:`_process_chunk`, which may turn it into zero or
    more output chunks; when the source is exhausted or fails,
    :meth:`_flush` may release buffered output. Output is queued so consumers
    receive one chunk per pull regardless of how it was batched.

    A source exception is held back until the flushed output has been
    consumed and is then raised unchanged. The stream stops after a finish or
    error chunk and closes itself and its source at that point.
    """

    def __init__(self) -> None:
        self._buffer: Deque[StreamChunk] = deque()
        self._pending_error: Exception | None = None
        self._exhausted = False
        self._finalized = False
        self._closed = False
        self._close_lock = asyncio.Lock()

    def __aiter__(self) -> ChunkStream:
        return self

    async def __anext__(self) -> StreamChunk:
        if self._closed and not self._buffer:
            raise StopAsyncIteration

        while True:
            buffered = self._pop_buffered_chunk()
            if buffered is not None:
                return await self._finalize_if_needed(buffered)

            if self._pending_error is not None:
                error, self._pending_error = self._pending_error, None
                await self.aclose()
                raise error

            if self._closed or self._exhausted or self._finalized:
                await self.aclose()
                raise StopAsyncIteration

            try:
                chunk = await self._get_next_chunk()
            except StopAsyncIteration:
                self._exhausted = True
                self._buffer.extend(self._flush())
                continue
            except asyncio.CancelledError:
                await self.aclose()
                raise
            except Exception as exc:
                self._pending_error = exc
                self._buffer.extend(self._flush())
                continue

            if not isinstance(chunk, CHUNK_CLASSES):
                await self.aclose()
                msg = f"stream produced an unsupported chunk type {type(chunk).__name__}"
                raise AdapterStreamError(msg)
            self._buffer.extend(self._process_chunk(chunk))

    @property
    def closed(self) -> bool:
        """Whether the stream has been closed."""

        return self._closed

    async def aclose(self) -> None:
        """Release source resources and prevent additional iteration."""

        async with self._close_lock:
            if self._closed:
                return

            self._closed = True
            self._buffer.clear()
            await self._on_close()

    async def close(self) -> None:
        await self.aclose()

    async def _finalize_if_needed(self, chunk: StreamChunk) -> StreamChunk:
        if is_terminal(chunk):
            self._finalized = True
            self._buffer.clear()
            await self.aclose()
        return chunk

    def _pop_buffered_chunk(self) -> StreamChunk | None:
        if not self._buffer:
            return None
        return self._buffer.popleft()

    @abc.abstractmethod
    async def _get_next_chunk(self) -> StreamChunk:
        """Retrieve the next chunk, raising ``StopAsyncIteration`` at the end."""

    def _process_chunk(self, chunk: StreamChunk) -> List[StreamChunk]:
        return [chunk]

    def _flush(self) -> List[StreamChunk]:
        return []

    async def _on_close(self) -> None:
        """Allow subclasses to dispose source resources when closing."""


class ListChunkStream(ChunkStream):
    """Deterministic in-memory stream, mostly useful for tests and demos.

    Items that are exceptions are raised from the pull instead of being
    yielded, which makes it easy to simulate transport failures.
    """

    def __init__(self, items: Iterable[Union[StreamChunk, Exception]]) -> None:
        super().__init__()
        self._items: Deque[Union[StreamChunk, Exception]] = deque(items)
        self.close_count = 0

    async def _get_next_chunk(self) -> StreamChunk:
        await asyncio.sleep(0)
        if not self._items:
            raise StopAsyncIteration
        item = self._items.popleft()
        if isinstance(item, Exception):
            raise item
        return item

    async def _on_close(self) -> None:
        self.close_count += 1


def text_stream(*fragments: str) -> ListChunkStream:
    """Return a stream yielding one text chunk per fragment."""

    return ListChunkStream(TextChunk(fragment) for fragment in fragments)


async def collect_chunks(stream: AsyncIterator[StreamChunk]) -> List[StreamChunk]:
    """Drain a stream into a list, closing it afterwards."""

    chunks: List[StreamChunk] = []
    try:
        async for chunk in stream:
            chunks.append(chunk)
    finally:
        closer = getattr(stream, "aclose", None)
        if closer is not None:
            await closer()
    return chunks


def join_text(chunks: Iterable[StreamChunk]) -> str:
    """Concatenate the answer text carried by ``chunks``."""

    return "".join(chunk.text for chunk in chunks if isinstance(chunk, TextChunk))


def join_reasoning(chunks: Iterable[StreamChunk]) -> str:
    """Concatenate the reasoning text carried by ``chunks``."""

    return "".join(chunk.text for chunk in chunks if isinstance(chunk, ReasoningChunk))


__all__ = [
    "ChunkStream",
    "ListChunkStream",
    "collect_chunks",
    "join_reasoning",
    "join_text",
    "text_stream",
]
