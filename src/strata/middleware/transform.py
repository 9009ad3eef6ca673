"""Incremental text transformers and the stream that drives them."""

from __future__ import annotations

import abc
import inspect
from collections.abc import AsyncIterator
from typing import List

from ..core.chunks import ReasoningChunk, StreamChunk, TextChunk, ToolCallChunk
from ..core.stream import ChunkStream


class TextTransformer(abc.ABC):
    """State machine rewriting the text channel of a single stream.

    Text chunks are fed to :meth:`push`. Reasoning chunks pass through without
    touching the buffer. A tool call is a span break: :meth:`span_break` may
    release held text verbatim so it is not emitted after the call, but the
    state machine carries on. Usage, finish and error chunks close the
    response: :meth:`flush` releases everything before the chunk is passed on.
    Instances hold per-call state and must never be shared between streams.
    """

    def transform_chunk(self, chunk: StreamChunk) -> List[StreamChunk]:
        if isinstance(chunk, TextChunk):
            return self.push(chunk.text)
        if isinstance(chunk, ReasoningChunk):
            return [chunk]
        released = self.span_break() if isinstance(chunk, ToolCallChunk) else self.flush()
        released.append(chunk)
        return released

    @abc.abstractmethod
    def push(self, text: str) -> List[StreamChunk]:
        """Consume a text fragment and return the chunks ready for output."""

    def span_break(self) -> List[StreamChunk]:
        """Release held text that can safely be emitted as is; keeps state."""

        return []

    @abc.abstractmethod
    def flush(self) -> List[StreamChunk]:
        """Release everything still buffered at the end of the response."""


class TransformedStream(ChunkStream):
    """Stream applying a :class:`TextTransformer` to an upstream stream."""

    def __init__(self, upstream: AsyncIterator[StreamChunk], transformer: TextTransformer) -> None:
        super().__init__()
        self._upstream = upstream
        self._transformer = transformer

    async def _get_next_chunk(self) -> StreamChunk:
        return await self._upstream.__anext__()

    def _process_chunk(self, chunk: StreamChunk) -> List[StreamChunk]:
        return self._transformer.transform_chunk(chunk)

    def _flush(self) -> List[StreamChunk]:
        return self._transformer.flush()

    async def _on_close(self) -> None:
        for closer_name in ("aclose", "close"):
            closer = getattr(self._upstream, closer_name, None)
            if closer is None:
                continue
            result = closer()
            if inspect.isawaitable(result):
                await result
            return


__all__ = ["TextTransformer", "TransformedStream"]
