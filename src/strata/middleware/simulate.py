"""Serve stream calls from single-shot results."""

from __future__ import annotations

from typing import List

from ..core.chunks import (
    FinishChunk,
    ReasoningChunk,
    StreamChunk,
    TextChunk,
    ToolCallChunk,
    UsageChunk,
)
from ..core.message import GenerateResult
from ..core.model import LanguageModel
from ..core.params import GenerateParams
from ..core.stream import ChunkStream
from .base import GenerateThunk, LanguageModelMiddleware, StreamThunk


def result_to_chunks(result: GenerateResult) -> List[StreamChunk]:
    """Return the canonical chunk sequence describing ``result``.

    Reasoning (when present) and text come first as one chunk each, followed
    by one chunk per tool call in order, the usage chunk and the finish chunk.
    Empty text or reasoning produces no chunk.
    """

    chunks: List[StreamChunk] = []
    if result.reasoning:
        chunks.append(ReasoningChunk(result.reasoning))
    if result.text:
        chunks.append(TextChunk(result.text))
    chunks.extend(ToolCallChunk(call) for call in result.tool_calls)
    chunks.append(UsageChunk(result.usage))
    chunks.append(FinishChunk(finish_reason=result.finish_reason, usage=result.usage))
    return chunks


class SimulatedStream(ChunkStream):
    """Stream replaying a finished :class:`GenerateResult`.

    Chunks are materialised on the first pull and then served one at a time.
    Closing the stream ends it regardless of position.
    """

    def __init__(self, result: GenerateResult) -> None:
        super().__init__()
        self._result = result
        self._chunks: List[StreamChunk] | None = None
        self._position = 0

    async def _get_next_chunk(self) -> StreamChunk:
        if self._chunks is None:
            self._chunks = result_to_chunks(self._result)
        if self._position >= len(self._chunks):
            raise StopAsyncIteration
        chunk = self._chunks[self._position]
        self._position += 1
        return chunk


def simulate_streaming_middleware() -> LanguageModelMiddleware:
    """Return middleware answering stream calls with a single-shot call.

    Useful for backends without native streaming; single-shot calls pass
    through untouched.
    """

    async def wrap_stream(
        do_generate: GenerateThunk,
        do_stream: StreamThunk,
        params: GenerateParams,
        model: LanguageModel,
    ) -> ChunkStream:
        result = await do_generate()
        return SimulatedStream(result)

    return LanguageModelMiddleware(wrap_stream=wrap_stream, name="simulate_streaming")


__all__ = ["SimulatedStream", "result_to_chunks", "simulate_streaming_middleware"]
