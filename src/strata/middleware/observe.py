"""Logging middleware reporting call timing and token usage."""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import AsyncIterator
from typing import List

from ..core.chunks import ErrorChunk, FinishChunk, StreamChunk, TextChunk, UsageChunk
from ..core.message import GenerateResult, Usage
from ..core.model import LanguageModel
from ..core.params import GenerateParams
from ..core.stream import ChunkStream
from .base import GenerateThunk, LanguageModelMiddleware, StreamThunk


LOGGER = logging.getLogger(__name__)


class _LoggedStream(ChunkStream):
    """Pass-through stream logging a summary once it finishes or closes."""

    def __init__(
        self,
        upstream: AsyncIterator[StreamChunk],
        *,
        logger: logging.Logger,
        model: LanguageModel,
        started: float,
    ) -> None:
        super().__init__()
        self._upstream = upstream
        self._logger = logger
        self._model = model
        self._started = started
        self._text_length = 0
        self._finish: FinishChunk | None = None
        self._failed = False
        self._usage = Usage()

    async def _get_next_chunk(self) -> StreamChunk:
        return await self._upstream.__anext__()

    def _process_chunk(self, chunk: StreamChunk) -> List[StreamChunk]:
        if isinstance(chunk, TextChunk):
            self._text_length += len(chunk.text)
        elif isinstance(chunk, UsageChunk):
            self._usage = self._usage.add(chunk.usage)
        elif isinstance(chunk, FinishChunk):
            self._finish = chunk
        elif isinstance(chunk, ErrorChunk):
            self._failed = True
        return [chunk]

    def _total_tokens(self, finish: FinishChunk) -> int | None:
        if finish.usage.total_tokens is not None:
            return finish.usage.total_tokens
        # multi-step responses may report usage once per step
        return self._usage.total_tokens

    async def _on_close(self) -> None:
        elapsed = time.perf_counter() - self._started
        if self._finish is not None:
            self._logger.info(
                "stream %s/%s finished reason=%s tokens=%s text_length=%s duration=%.3fs",
                self._model.provider,
                self._model.model_id,
                self._finish.finish_reason.value,
                self._total_tokens(self._finish),
                self._text_length,
                elapsed,
            )
        else:
            self._logger.info(
                "stream %s/%s closed without finish failed=%s text_length=%s duration=%.3fs",
                self._model.provider,
                self._model.model_id,
                self._failed,
                self._text_length,
                elapsed,
            )

        closer = getattr(self._upstream, "aclose", None)
        if closer is not None:
            result = closer()
            if inspect.isawaitable(result):
                await result


def logging_middleware(logger: logging.Logger | None = None) -> LanguageModelMiddleware:
    """Return middleware logging every call at INFO level.

    Failures are logged and re-raised unchanged.
    """

    log = logger or LOGGER

    async def wrap_generate(
        do_generate: GenerateThunk,
        do_stream: StreamThunk,
        params: GenerateParams,
        model: LanguageModel,
    ) -> GenerateResult:
        started = time.perf_counter()
        try:
            result = await do_generate()
        except Exception as exc:
            log.info(
                "generate %s/%s failed error=%s duration=%.3fs",
                model.provider,
                model.model_id,
                type(exc).__name__,
                time.perf_counter() - started,
            )
            raise
        log.info(
            "generate %s/%s finished reason=%s tokens=%s text_length=%s duration=%.3fs",
            model.provider,
            model.model_id,
            result.finish_reason.value,
            result.usage.total_tokens,
            len(result.text),
            time.perf_counter() - started,
        )
        return result

    async def wrap_stream(
        do_generate: GenerateThunk,
        do_stream: StreamThunk,
        params: GenerateParams,
        model: LanguageModel,
    ) -> ChunkStream:
        started = time.perf_counter()
        try:
            stream = await do_stream()
        except Exception as exc:
            log.info(
                "stream %s/%s failed to start error=%s",
                model.provider,
                model.model_id,
                type(exc).__name__,
            )
            raise
        return _LoggedStream(stream, logger=log, model=model, started=started)

    return LanguageModelMiddleware(
        wrap_generate=wrap_generate,
        wrap_stream=wrap_stream,
        name="logging",
    )


__all__ = ["logging_middleware"]
