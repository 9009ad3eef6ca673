"""Strip markdown code fences wrapped around structured (JSON) output."""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Callable
from enum import Enum
from typing import List

from ..config import ExtractJSONOptions
from ..core.chunks import StreamChunk, TextChunk
from ..core.message import GenerateResult
from ..core.model import LanguageModel
from ..core.params import GenerateParams
from ..core.stream import ChunkStream
from .base import GenerateThunk, LanguageModelMiddleware, StreamThunk
from .transform import TextTransformer, TransformedStream


LOGGER = logging.getLogger(__name__)

FENCE = "```"
SUFFIX_BUFFER_SIZE = 12
PREFIX_DETECTION_WINDOW = 32

_OPENING_FENCE = re.compile(r"^```(?:json)?\s*\n?")
_CLOSING_FENCE = re.compile(r"\n?```\s*\Z")


def default_json_transform(text: str) -> str:
    """Remove a leading ```` ```json ````/```` ``` ```` fence and a trailing fence, then trim."""

    text = _OPENING_FENCE.sub("", text, count=1)
    text = _CLOSING_FENCE.sub("", text, count=1)
    return text.strip()


class _Phase(str, Enum):
    PREFIX = "prefix"
    STREAMING = "streaming"


class FenceExtractor(TextTransformer):
    """Incremental fence stripper.

    While detecting the prefix the extractor holds text until it knows whether
    the response opens with a fence. Afterwards it streams everything except
    the last :data:`SUFFIX_BUFFER_SIZE` characters, which may hold a closing
    fence, and strips that fence when the response ends. A tool call releases
    the held tail unchanged without resetting the phase. With a custom
    transform nothing is emitted until the response ends.
    """

    def __init__(self, transform: Callable[[str], str] | None = None) -> None:
        self._custom_transform = transform
        self._reset()

    def _reset(self) -> None:
        self._phase = _Phase.PREFIX
        self._buffer = ""
        self._prefix_stripped = False
        self._content_started = False

    @property
    def phase(self) -> str:
        return self._phase.value

    @property
    def prefix_stripped(self) -> bool:
        return self._prefix_stripped

    def push(self, text: str) -> List[StreamChunk]:
        self._buffer += text
        if self._custom_transform is not None:
            return []

        if self._phase is _Phase.PREFIX:
            self._detect_prefix()
        if self._phase is not _Phase.STREAMING:
            return []

        if not self._content_started:
            # leading whitespace is trimmed by the default transform
            self._buffer = self._buffer.lstrip()
            if not self._buffer:
                return []
            self._content_started = True

        if len(self._buffer) <= SUFFIX_BUFFER_SIZE:
            return []
        ready = self._buffer[:-SUFFIX_BUFFER_SIZE]
        self._buffer = self._buffer[-SUFFIX_BUFFER_SIZE:]
        return [TextChunk(ready)]

    def span_break(self) -> List[StreamChunk]:
        if self._custom_transform is not None or not self._content_started:
            return []
        # held tail goes out untrimmed and the phase is kept
        ready, self._buffer = self._buffer, ""
        return [TextChunk(ready)] if ready else []

    def flush(self) -> List[StreamChunk]:
        if not self._buffer:
            self._reset()
            return []

        if self._custom_transform is not None:
            remaining = self._custom_transform(self._buffer)
        elif self._phase is _Phase.PREFIX:
            remaining = default_json_transform(self._buffer)
        else:
            # opening fence and leading whitespace were handled while streaming;
            # rerunning the full transform on the tail would strip content
            remaining = _CLOSING_FENCE.sub("", self._buffer, count=1).rstrip()

        LOGGER.debug("fence extractor flushed %d of %d buffered characters", len(remaining), len(self._buffer))
        self._reset()
        if not remaining:
            return []
        return [TextChunk(remaining)]

    def _detect_prefix(self) -> None:
        buffer = self._buffer
        if not buffer:
            return

        if not buffer.startswith("`"):
            self._phase = _Phase.STREAMING
            return

        if buffer.startswith(FENCE):
            if "\n" in buffer or len(buffer) >= PREFIX_DETECTION_WINDOW:
                # a fence line with no newline is still stripped so output does
                # not depend on where chunks split
                if "\n" not in buffer:
                    LOGGER.warning(
                        "no newline within %d characters of an opening fence; stripping it in place",
                        PREFIX_DETECTION_WINDOW,
                    )
                match = _OPENING_FENCE.match(buffer)
                if match is not None:
                    self._buffer = buffer[match.end() :]
                    self._prefix_stripped = True
                self._phase = _Phase.STREAMING
            return

        if len(buffer) >= len(FENCE):
            # one or two literal backticks, not a fence
            self._phase = _Phase.STREAMING


def extract_json_middleware(
    options: ExtractJSONOptions | None = None,
    /,
    *,
    transform: Callable[[str], str] | None = None,
) -> LanguageModelMiddleware:
    """Return middleware stripping code fences from text output.

    Without a custom ``transform`` the default removes a leading
    ```` ```json ```` (or bare ```` ``` ````) line and a trailing ```` ``` ````
    line and trims surrounding whitespace.
    """

    custom = transform if transform is not None else (options.transform if options else None)
    apply = custom or default_json_transform

    async def wrap_generate(
        do_generate: GenerateThunk,
        do_stream: StreamThunk,
        params: GenerateParams,
        model: LanguageModel,
    ) -> GenerateResult:
        result = await do_generate()
        return dataclasses.replace(result, text=apply(result.text))

    async def wrap_stream(
        do_generate: GenerateThunk,
        do_stream: StreamThunk,
        params: GenerateParams,
        model: LanguageModel,
    ) -> ChunkStream:
        stream = await do_stream()
        return TransformedStream(stream, FenceExtractor(custom))

    return LanguageModelMiddleware(
        wrap_generate=wrap_generate,
        wrap_stream=wrap_stream,
        name="extract_json",
    )


__all__ = [
    "FenceExtractor",
    "PREFIX_DETECTION_WINDOW",
    "SUFFIX_BUFFER_SIZE",
    "default_json_transform",
    "extract_json_middleware",
]
