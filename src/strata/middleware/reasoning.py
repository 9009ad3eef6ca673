"""Split in-band reasoning tags (``<think>...</think>``) into their own channel."""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import List

from ..config import ExtractReasoningOptions
from ..core.chunks import ReasoningChunk, StreamChunk, TextChunk
from ..core.message import GenerateResult
from ..core.model import LanguageModel
from ..core.params import GenerateParams
from ..core.stream import ChunkStream
from .base import GenerateThunk, LanguageModelMiddleware, StreamThunk
from .transform import TextTransformer, TransformedStream


LOGGER = logging.getLogger(__name__)


def get_potential_start_index(text: str, searched: str) -> int | None:
    """Return where ``searched`` starts, or could still start, in ``text``.

    A complete occurrence wins. Otherwise the smallest index whose suffix of
    ``text`` is a prefix of ``searched`` is returned, since more input may
    complete the match. ``None`` means ``searched`` cannot occur in the text
    seen so far.
    """

    if not searched:
        return None

    index = text.find(searched)
    if index != -1:
        return index

    for start in range(max(0, len(text) - len(searched) + 1), len(text)):
        if searched.startswith(text[start:]):
            return start
    return None


def extract_reasoning(text: str, options: ExtractReasoningOptions) -> tuple[str, str | None]:
    """Separate tagged reasoning from ``text`` in one pass.

    Returns ``(answer, reasoning)``. ``reasoning`` joins the contents of every
    complete block with the separator and is ``None`` when no block was found,
    in which case ``answer`` is ``text`` unchanged. When a removed block had
    text on both sides, the separator is put between them.
    """

    source = options.opening_tag + text if options.start_with_reasoning else text
    pattern = re.compile(
        f"{re.escape(options.opening_tag)}(.*?){re.escape(options.closing_tag)}",
        re.DOTALL,
    )
    matches = list(pattern.finditer(source))
    if not matches:
        return text, None

    reasoning = options.separator.join(match.group(1) for match in matches)

    answer = source
    for match in reversed(matches):
        before = answer[: match.start()]
        after = answer[match.end() :]
        separator = options.separator if before and after else ""
        answer = before + separator + after
    return answer, reasoning


class ReasoningExtractor(TextTransformer):
    """Incremental reasoning tag parser.

    The extractor alternates between plain and reasoning mode. In each mode it
    looks for the tag that ends the mode, emitting text up to the earliest
    position where that tag matches or could still match. A tag split over any
    number of fragments is therefore recognised, and only a possible partial
    tag is ever held back.
    """

    def __init__(self, options: ExtractReasoningOptions) -> None:
        self._opening_tag = options.opening_tag
        self._closing_tag = options.closing_tag
        self._is_reasoning = options.start_with_reasoning
        self._buffer = ""
        self._completed_blocks = 0

    @property
    def is_reasoning(self) -> bool:
        return self._is_reasoning

    @property
    def completed_blocks(self) -> int:
        """Number of reasoning blocks closed so far."""

        return self._completed_blocks

    def push(self, text: str) -> List[StreamChunk]:
        self._buffer += text
        output: List[StreamChunk] = []

        while True:
            tag = self._closing_tag if self._is_reasoning else self._opening_tag
            start = get_potential_start_index(self._buffer, tag)

            if start is None:
                self._publish(self._buffer, output)
                self._buffer = ""
                break

            if start > 0:
                self._publish(self._buffer[:start], output)
                self._buffer = self._buffer[start:]

            if not self._buffer.startswith(tag):
                # partial tag at the tail, wait for more input
                break

            self._buffer = self._buffer[len(tag) :]
            if self._is_reasoning:
                self._completed_blocks += 1
            self._is_reasoning = not self._is_reasoning
            LOGGER.debug("reasoning extractor switched to %s mode", "reasoning" if self._is_reasoning else "text")

        return output

    def flush(self) -> List[StreamChunk]:
        output: List[StreamChunk] = []
        if self._buffer:
            LOGGER.debug("reasoning extractor flushing %d buffered characters", len(self._buffer))
            self._publish(self._buffer, output)
            self._buffer = ""
        return output

    def _publish(self, text: str, output: List[StreamChunk]) -> None:
        if not text:
            return
        if self._is_reasoning:
            output.append(ReasoningChunk(text))
        else:
            output.append(TextChunk(text))


def extract_reasoning_middleware(
    options: ExtractReasoningOptions | None = None,
    /,
    *,
    tag_name: str | None = None,
    separator: str | None = None,
    start_with_reasoning: bool | None = None,
) -> LanguageModelMiddleware:
    """Return middleware moving tagged reasoning out of the answer text.

    Single-shot results get the answer in ``text`` and the joined reasoning in
    ``reasoning``. Streams turn tagged spans into
    :class:`~strata.core.chunks.ReasoningChunk` instances.

    Example::

        model = wrap_language_model(base, [extract_reasoning_middleware(tag_name="think")])
    """

    resolved = options or ExtractReasoningOptions()
    overrides = {
        key: value
        for key, value in (
            ("tag_name", tag_name),
            ("separator", separator),
            ("start_with_reasoning", start_with_reasoning),
        )
        if value is not None
    }
    if overrides:
        resolved = dataclasses.replace(resolved, **overrides)

    async def wrap_generate(
        do_generate: GenerateThunk,
        do_stream: StreamThunk,
        params: GenerateParams,
        model: LanguageModel,
    ) -> GenerateResult:
        result = await do_generate()
        answer, reasoning = extract_reasoning(result.text, resolved)
        if reasoning is None:
            return result
        if result.reasoning:
            reasoning = result.reasoning + resolved.separator + reasoning
        return dataclasses.replace(result, text=answer, reasoning=reasoning)

    async def wrap_stream(
        do_generate: GenerateThunk,
        do_stream: StreamThunk,
        params: GenerateParams,
        model: LanguageModel,
    ) -> ChunkStream:
        stream = await do_stream()
        return TransformedStream(stream, ReasoningExtractor(resolved))

    return LanguageModelMiddleware(
        wrap_generate=wrap_generate,
        wrap_stream=wrap_stream,
        name=f"extract_reasoning<{resolved.tag_name}>",
    )


__all__ = [
    "ReasoningExtractor",
    "extract_reasoning",
    "extract_reasoning_middleware",
    "get_potential_start_index",
]
