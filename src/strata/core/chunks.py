"""Canonical stream chunk schema.

Every incremental source yields these chunks in the following order: text and
reasoning chunks for the response, then any tool calls, one usage chunk and a
single terminal finish chunk. An error chunk may appear at any point and ends
the stream.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .message import FinishReason, ToolCall, Usage


class ChunkType(str, Enum):
    """Discriminator exposed by every chunk class."""

    TEXT = "text"
    REASONING = "reasoning"
    TOOL_CALL = "tool-call"
    USAGE = "usage"
    FINISH = "finish"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class TextChunk:
    """Fragment of answer text."""

    text: str

    @property
    def type(self) -> ChunkType:
        return ChunkType.TEXT


@dataclass(frozen=True, slots=True)
class ReasoningChunk:
    """Fragment of reasoning text, kept apart from the answer."""

    text: str

    @property
    def type(self) -> ChunkType:
        return ChunkType.REASONING


@dataclass(frozen=True, slots=True)
class ToolCallChunk:
    """Complete tool invocation requested by the model."""

    tool_call: ToolCall

    @property
    def type(self) -> ChunkType:
        return ChunkType.TOOL_CALL


@dataclass(frozen=True, slots=True)
class UsageChunk:
    """Token accounting for the response."""

    usage: Usage

    @property
    def type(self) -> ChunkType:
        return ChunkType.USAGE


@dataclass(frozen=True, slots=True)
class FinishChunk:
    """Terminal chunk of a successful stream."""

    finish_reason: FinishReason = FinishReason.STOP
    usage: Usage = field(default_factory=Usage)

    @property
    def type(self) -> ChunkType:
        return ChunkType.FINISH


@dataclass(frozen=True, slots=True)
class ErrorChunk:
    """In-band failure reported by the producer; ends the stream."""

    error: BaseException

    @property
    def type(self) -> ChunkType:
        return ChunkType.ERROR


StreamChunk = Union[TextChunk, ReasoningChunk, ToolCallChunk, UsageChunk, FinishChunk, ErrorChunk]

CHUNK_CLASSES = (TextChunk, ReasoningChunk, ToolCallChunk, UsageChunk, FinishChunk, ErrorChunk)


def is_terminal(chunk: StreamChunk) -> bool:
    """Return whether ``chunk`` ends a stream."""

    return isinstance(chunk, (FinishChunk, ErrorChunk))


__all__ = [
    "CHUNK_CLASSES",
    "ChunkType",
    "ErrorChunk",
    "FinishChunk",
    "ReasoningChunk",
    "StreamChunk",
    "TextChunk",
    "ToolCallChunk",
    "UsageChunk",
    "is_terminal",
]
