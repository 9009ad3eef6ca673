"""Core data structures and model interfaces for strata."""

from __future__ import annotations

from .chunks import (
    ChunkType,
    ErrorChunk,
    FinishChunk,
    ReasoningChunk,
    StreamChunk,
    TextChunk,
    ToolCallChunk,
    UsageChunk,
)
from .errors import AdapterError, AdapterStreamError, MiddlewareConfigError, StrataError
from .message import FinishReason, GenerateResult, MessageRole, ToolCall, Usage
from .model import LanguageModel, Provider
from .params import ChatMessage, GenerateParams, ResponseFormat, Tool, ToolChoice, ToolInputExample
from .stream import ChunkStream, ListChunkStream, collect_chunks, join_reasoning, join_text, text_stream

__all__ = [
    "AdapterError",
    "AdapterStreamError",
    "ChatMessage",
    "ChunkStream",
    "ChunkType",
    "ErrorChunk",
    "FinishChunk",
    "FinishReason",
    "GenerateParams",
    "GenerateResult",
    "LanguageModel",
    "ListChunkStream",
    "MessageRole",
    "MiddlewareConfigError",
    "Provider",
    "ReasoningChunk",
    "ResponseFormat",
    "StrataError",
    "StreamChunk",
    "TextChunk",
    "Tool",
    "ToolCall",
    "ToolCallChunk",
    "ToolChoice",
    "ToolInputExample",
    "Usage",
    "UsageChunk",
    "collect_chunks",
    "join_reasoning",
    "join_text",
    "text_stream",
]
