"""Result types shared by models, streams and middleware."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
import json
import math
from types import MappingProxyType
from typing import Any


class MessageRole(str, Enum):
    """Canonical role names for prompt messages."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class FinishReason(str, Enum):
    """Why a model stopped generating."""

    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content-filter"
    TOOL_CALLS = "tool-calls"
    ERROR = "error"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class ToolCall:
    """A tool/function invocation requested by the model."""

    id: str
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            msg = "tool call id must be a non-empty string"
            raise ValueError(msg)
        if not isinstance(self.name, str) or not self.name:
            msg = "tool call name must be a non-empty string"
            raise ValueError(msg)
        if not isinstance(self.arguments, Mapping):
            msg = "tool call arguments must be a mapping"
            raise TypeError(msg)

        plain_arguments = thaw_json(dict(self.arguments))
        _ensure_json_compatible(plain_arguments, path="ToolCall.arguments")

        sanitized = json.loads(json.dumps(plain_arguments, allow_nan=False))
        object.__setattr__(self, "arguments", _freeze_json_structure(sanitized))


@dataclass(frozen=True, slots=True)
class Usage:
    """Token accounting reported by a model call."""

    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None
    reasoning_tokens: int | None = None

    def __post_init__(self) -> None:
        for name in ("input_tokens", "output_tokens", "total_tokens", "reasoning_tokens"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"usage.{name} must be an integer when provided"
                raise TypeError(msg)
            if value < 0:
                msg = f"usage.{name} cannot be negative"
                raise ValueError(msg)

    def add(self, other: Usage) -> Usage:
        """Return the field-wise sum of two usages; missing counts are skipped."""

        return Usage(
            input_tokens=_add_optional(self.input_tokens, other.input_tokens),
            output_tokens=_add_optional(self.output_tokens, other.output_tokens),
            total_tokens=_add_optional(self.total_tokens, other.total_tokens),
            reasoning_tokens=_add_optional(self.reasoning_tokens, other.reasoning_tokens),
        )


@dataclass(frozen=True, slots=True)
class GenerateResult:
    """Outcome of a single-shot model call.

    ``reasoning`` holds reasoning text that a provider (or the reasoning
    extraction middleware) separated from the answer; it is ``None`` when no
    reasoning was produced.
    """

    text: str = ""
    reasoning: str | None = None
    tool_calls: tuple[ToolCall, ...] = ()
    finish_reason: FinishReason = FinishReason.STOP
    usage: Usage = field(default_factory=Usage)
    warnings: tuple[str, ...] = ()
    raw_response: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            msg = "result text must be a string"
            raise TypeError(msg)
        if self.reasoning is not None and not isinstance(self.reasoning, str):
            msg = "result reasoning must be a string when provided"
            raise TypeError(msg)

        if isinstance(self.tool_calls, (str, bytes, bytearray)) or not isinstance(
            self.tool_calls, Sequence
        ):
            msg = "tool_calls must be a sequence of ToolCall instances"
            raise TypeError(msg)
        calls = tuple(self.tool_calls)
        for call in calls:
            if not isinstance(call, ToolCall):
                msg = "tool_calls must contain ToolCall instances"
                raise TypeError(msg)
        object.__setattr__(self, "tool_calls", calls)
        object.__setattr__(self, "finish_reason", FinishReason(self.finish_reason))
        object.__setattr__(self, "warnings", tuple(self.warnings))


def _add_optional(left: int | None, right: int | None) -> int | None:
    if left is None:
        return right
    if right is None:
        return left
    return left + right


def _ensure_json_compatible(value: Any, *, path: str) -> None:
    if isinstance(value, Mapping):
        for key, inner in value.items():
            if not isinstance(key, str) or not key:
                msg = f"{path} keys must be non-empty strings"
                raise TypeError(msg)
            _ensure_json_compatible(inner, path=f"{path}.{key}")
        return

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        for index, item in enumerate(value):
            _ensure_json_compatible(item, path=f"{path}[{index}]")
        return

    if isinstance(value, (bool, type(None), str)):
        return

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            msg = f"{path} contains non-finite float values"
            raise ValueError(msg)
        return

    msg = f"{path} contains unsupported value type {type(value).__name__}"
    raise TypeError(msg)


def _freeze_json_structure(value: Any) -> Any:
    if isinstance(value, dict):
        frozen_dict = {key: _freeze_json_structure(inner) for key, inner in value.items()}
        return MappingProxyType(frozen_dict)

    if isinstance(value, list):
        return tuple(_freeze_json_structure(inner) for inner in value)

    return value


def thaw_json(value: Any) -> Any:
    """Convert frozen mappings and tuples back into plain dicts and lists."""

    if isinstance(value, Mapping):
        return {key: thaw_json(inner) for key, inner in value.items()}

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [thaw_json(inner) for inner in value]

    return value


__all__ = [
    "FinishReason",
    "GenerateResult",
    "MessageRole",
    "ToolCall",
    "Usage",
    "thaw_json",
]
