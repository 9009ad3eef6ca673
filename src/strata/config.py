"""Configuration objects for the built-in middleware."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields
from typing import Any

from .core.errors import MiddlewareConfigError
from .core.params import ToolInputExample

DEFAULT_REASONING_TAG = "think"
DEFAULT_SEPARATOR = "\n"
DEFAULT_EXAMPLES_PREFIX = "Input Examples:"


@dataclass(frozen=True, slots=True)
class ExtractReasoningOptions:
    """Options for the reasoning extraction middleware.

    Attributes
    ----------
    tag_name:
        Name of the tag delimiting reasoning, without angle brackets. ``"think"``
        matches ``<think>...</think>``.
    separator:
        Joins reasoning blocks, and the answer text around a removed block, in
        single-shot results. Streams never insert it. An empty separator falls
        back to a newline.
    start_with_reasoning:
        The response begins inside a reasoning block, so no opening tag will be
        seen before the first closing tag.
    """

    tag_name: str = DEFAULT_REASONING_TAG
    separator: str = DEFAULT_SEPARATOR
    start_with_reasoning: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.tag_name, str) or not self.tag_name.strip():
            msg = "tag_name must be a non-empty string"
            raise MiddlewareConfigError(msg)
        if any(char in self.tag_name for char in "<>/"):
            msg = "tag_name must not contain angle brackets or slashes"
            raise MiddlewareConfigError(msg)
        if not isinstance(self.separator, str):
            msg = "separator must be a string"
            raise MiddlewareConfigError(msg)
        if not self.separator:
            object.__setattr__(self, "separator", DEFAULT_SEPARATOR)

    @property
    def opening_tag(self) -> str:
        return f"<{self.tag_name}>"

    @property
    def closing_tag(self) -> str:
        return f"</{self.tag_name}>"

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ExtractReasoningOptions":
        """Build options from a plain mapping, rejecting unknown keys."""

        return cls(**_checked_kwargs(cls, values))


@dataclass(frozen=True, slots=True)
class ExtractJSONOptions:
    """Options for the fence extraction middleware.

    ``transform`` replaces the default fence stripping. With a custom transform
    streams buffer the whole text and transform it once at the end.
    """

    transform: Callable[[str], str] | None = None

    def __post_init__(self) -> None:
        if self.transform is not None and not callable(self.transform):
            msg = "transform must be callable"
            raise MiddlewareConfigError(msg)


@dataclass(frozen=True, slots=True)
class ToolExamplesOptions:
    """Options for the tool input examples middleware."""

    prefix: str = DEFAULT_EXAMPLES_PREFIX
    format: Callable[[ToolInputExample, int], str] | None = None
    remove: bool = True

    def __post_init__(self) -> None:
        if not self.prefix:
            object.__setattr__(self, "prefix", DEFAULT_EXAMPLES_PREFIX)
        if self.format is not None and not callable(self.format):
            msg = "format must be callable"
            raise MiddlewareConfigError(msg)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ToolExamplesOptions":
        return cls(**_checked_kwargs(cls, values))


def _checked_kwargs(cls: type, values: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {item.name for item in fields(cls)}
    unknown = set(values) - allowed
    if unknown:
        joined = ", ".join(sorted(unknown))
        msg = f"unknown {cls.__name__} option(s): {joined}"
        raise MiddlewareConfigError(msg)
    return dict(values)


__all__ = [
    "DEFAULT_EXAMPLES_PREFIX",
    "DEFAULT_REASONING_TAG",
    "DEFAULT_SEPARATOR",
    "ExtractJSONOptions",
    "ExtractReasoningOptions",
    "ToolExamplesOptions",
]
