"""Build middleware stacks from plain configuration data."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from ..config import ExtractJSONOptions, ExtractReasoningOptions, ToolExamplesOptions
from ..core.errors import MiddlewareConfigError
from ..core.params import GenerateParams
from .base import LanguageModelMiddleware
from .defaults import default_settings_middleware
from .fence import extract_json_middleware
from .observe import logging_middleware
from .reasoning import extract_reasoning_middleware
from .simulate import simulate_streaming_middleware
from .tool_examples import add_tool_input_examples_middleware


def _build_extract_reasoning(values: Mapping[str, Any]) -> LanguageModelMiddleware:
    return extract_reasoning_middleware(ExtractReasoningOptions.from_mapping(values))


def _build_extract_json(values: Mapping[str, Any]) -> LanguageModelMiddleware:
    _reject_unknown("extract_json", values, {"transform"})
    return extract_json_middleware(ExtractJSONOptions(transform=values.get("transform")))


def _build_simulate_streaming(values: Mapping[str, Any]) -> LanguageModelMiddleware:
    _reject_unknown("simulate_streaming", values, set())
    return simulate_streaming_middleware()


def _build_default_settings(values: Mapping[str, Any]) -> LanguageModelMiddleware:
    try:
        settings = GenerateParams.model_validate(dict(values))
    except ValidationError as exc:
        msg = f"invalid default_settings: {exc.error_count()} validation error(s)"
        raise MiddlewareConfigError(msg) from exc
    return default_settings_middleware(settings)


def _build_tool_examples(values: Mapping[str, Any]) -> LanguageModelMiddleware:
    return add_tool_input_examples_middleware(ToolExamplesOptions.from_mapping(values))


def _build_logging(values: Mapping[str, Any]) -> LanguageModelMiddleware:
    _reject_unknown("logging", values, {"logger"})
    logger_name = values.get("logger")
    if logger_name is not None and not isinstance(logger_name, str):
        msg = "logging.logger must be a logger name"
        raise MiddlewareConfigError(msg)
    return logging_middleware(logging.getLogger(logger_name) if logger_name else None)


BUILDERS: dict[str, Callable[[Mapping[str, Any]], LanguageModelMiddleware]] = {
    "extract_reasoning": _build_extract_reasoning,
    "extract_json": _build_extract_json,
    "simulate_streaming": _build_simulate_streaming,
    "default_settings": _build_default_settings,
    "add_tool_input_examples": _build_tool_examples,
    "logging": _build_logging,
}


def middleware_from_config(entries: Iterable[Mapping[str, Any]]) -> list[LanguageModelMiddleware]:
    """Build middleware from mappings such as ``{"type": "extract_reasoning", "tag_name": "think"}``.

    Order is preserved, so the first entry becomes the outermost layer once
    passed to :func:`~strata.middleware.wrap.wrap_language_model`.
    """

    middleware: list[LanguageModelMiddleware] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            msg = f"middleware[{index}] must be a mapping"
            raise MiddlewareConfigError(msg)
        values = dict(entry)
        kind = values.pop("type", None)
        builder = BUILDERS.get(kind) if isinstance(kind, str) else None
        if builder is None:
            msg = f"middleware[{index}] has unknown type {kind!r}"
            raise MiddlewareConfigError(msg)
        middleware.append(builder(values))
    return middleware


def _reject_unknown(kind: str, values: Mapping[str, Any], allowed: set[str]) -> None:
    unknown = set(values) - allowed
    if unknown:
        joined = ", ".join(sorted(unknown))
        msg = f"unknown {kind} option(s): {joined}"
        raise MiddlewareConfigError(msg)


__all__ = ["BUILDERS", "middleware_from_config"]
