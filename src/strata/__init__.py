"""Composable middleware for language model adapters.

The package exposes a small capability surface implemented by model backends
(:class:`~strata.core.model.LanguageModel`), a canonical stream chunk schema,
and a middleware layer that wraps any model without modifying it. The built-in
middleware split in-band reasoning tags into their own channel, strip code
fences from structured output, and serve stream calls from single-shot results.
"""

from __future__ import annotations

from .config import ExtractJSONOptions, ExtractReasoningOptions, ToolExamplesOptions
from .core import (
    ChunkStream,
    FinishReason,
    GenerateParams,
    GenerateResult,
    LanguageModel,
    StreamChunk,
    Usage,
)
from .middleware import (
    LanguageModelMiddleware,
    extract_json_middleware,
    extract_reasoning_middleware,
    middleware_from_config,
    simulate_streaming_middleware,
    wrap_language_model,
    wrap_provider,
)

__all__ = [
    "ChunkStream",
    "ExtractJSONOptions",
    "ExtractReasoningOptions",
    "FinishReason",
    "GenerateParams",
    "GenerateResult",
    "LanguageModel",
    "LanguageModelMiddleware",
    "StreamChunk",
    "ToolExamplesOptions",
    "Usage",
    "extract_json_middleware",
    "extract_reasoning_middleware",
    "middleware_from_config",
    "simulate_streaming_middleware",
    "wrap_language_model",
    "wrap_provider",
]

__version__ = "0.1.0"
