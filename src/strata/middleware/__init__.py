"""Middleware descriptors, composition and the built-in middleware."""

from __future__ import annotations

from .base import CallType, LanguageModelMiddleware
from .defaults import default_settings_middleware
from .factory import middleware_from_config
from .fence import FenceExtractor, default_json_transform, extract_json_middleware
from .observe import logging_middleware
from .reasoning import (
    ReasoningExtractor,
    extract_reasoning,
    extract_reasoning_middleware,
    get_potential_start_index,
)
from .simulate import SimulatedStream, result_to_chunks, simulate_streaming_middleware
from .tool_examples import add_tool_input_examples_middleware
from .transform import TextTransformer, TransformedStream
from .wrap import WrappedLanguageModel, WrappedProvider, wrap_language_model, wrap_provider

__all__ = [
    "CallType",
    "FenceExtractor",
    "LanguageModelMiddleware",
    "ReasoningExtractor",
    "SimulatedStream",
    "TextTransformer",
    "TransformedStream",
    "WrappedLanguageModel",
    "WrappedProvider",
    "add_tool_input_examples_middleware",
    "default_json_transform",
    "default_settings_middleware",
    "extract_json_middleware",
    "extract_reasoning",
    "extract_reasoning_middleware",
    "get_potential_start_index",
    "logging_middleware",
    "middleware_from_config",
    "result_to_chunks",
    "simulate_streaming_middleware",
    "wrap_language_model",
    "wrap_provider",
]
