"""Middleware descriptor applied around language models."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

from ..core.message import GenerateResult
from ..core.model import LanguageModel
from ..core.params import GenerateParams
from ..core.stream import ChunkStream

CallType = Literal["generate", "stream"]

GenerateThunk = Callable[[], Awaitable[GenerateResult]]
StreamThunk = Callable[[], Awaitable[ChunkStream]]

TransformParams = Callable[[CallType, GenerateParams, LanguageModel], Awaitable[GenerateParams]]
WrapGenerate = Callable[
    [GenerateThunk, StreamThunk, GenerateParams, LanguageModel], Awaitable[GenerateResult]
]
WrapStream = Callable[
    [GenerateThunk, StreamThunk, GenerateParams, LanguageModel], Awaitable[ChunkStream]
]
OverrideName = Callable[[LanguageModel], str]


@dataclass(frozen=True, slots=True)
class LanguageModelMiddleware:
    """Bundle of optional hooks intercepting calls to a model.

    Attributes
    ----------
    transform_params:
        ``await transform_params(call_type, params, model)`` returns the
        parameters handed to the model. Runs before either wrap hook.
    wrap_generate:
        ``await wrap_generate(do_generate, do_stream, params, model)`` replaces
        the single-shot call. ``do_generate``/``do_stream`` are zero-argument
        coroutine functions calling the next layer with the transformed params.
    wrap_stream:
        Same shape as ``wrap_generate`` but for incremental calls; must return
        a :class:`~strata.core.stream.ChunkStream`.
    override_provider / override_model_id:
        Compute the metadata reported by the wrapped model from the next layer.
    name:
        Label used in logs and reprs.

    Every field is optional; a missing hook passes the call through unchanged.
    Descriptors hold no per-call state and can be shared freely.
    """

    transform_params: TransformParams | None = None
    wrap_generate: WrapGenerate | None = None
    wrap_stream: WrapStream | None = None
    override_provider: OverrideName | None = None
    override_model_id: OverrideName | None = None
    name: str = "middleware"


__all__ = [
    "CallType",
    "GenerateThunk",
    "LanguageModelMiddleware",
    "OverrideName",
    "StreamThunk",
    "TransformParams",
    "WrapGenerate",
    "WrapStream",
]
