"""Compose middleware around language models and providers."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..core.message import GenerateResult
from ..core.model import LanguageModel, Provider
from ..core.params import GenerateParams
from ..core.stream import ChunkStream
from .base import CallType, LanguageModelMiddleware


LOGGER = logging.getLogger(__name__)


class WrappedLanguageModel(LanguageModel):
    """A model delegating to ``model`` through a single middleware layer."""

    def __init__(
        self,
        model: LanguageModel,
        middleware: LanguageModelMiddleware,
        *,
        model_id: str | None = None,
        provider: str | None = None,
    ) -> None:
        self._model = model
        self._middleware = middleware
        self._model_id_override = model_id
        self._provider_override = provider

    @property
    def model(self) -> LanguageModel:
        """The next layer down the chain."""

        return self._model

    @property
    def middleware(self) -> LanguageModelMiddleware:
        return self._middleware

    @property
    def provider(self) -> str:
        if self._provider_override is not None:
            return self._provider_override
        if self._middleware.override_provider is not None:
            return self._middleware.override_provider(self._model)
        return self._model.provider

    @property
    def model_id(self) -> str:
        if self._model_id_override is not None:
            return self._model_id_override
        if self._middleware.override_model_id is not None:
            return self._middleware.override_model_id(self._model)
        return self._model.model_id

    @property
    def supports_tools(self) -> bool:
        return self._model.supports_tools

    @property
    def supports_structured_output(self) -> bool:
        return self._model.supports_structured_output

    @property
    def supports_image_input(self) -> bool:
        return self._model.supports_image_input

    async def do_generate(self, params: GenerateParams) -> GenerateResult:
        transformed = await self._transform_params("generate", params)

        async def do_generate() -> GenerateResult:
            return await self._model.do_generate(transformed)

        async def do_stream() -> ChunkStream:
            return await self._model.do_stream(transformed)

        if self._middleware.wrap_generate is None:
            return await do_generate()

        LOGGER.debug("wrap_generate via %s", self._middleware.name)
        return await self._middleware.wrap_generate(do_generate, do_stream, transformed, self._model)

    async def do_stream(self, params: GenerateParams) -> ChunkStream:
        transformed = await self._transform_params("stream", params)

        async def do_generate() -> GenerateResult:
            return await self._model.do_generate(transformed)

        async def do_stream() -> ChunkStream:
            return await self._model.do_stream(transformed)

        if self._middleware.wrap_stream is None:
            return await do_stream()

        LOGGER.debug("wrap_stream via %s", self._middleware.name)
        return await self._middleware.wrap_stream(do_generate, do_stream, transformed, self._model)

    async def _transform_params(self, call_type: CallType, params: GenerateParams) -> GenerateParams:
        transform = self._middleware.transform_params
        if transform is None:
            return params
        LOGGER.debug("transform_params(%s) via %s", call_type, self._middleware.name)
        return await transform(call_type, params, self._model)

    def __repr__(self) -> str:
        return f"WrappedLanguageModel({self._middleware.name!r}, model={self._model!r})"


def wrap_language_model(
    model: LanguageModel,
    middleware: Sequence[LanguageModelMiddleware],
    *,
    model_id: str | None = None,
    provider: str | None = None,
) -> LanguageModel:
    """Wrap ``model`` with ``middleware``.

    The first middleware is the outermost layer: it transforms parameters
    first and its wrap hooks see everything the later middleware do. The last
    middleware sits directly around ``model``. ``model_id`` and ``provider``
    take precedence over any middleware override at every layer.

    An empty ``middleware`` sequence returns ``model`` itself.
    """

    if not middleware:
        return model

    wrapped = model
    for layer in reversed(middleware):
        wrapped = WrappedLanguageModel(wrapped, layer, model_id=model_id, provider=provider)

    LOGGER.debug("wrapped %r with %d middleware", model, len(middleware))
    return wrapped


class WrappedProvider:
    """Provider that applies middleware to every language model it returns."""

    def __init__(self, provider: Provider, middleware: Sequence[LanguageModelMiddleware]) -> None:
        self._provider = provider
        self._middleware = tuple(middleware)

    @property
    def name(self) -> str:
        return self._provider.name

    def language_model(self, model_id: str) -> LanguageModel:
        return wrap_language_model(self._provider.language_model(model_id), self._middleware)


def wrap_provider(provider: Provider, middleware: Sequence[LanguageModelMiddleware]) -> Provider:
    """Return ``provider`` with ``middleware`` applied to its language models."""

    if not middleware:
        return provider
    return WrappedProvider(provider, middleware)


__all__ = [
    "WrappedLanguageModel",
    "WrappedProvider",
    "wrap_language_model",
    "wrap_provider",
]
