"""Capability surface shared by model backends and wrapped models."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from .message import GenerateResult
from .params import GenerateParams
from .stream import ChunkStream


class LanguageModel(ABC):
    """Abstract interface implemented by backends and by middleware wrappers.

    Implementations expose static metadata (``provider``, ``model_id`` and the
    capability flags) and two coroutines: :meth:`do_generate` for a single-shot
    call and :meth:`do_stream` for an incremental call. Instances must not keep
    per-call mutable state so that one model can serve concurrent calls.
    """

    @property
    @abstractmethod
    def provider(self) -> str:
        """Provider name, e.g. ``"openai"``."""

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Provider-specific model identifier."""

    @property
    def supports_tools(self) -> bool:
        return False

    @property
    def supports_structured_output(self) -> bool:
        return False

    @property
    def supports_image_input(self) -> bool:
        return False

    @abstractmethod
    async def do_generate(self, params: GenerateParams) -> GenerateResult:
        """Run a single-shot call and return the complete result."""

    @abstractmethod
    async def do_stream(self, params: GenerateParams) -> ChunkStream:
        """Start an incremental call and return its chunk stream."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.provider!r}, model_id={self.model_id!r})"


@runtime_checkable
class Provider(Protocol):
    """Source of language models, keyed by model id."""

    @property
    def name(self) -> str:
        """Provider name."""

    def language_model(self, model_id: str) -> LanguageModel:
        """Return the language model registered under ``model_id``."""


__all__ = ["LanguageModel", "Provider"]
