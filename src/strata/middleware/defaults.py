"""Apply default call settings underneath per-call parameters."""

from __future__ import annotations

from ..core.model import LanguageModel
from ..core.params import GenerateParams, merge_params
from .base import CallType, LanguageModelMiddleware


def default_settings_middleware(settings: GenerateParams) -> LanguageModelMiddleware:
    """Return middleware filling unset call parameters from ``settings``.

    Values set on the call always win; headers are merged key by key.
    """

    async def transform_params(
        call_type: CallType,
        params: GenerateParams,
        model: LanguageModel,
    ) -> GenerateParams:
        return merge_params(settings, params)

    return LanguageModelMiddleware(transform_params=transform_params, name="default_settings")


__all__ = ["default_settings_middleware"]
