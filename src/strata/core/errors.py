"""Custom exception types used by strata."""

from __future__ import annotations


class StrataError(RuntimeError):
    """Base class for every error raised by strata itself."""


class AdapterError(StrataError):
    """Raised when a model or adapter cannot fulfil a request."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class AdapterStreamError(AdapterError):
    """Raised when a chunk stream is misused or yields an invalid chunk."""


class MiddlewareConfigError(StrataError, ValueError):
    """Raised when middleware options or configuration entries are invalid."""


__all__ = [
    "AdapterError",
    "AdapterStreamError",
    "MiddlewareConfigError",
    "StrataError",
]
