"""Test harness utilities for middleware validation."""

from .stream_harness import collect, collect_stream, split_points, splits

__all__ = [
    "collect",
    "collect_stream",
    "split_points",
    "splits",
]
