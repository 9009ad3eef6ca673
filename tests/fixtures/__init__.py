"""Deterministic models and providers used across the test-suite."""

from .fake_model import FakeLanguageModel, FakeProvider

__all__ = ["FakeLanguageModel", "FakeProvider"]
