from __future__ import annotations

import dataclasses

import pytest

from strata.config import (
    DEFAULT_EXAMPLES_PREFIX,
    ExtractJSONOptions,
    ExtractReasoningOptions,
    ToolExamplesOptions,
)
from strata.core.errors import MiddlewareConfigError


def test_reasoning_defaults() -> None:
    options = ExtractReasoningOptions()
    assert options.tag_name == "think"
    assert options.separator == "\n"
    assert options.start_with_reasoning is False
    assert options.opening_tag == "<think>"
    assert options.closing_tag == "</think>"


def test_empty_separator_falls_back_to_newline() -> None:
    assert ExtractReasoningOptions(separator="").separator == "\n"


@pytest.mark.parametrize("tag_name", ["", "   ", "<think>", "a/b"])
def test_invalid_tag_names(tag_name: str) -> None:
    with pytest.raises(MiddlewareConfigError):
        ExtractReasoningOptions(tag_name=tag_name)


def test_reasoning_options_are_frozen() -> None:
    options = ExtractReasoningOptions()
    with pytest.raises(dataclasses.FrozenInstanceError):
        options.tag_name = "other"  # type: ignore[misc]


def test_reasoning_from_mapping() -> None:
    options = ExtractReasoningOptions.from_mapping({"tag_name": "reason", "start_with_reasoning": True})
    assert options.closing_tag == "</reason>"
    assert options.start_with_reasoning

    with pytest.raises(MiddlewareConfigError, match="unknown ExtractReasoningOptions option"):
        ExtractReasoningOptions.from_mapping({"tagname": "x"})


def test_json_transform_must_be_callable() -> None:
    assert ExtractJSONOptions(transform=str.strip).transform is str.strip
    with pytest.raises(MiddlewareConfigError):
        ExtractJSONOptions(transform="strip")  # type: ignore[arg-type]


def test_tool_examples_options() -> None:
    assert ToolExamplesOptions(prefix="").prefix == DEFAULT_EXAMPLES_PREFIX
    assert ToolExamplesOptions.from_mapping({"remove": False}).remove is False
    with pytest.raises(MiddlewareConfigError):
        ToolExamplesOptions(format=42)  # type: ignore[arg-type]
