from __future__ import annotations

import pytest
from pydantic import ValidationError

from strata.core.message import MessageRole
from strata.core.params import ChatMessage, GenerateParams, Tool, ToolChoice


def test_only_explicit_fields_are_recorded() -> None:
    params = GenerateParams(prompt="hi", temperature=None)
    assert params.model_fields_set == {"prompt", "temperature"}


def test_messages_are_validated() -> None:
    params = GenerateParams.model_validate({"messages": [{"role": "user", "content": "hi"}]})
    assert params.messages == [ChatMessage(role=MessageRole.USER, content="hi")]


@pytest.mark.parametrize(
    "payload",
    [
        {"temperature": -0.1},
        {"max_tokens": 0},
        {"top_p": 1.5},
        {"unexpected": True},
        {"tool_choice": {"type": "sometimes"}},
        {"tools": [{"name": ""}]},
    ],
)
def test_invalid_params_are_rejected(payload) -> None:
    with pytest.raises(ValidationError):
        GenerateParams.model_validate(payload)


def test_params_are_frozen() -> None:
    params = GenerateParams(prompt="a")
    with pytest.raises(ValidationError):
        params.prompt = "b"  # type: ignore[misc]


def test_tool_defaults() -> None:
    tool = Tool(name="clock")
    assert tool.description is None
    assert tool.parameters == {}
    assert tool.input_examples == []
    assert ToolChoice().type == "auto"


def test_nested_json_values_are_accepted() -> None:
    tool = Tool(name="lookup", parameters={"a": {"b": [1, 2.5, None, True, "x"]}})
    assert tool.parameters == {"a": {"b": [1, 2.5, None, True, "x"]}}

    params = GenerateParams(tools=[tool], provider_options={"acme": {"mode": ["fast"]}})
    assert params.provider_options["acme"]["mode"] == ["fast"]


def test_non_json_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        Tool(name="clock", parameters={"a": object()})
