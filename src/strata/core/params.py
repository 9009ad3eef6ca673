"""Request parameter schemas passed through the middleware chain."""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from .message import MessageRole


class ChatMessage(BaseModel):
    """A single prompt message."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    role: MessageRole = Field(..., description="Author of the message.")
    content: str = Field(..., description="Plain text content of the message.")


class ToolInputExample(BaseModel):
    """Example arguments illustrating how a tool should be called."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    input: Dict[str, JsonValue] = Field(..., description="Example tool arguments.")


class Tool(BaseModel):
    """Function tool the model may call."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1, description="Unique tool name.")
    description: str | None = Field(None, description="Human-readable description shown to the model.")
    parameters: Dict[str, JsonValue] = Field(default_factory=dict, description="JSON schema for the arguments.")
    input_examples: List[ToolInputExample] = Field(default_factory=list, description="Example invocations.")


class ToolChoice(BaseModel):
    """Strategy controlling whether and which tool the model must call."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["auto", "none", "required", "tool"] = Field("auto", description="Tool selection mode.")
    tool_name: str | None = Field(None, description="Tool to force when type is 'tool'.")


class ResponseFormat(BaseModel):
    """Requested shape of the response (plain text or JSON)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["text", "json"] = Field("text", description="Response format kind.")
    json_schema: Dict[str, JsonValue] | None = Field(None, description="Schema the JSON response should follow.")
    name: str | None = Field(None, description="Optional name of the output, used as provider guidance.")
    description: str | None = Field(None, description="Optional description of the expected output.")


class GenerateParams(BaseModel):
    """Parameters for a single generate or stream call.

    Only fields explicitly provided by the caller are recorded in
    ``model_fields_set``; the default-settings middleware relies on this to
    tell an intentional value from an omitted one.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    prompt: str | None = Field(None, description="Plain text prompt.")
    system: str | None = Field(None, description="System instruction.")
    messages: List[ChatMessage] = Field(default_factory=list, description="Conversation history.")
    temperature: float | None = Field(None, ge=0, description="Sampling temperature.")
    max_tokens: int | None = Field(None, gt=0, description="Maximum number of output tokens.")
    top_p: float | None = Field(None, ge=0, le=1, description="Nucleus sampling mass.")
    top_k: int | None = Field(None, gt=0, description="Top-k sampling cutoff.")
    frequency_penalty: float | None = Field(None, description="Penalty for repeated tokens.")
    presence_penalty: float | None = Field(None, description="Penalty encouraging new topics.")
    stop_sequences: List[str] | None = Field(None, description="Sequences that stop generation.")
    seed: int | None = Field(None, description="Seed for deterministic sampling.")
    tools: List[Tool] | None = Field(None, description="Tools available to the model.")
    tool_choice: ToolChoice | None = Field(None, description="Tool selection strategy.")
    response_format: ResponseFormat | None = Field(None, description="Requested response format.")
    headers: Dict[str, str] | None = Field(None, description="Extra transport headers.")
    max_steps: int | None = Field(None, gt=0, description="Maximum automatic tool-call steps.")
    provider_options: Dict[str, JsonValue] = Field(default_factory=dict, description="Provider-specific options.")


def merge_params(defaults: GenerateParams | None, overrides: GenerateParams | None) -> GenerateParams:
    """Layer ``overrides`` on top of ``defaults``.

    A field from ``overrides`` wins when the caller set it to something other
    than ``None``. Headers are merged key by key with ``overrides`` winning.
    """

    if defaults is None:
        return overrides if overrides is not None else GenerateParams()
    if overrides is None:
        return defaults

    update = {
        name: getattr(overrides, name)
        for name in overrides.model_fields_set
        if getattr(overrides, name) is not None
    }
    if defaults.headers and overrides.headers:
        update["headers"] = {**defaults.headers, **overrides.headers}
    return defaults.model_copy(update=update)


__all__ = [
    "ChatMessage",
    "GenerateParams",
    "ResponseFormat",
    "Tool",
    "ToolChoice",
    "ToolInputExample",
    "merge_params",
]
