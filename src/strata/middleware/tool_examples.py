"""Fold tool input examples into tool descriptions."""

from __future__ import annotations

import json

from ..config import ToolExamplesOptions
from ..core.model import LanguageModel
from ..core.params import GenerateParams, Tool, ToolInputExample
from .base import CallType, LanguageModelMiddleware


def format_example_json(example: ToolInputExample, index: int) -> str:
    """Render an example as compact JSON with sorted keys."""

    return json.dumps(example.input, separators=(",", ":"), sort_keys=True)


def describe_with_examples(tool: Tool, options: ToolExamplesOptions) -> Tool:
    """Return ``tool`` with its input examples appended to the description."""

    if not tool.input_examples:
        return tool

    formatter = options.format or format_example_json
    rendered = "\n".join(formatter(example, index) for index, example in enumerate(tool.input_examples))
    section = f"{options.prefix}\n{rendered}"
    description = f"{tool.description}\n\n{section}" if tool.description else section

    update: dict[str, object] = {"description": description}
    if options.remove:
        update["input_examples"] = []
    return tool.model_copy(update=update)


def add_tool_input_examples_middleware(options: ToolExamplesOptions | None = None) -> LanguageModelMiddleware:
    """Return middleware serialising ``input_examples`` into tool descriptions.

    Meant for providers without native support for example inputs.
    """

    resolved = options or ToolExamplesOptions()

    async def transform_params(
        call_type: CallType,
        params: GenerateParams,
        model: LanguageModel,
    ) -> GenerateParams:
        if not params.tools:
            return params
        tools = [describe_with_examples(tool, resolved) for tool in params.tools]
        return params.model_copy(update={"tools": tools})

    return LanguageModelMiddleware(transform_params=transform_params, name="add_tool_input_examples")


__all__ = [
    "add_tool_input_examples_middleware",
    "describe_with_examples",
    "format_example_json",
]
