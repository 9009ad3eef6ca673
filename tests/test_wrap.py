from __future__ import annotations

import asyncio
from typing import List

import pytest

from strata.core.chunks import FinishChunk, TextChunk
from strata.core.message import GenerateResult
from strata.core.model import LanguageModel, Provider
from strata.core.params import GenerateParams
from strata.core.stream import ChunkStream, ListChunkStream, join_text
from strata.middleware import (
    LanguageModelMiddleware,
    WrappedLanguageModel,
    wrap_language_model,
    wrap_provider,
)
from strata.middleware.base import CallType

from tests.fixtures import FakeLanguageModel, FakeProvider
from tests.harness import collect, collect_stream


def recording_middleware(name: str, log: List[str]) -> LanguageModelMiddleware:
    async def transform_params(call_type: CallType, params: GenerateParams, model: LanguageModel) -> GenerateParams:
        log.append(name)
        return params

    return LanguageModelMiddleware(transform_params=transform_params, name=name)


def test_empty_middleware_returns_model_itself() -> None:
    model = FakeLanguageModel()
    assert wrap_language_model(model, []) is model


def test_first_middleware_transforms_first() -> None:
    log: List[str] = []
    model = wrap_language_model(
        FakeLanguageModel(result=GenerateResult(text="ok")),
        [recording_middleware("A", log), recording_middleware("B", log)],
    )

    asyncio.run(model.do_generate(GenerateParams(prompt="hi")))
    assert log == ["A", "B"]

    log.clear()
    collect(model)
    assert log == ["A", "B"]


def test_wrap_hooks_nest_outermost_first() -> None:
    events: List[str] = []

    def tracing(name: str) -> LanguageModelMiddleware:
        async def wrap_generate(do_generate, do_stream, params, model):
            events.append(f"{name}:before")
            result = await do_generate()
            events.append(f"{name}:after")
            return result

        return LanguageModelMiddleware(wrap_generate=wrap_generate, name=name)

    model = wrap_language_model(FakeLanguageModel(), [tracing("outer"), tracing("inner")])
    asyncio.run(model.do_generate(GenerateParams()))
    assert events == ["outer:before", "inner:before", "inner:after", "outer:after"]


def test_transformed_params_reach_model_and_hooks() -> None:
    seen: List[GenerateParams] = []

    async def transform_params(call_type, params, model):
        return params.model_copy(update={"temperature": 0.2})

    async def wrap_generate(do_generate, do_stream, params, model):
        seen.append(params)
        return await do_generate()

    base = FakeLanguageModel()
    model = wrap_language_model(
        base,
        [LanguageModelMiddleware(transform_params=transform_params, wrap_generate=wrap_generate)],
    )
    asyncio.run(model.do_generate(GenerateParams(prompt="hi")))

    assert seen[0].temperature == 0.2
    call_type, params = base.calls[0]
    assert call_type == "generate"
    assert params.temperature == 0.2
    assert params.prompt == "hi"


def test_transform_receives_call_type() -> None:
    kinds: List[str] = []

    async def transform_params(call_type, params, model):
        kinds.append(call_type)
        return params

    model = wrap_language_model(
        FakeLanguageModel.streaming_text("x"),
        [LanguageModelMiddleware(transform_params=transform_params)],
    )
    asyncio.run(model.do_generate(GenerateParams()))
    collect(model)
    assert kinds == ["generate", "stream"]


def test_transform_failure_short_circuits() -> None:
    async def transform_params(call_type, params, model):
        raise ValueError("rejected")

    base = FakeLanguageModel()
    model = wrap_language_model(base, [LanguageModelMiddleware(transform_params=transform_params)])

    with pytest.raises(ValueError, match="rejected"):
        asyncio.run(model.do_generate(GenerateParams()))
    with pytest.raises(ValueError, match="rejected"):
        asyncio.run(model.do_stream(GenerateParams()))
    assert base.calls == []


def test_wrap_generate_may_use_stream_thunk() -> None:
    async def wrap_generate(do_generate, do_stream, params, model) -> GenerateResult:
        stream = await do_stream()
        chunks = [chunk async for chunk in stream]
        return GenerateResult(text=join_text(chunks))

    base = FakeLanguageModel.streaming_text("hel", "lo")
    model = wrap_language_model(base, [LanguageModelMiddleware(wrap_generate=wrap_generate)])

    result = asyncio.run(model.do_generate(GenerateParams()))
    assert result.text == "hello"
    assert [kind for kind, _ in base.calls] == ["stream"]


def test_wrap_stream_may_replace_stream() -> None:
    async def wrap_stream(do_generate, do_stream, params, model) -> ChunkStream:
        return ListChunkStream([TextChunk("replaced"), FinishChunk()])

    base = FakeLanguageModel.streaming_text("original")
    model = wrap_language_model(base, [LanguageModelMiddleware(wrap_stream=wrap_stream)])

    chunks = collect(model)
    assert join_text(chunks) == "replaced"
    assert base.calls == []


def test_metadata_delegates_by_default() -> None:
    base = FakeLanguageModel(provider="acme", model_id="m-1", supports_tools=True)
    model = wrap_language_model(base, [LanguageModelMiddleware()])

    assert model.provider == "acme"
    assert model.model_id == "m-1"
    assert model.supports_tools is True
    assert model.supports_image_input is False


def test_middleware_overrides_metadata() -> None:
    middleware = LanguageModelMiddleware(
        override_provider=lambda model: f"{model.provider}+cache",
        override_model_id=lambda model: f"{model.model_id}-cached",
    )
    model = wrap_language_model(FakeLanguageModel(provider="acme", model_id="m-1"), [middleware])

    assert model.provider == "acme+cache"
    assert model.model_id == "m-1-cached"


def test_explicit_metadata_wins_over_middleware() -> None:
    middleware = LanguageModelMiddleware(
        override_provider=lambda model: "from-middleware",
        override_model_id=lambda model: "from-middleware",
    )
    model = wrap_language_model(
        FakeLanguageModel(),
        [middleware],
        model_id="explicit-id",
        provider="explicit-provider",
    )

    assert model.provider == "explicit-provider"
    assert model.model_id == "explicit-id"


def test_outer_override_sees_inner_override() -> None:
    inner = LanguageModelMiddleware(override_model_id=lambda model: model.model_id + "-inner")
    outer = LanguageModelMiddleware(override_model_id=lambda model: model.model_id + "-outer")
    model = wrap_language_model(FakeLanguageModel(model_id="base"), [outer, inner])

    assert model.model_id == "base-inner-outer"


def test_wrapped_model_chain_structure() -> None:
    first = LanguageModelMiddleware(name="first")
    second = LanguageModelMiddleware(name="second")
    base = FakeLanguageModel()
    model = wrap_language_model(base, [first, second])

    assert isinstance(model, WrappedLanguageModel)
    assert model.middleware is first
    assert isinstance(model.model, WrappedLanguageModel)
    assert model.model.middleware is second
    assert model.model.model is base
    assert "first" in repr(model)


def test_wrapped_model_serves_concurrent_calls() -> None:
    model = wrap_language_model(
        FakeLanguageModel.streaming_text("a", "b"),
        [LanguageModelMiddleware()],
    )

    async def run():
        return await asyncio.gather(*(collect_stream(model) for _ in range(3)))

    results = asyncio.run(run())
    assert [join_text(chunks) for chunks in results] == ["ab", "ab", "ab"]


def test_wrap_provider_applies_middleware_to_models() -> None:
    log: List[str] = []
    provider = FakeProvider("acme")
    wrapped = wrap_provider(provider, [recording_middleware("A", log)])

    assert isinstance(wrapped, Provider)
    assert wrapped.name == "acme"
    model = wrapped.language_model("m-2")
    assert isinstance(model, WrappedLanguageModel)
    assert model.model_id == "m-2"

    asyncio.run(model.do_generate(GenerateParams()))
    assert log == ["A"]
    assert provider.models["m-2"].calls


def test_wrap_provider_without_middleware_is_identity() -> None:
    provider = FakeProvider()
    assert wrap_provider(provider, []) is provider
