"""Command line interface for trying the text middleware on local files."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import ExtractReasoningOptions
from .core.chunks import FinishChunk, TextChunk, UsageChunk
from .core.errors import StrataError
from .core.message import GenerateResult, Usage
from .core.model import LanguageModel
from .core.params import GenerateParams
from .core.stream import ChunkStream, ListChunkStream, collect_chunks, join_reasoning, join_text
from .middleware.base import LanguageModelMiddleware
from .middleware.fence import extract_json_middleware
from .middleware.reasoning import extract_reasoning_middleware
from .middleware.wrap import wrap_language_model


class _StaticTextModel(LanguageModel):
    """Model answering every call with a fixed text."""

    def __init__(self, text: str, *, chunk_size: int) -> None:
        self._text = text
        self._chunk_size = chunk_size

    @property
    def provider(self) -> str:
        return "local"

    @property
    def model_id(self) -> str:
        return "static-text"

    async def do_generate(self, params: GenerateParams) -> GenerateResult:
        return GenerateResult(text=self._text)

    async def do_stream(self, params: GenerateParams) -> ChunkStream:
        size = self._chunk_size
        chunks = [TextChunk(self._text[i : i + size]) for i in range(0, len(self._text), size)]
        return ListChunkStream([*chunks, UsageChunk(Usage()), FinishChunk(usage=Usage())])


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer '{value}'") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("chunk size must be positive")
    return number


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Apply strata text middleware to a file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("file", nargs="?", default="-", help="Input file, '-' for stdin")
    common.add_argument(
        "--stream",
        action="store_true",
        help="Run the streaming path instead of the single-shot path",
    )
    common.add_argument(
        "--chunk-size",
        type=_positive_int,
        default=8,
        help="Characters per simulated chunk when streaming",
    )

    reasoning_parser = subparsers.add_parser(
        "reasoning", parents=[common], help="split tagged reasoning from the answer"
    )
    reasoning_parser.add_argument("--tag", default="think", help="Reasoning tag name")
    reasoning_parser.add_argument("--separator", default="\n", help="Separator for single-shot joins")
    reasoning_parser.add_argument(
        "--start-with-reasoning",
        action="store_true",
        help="The text starts inside a reasoning block",
    )

    subparsers.add_parser("fence", parents=[common], help="strip a surrounding markdown code fence")

    return parser


async def _run(model: LanguageModel, middleware: LanguageModelMiddleware, *, stream: bool) -> tuple[str, str | None]:
    wrapped = wrap_language_model(model, [middleware])
    if stream:
        chunks = await collect_chunks(await wrapped.do_stream(GenerateParams()))
        return join_text(chunks), join_reasoning(chunks)
    result = await wrapped.do_generate(GenerateParams())
    return result.text, result.reasoning


def _emit(text: str, reasoning: str | None) -> None:
    if reasoning:
        sys.stdout.write(f"reasoning:\n{reasoning}\n\ntext:\n")
    sys.stdout.write(text)
    if not text.endswith("\n"):
        sys.stdout.write("\n")


def _handle_reasoning(args: argparse.Namespace) -> int:
    options = ExtractReasoningOptions(
        tag_name=args.tag,
        separator=args.separator,
        start_with_reasoning=args.start_with_reasoning,
    )
    model = _StaticTextModel(_read_input(args.file), chunk_size=args.chunk_size)
    text, reasoning = asyncio.run(_run(model, extract_reasoning_middleware(options), stream=args.stream))
    _emit(text, reasoning)
    return 0


def _handle_fence(args: argparse.Namespace) -> int:
    model = _StaticTextModel(_read_input(args.file), chunk_size=args.chunk_size)
    text, _ = asyncio.run(_run(model, extract_json_middleware(), stream=args.stream))
    _emit(text, None)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        if args.command == "reasoning":
            return _handle_reasoning(args)
        if args.command == "fence":
            return _handle_fence(args)
    except (OSError, StrataError) as exc:
        parser.exit(1, f"error: {exc}\n")
    parser.error("no command provided")
    return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
