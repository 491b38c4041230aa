"""Command handlers for ``ai-quiz play``, ``generate`` and ``saved``."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from ..core.config import ConfigError, LoadResult, load_config
from ..core.logging import configure_logger
from ..generator import GenerationError
from ..models import Quiz
from .api_client import DirectGenerator, QuizApiClient, QuizGenerator
from .session import QuizController
from .store import SavedQuizStore, SavedQuizStoreError
from .view import QuizApp


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to ai_quiz.toml (defaults to the workspace copy).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root.",
    )


def _add_generator_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--direct",
        action="store_true",
        help="Call Ollama in-process instead of going through the proxy.",
    )
    parser.add_argument(
        "--api-url",
        help="Proxy base URL (defaults to AI_QUIZ_API_URL or config).",
    )


def _load(args: argparse.Namespace, log_name: str) -> LoadResult:
    load_result = load_config(
        config_path=args.config, workspace_path=args.workspace
    )
    configure_logger(
        "ai_quiz",
        log_dir=load_result.layout.path_for("logs"),
        level=load_result.config.logging.level,
        filename=log_name,
    )
    return load_result


def _build_generator(
    load_result: LoadResult, args: argparse.Namespace
) -> QuizGenerator:
    config = load_result.config
    if args.direct:
        return DirectGenerator.from_config(config.generation)
    return QuizApiClient(args.api_url or config.server.api_url)


def _open_store(load_result: LoadResult) -> SavedQuizStore:
    return SavedQuizStore(load_result.saved_quizzes_path)


def _error(message: str) -> None:
    sys.stderr.write(message + "\n")


def build_play_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-quiz play",
        description="Play AI generated quizzes in the terminal.",
    )
    _add_common_arguments(parser)
    _add_generator_arguments(parser)
    return parser


def play_main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_play_parser().parse_args(argv)
    try:
        load_result = _load(args, "play.log")
        store = _open_store(load_result)
    except (ConfigError, SavedQuizStoreError) as exc:
        _error(str(exc))
        return 1

    quiz_config = load_result.config.quiz
    controller = QuizController(
        _build_generator(load_result, args),
        store,
        countdown_seconds=quiz_config.countdown_seconds,
        share_url=quiz_config.share_url,
    )
    QuizApp(controller).run()
    return 0


def build_generate_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-quiz generate",
        description="Generate one quiz and print its questions as JSON.",
    )
    parser.add_argument("topic", help="Quiz topic, e.g. 'Astronomy'.")
    _add_common_arguments(parser)
    _add_generator_arguments(parser)
    parser.add_argument(
        "--save",
        action="store_true",
        help="Also add the generated quiz to the saved collection.",
    )
    return parser


def generate_main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_generate_parser().parse_args(argv)
    try:
        load_result = _load(args, "generate.log")
    except ConfigError as exc:
        _error(str(exc))
        return 1

    generator = _build_generator(load_result, args)
    try:
        questions = asyncio.run(generator.generate(args.topic))
    except GenerationError as exc:
        _error(exc.public_message)
        return 1

    quiz = Quiz.create(args.topic.strip(), questions)
    if args.save:
        try:
            _open_store(load_result).add(quiz)
        except SavedQuizStoreError as exc:
            _error(str(exc))
            return 1

    payload = {"questions": [question.to_dict() for question in questions]}
    if args.save:
        payload["id"] = quiz.id
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
    return 0


def build_saved_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-quiz saved",
        description="Inspect or prune the saved quiz collection.",
    )
    _add_common_arguments(parser)
    sub = parser.add_subparsers(dest="action", required=True)
    sub.add_parser("list", help="List saved quizzes")
    sp_show = sub.add_parser("show", help="Print a saved quiz as JSON")
    sp_show.add_argument("quiz_id")
    sp_delete = sub.add_parser("delete", help="Delete a saved quiz")
    sp_delete.add_argument("quiz_id")
    return parser


def _print_saved(store: SavedQuizStore, console: Console) -> int:
    quizzes = store.list()
    if not quizzes:
        console.print("No saved quizzes.")
        return 0
    table = Table(title="Saved quizzes", box=box.SIMPLE)
    table.add_column("ID", no_wrap=True)
    table.add_column("Topic", overflow="fold")
    table.add_column("Questions", justify="right")
    table.add_column("Created")
    for quiz in quizzes:
        table.add_row(quiz.id, quiz.topic, str(quiz.total), quiz.created_at)
    console.print(table)
    return 0


def saved_main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
) -> int:
    args = build_saved_parser().parse_args(argv)
    out = console or Console()
    try:
        load_result = _load(args, "saved.log")
        store = _open_store(load_result)
    except (ConfigError, SavedQuizStoreError) as exc:
        _error(str(exc))
        return 1

    if args.action == "list":
        return _print_saved(store, out)

    if args.action == "show":
        quiz = store.get(args.quiz_id)
        if quiz is None:
            _error(f"No saved quiz with id '{args.quiz_id}'.")
            return 1
        sys.stdout.write(
            json.dumps(quiz.to_dict(), indent=2, ensure_ascii=False) + "\n"
        )
        return 0

    try:
        removed = store.remove(args.quiz_id)
    except SavedQuizStoreError as exc:
        _error(str(exc))
        return 1
    if not removed:
        _error(f"No saved quiz with id '{args.quiz_id}'.")
        return 1
    out.print(f"Deleted {args.quiz_id}")
    return 0
