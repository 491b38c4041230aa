"""Unified CLI entry point for ai-quiz.

Each subcommand lives in its own module and exposes a ``*_main(argv)``
function; this dispatcher imports it lazily so ``ai-quiz --version`` does not
pay for FastAPI or Textual imports.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from importlib import import_module, metadata
from typing import Callable, Mapping, Optional, Sequence

PROG = "ai-quiz"


@dataclass(frozen=True)
class CommandSpec:
    """Represents an ai-quiz subcommand."""

    name: str
    summary: str
    module: str
    func: str = "main"
    is_tui: bool = False

    @property
    def prog(self) -> str:
        return f"{PROG} {self.name}"

    def run(self, argv: Sequence[str]) -> int:
        target = getattr(import_module(self.module), self.func)
        return _invoke_main(target, self.prog, argv)


_COMMAND_SPECS: Sequence[CommandSpec] = (
    CommandSpec(
        name="init",
        summary="Bootstrap the workspace and write a config template.",
        module="ai_quiz.workspace.cli",
    ),
    CommandSpec(
        name="serve",
        summary="Run the quiz generation proxy (POST /generate-quiz).",
        module="ai_quiz.server.cli",
    ),
    CommandSpec(
        name="play",
        summary="Play generated quizzes in the terminal.",
        module="ai_quiz.quizzer._main",
        func="play_main",
        is_tui=True,
    ),
    CommandSpec(
        name="generate",
        summary="Generate one quiz and print it as JSON.",
        module="ai_quiz.quizzer._main",
        func="generate_main",
    ),
    CommandSpec(
        name="saved",
        summary="List, show or delete saved quizzes.",
        module="ai_quiz.quizzer._main",
        func="saved_main",
    ),
)

COMMANDS: Mapping[str, CommandSpec] = {
    spec.name: spec for spec in _COMMAND_SPECS
}

_NAME_WIDTH = max(len(name) for name in COMMANDS)


def format_command_table() -> str:
    """Return a formatted command table for help output."""

    lines = ["Available commands:"]
    for spec in _COMMAND_SPECS:
        suffix = " (TUI)" if spec.is_tui else ""
        lines.append(
            f"  {spec.name.ljust(_NAME_WIDTH)}  {spec.summary}{suffix}"
        )
    return "\n".join(lines)


def format_usage() -> str:
    return "\n".join(
        [
            f"Usage: {PROG} <command> [args...]",
            f"Run `{PROG} list` for commands or `{PROG} help <name>` for "
            "details.",
            "",
            format_command_table(),
        ]
    )


def _out(text: str) -> None:
    sys.stdout.write(text + "\n")


def _err(text: str) -> None:
    sys.stderr.write(text + "\n")


def _unknown(command: str) -> int:
    _err(f"Unknown command '{command}'.")
    _err(format_command_table())
    return 2


def _handle_usage(_argv: Sequence[str]) -> int:
    _out(format_usage())
    return 0


def _handle_list(_argv: Sequence[str]) -> int:
    _out(format_command_table())
    return 0


def _handle_version(_argv: Sequence[str]) -> int:
    try:
        version = metadata.version(PROG)
    except metadata.PackageNotFoundError:
        version = "unknown"
    _out(version)
    return 0


def _handle_help(argv: Sequence[str]) -> int:
    if not argv:
        return _handle_usage(argv)
    spec = COMMANDS.get(argv[0])
    if spec is None:
        return _unknown(argv[0])
    _out(f"{spec.name}: {spec.summary}")
    _out(f"Run `{spec.prog} --help` for CLI-specific options.")
    return 0


_BUILTINS: Mapping[str, Callable[[Sequence[str]], int]] = {
    "-h": _handle_usage,
    "--help": _handle_usage,
    "-V": _handle_version,
    "--version": _handle_version,
    "version": _handle_version,
    "list": _handle_list,
    "help": _handle_help,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(argv if argv is not None else sys.argv[1:])
    if not args:
        _out(format_usage())
        return 2

    head, *tail = args
    builtin = _BUILTINS.get(head)
    if builtin is not None:
        return builtin(tail)
    spec = COMMANDS.get(head)
    if spec is None:
        return _unknown(head)
    return spec.run(tail)


def _invoke_main(
    func: Callable[[list[str]], object],
    prog_name: str,
    argv: Sequence[str],
) -> int:
    """Run ``func`` with ``sys.argv`` set so argparse shows ``prog_name``."""

    args = list(argv)
    old_argv = sys.argv
    sys.argv = [prog_name, *args]
    try:
        result = func(args)
    except SystemExit as exc:
        return _exit_code(exc.code)
    finally:
        sys.argv = old_argv
    return result if isinstance(result, int) else 0


def _exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    _err(str(code))
    return 1


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
