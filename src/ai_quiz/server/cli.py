"""``ai-quiz serve``: run the quiz generation proxy under uvicorn."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

import uvicorn

from ai_quiz.core.config import ConfigError, load_config
from ai_quiz.core.logging import configure_logger

from .app import create_app


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-quiz serve",
        description="Serve POST /generate-quiz backed by a local Ollama model.",
    )
    parser.add_argument("--host", help="Bind address (defaults to config).")
    parser.add_argument(
        "--port", type=int, help="Bind port (defaults to config)."
    )
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
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log records to stderr.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        load_result = load_config(
            config_path=args.config, workspace_path=args.workspace
        )
    except ConfigError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    config = load_result.config
    logger, log_path = configure_logger(
        "ai_quiz",
        log_dir=load_result.layout.path_for("logs"),
        level=config.logging.level,
        verbose=args.verbose or config.logging.verbose,
        filename="server.log",
    )
    host = args.host or config.server.host
    port = args.port or config.server.port
    logger.info(
        "Starting quiz proxy",
        extra={
            "host": host,
            "port": port,
            "model": config.generation.model,
            "ollama": config.generation.base_url,
        },
    )
    sys.stdout.write(
        f"Serving on http://{host}:{port} (model {config.generation.model}); "
        f"logs -> {log_path}\n"
    )
    uvicorn.run(create_app(config), host=host, port=port)
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
