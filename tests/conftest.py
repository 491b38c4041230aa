from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable when the package is not installed
ROOT = TESTS_DIR.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from ai_quiz.quizzer.store import SavedQuizStore  # noqa: E402


@pytest.fixture
def workspace_env(tmp_path: Path) -> dict[str, str]:
    """Environment mapping pointing the workspace at a tmp directory."""

    return {"AI_QUIZ_DATA_HOME": str(tmp_path / "workspace")}


@pytest.fixture
def store(tmp_path: Path) -> SavedQuizStore:
    return SavedQuizStore(tmp_path / "saved_quizzes.json")


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("ai_quiz")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
