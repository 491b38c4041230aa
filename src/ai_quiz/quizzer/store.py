"""Persistence for the saved quiz collection.

All saved quizzes live in one JSON slot that is read once when the store is
created and rewritten in full after every change.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ..models import Quiz

__all__ = ["SavedQuizStoreError", "SavedQuizStore"]

logger = logging.getLogger(__name__)


class SavedQuizStoreError(RuntimeError):
    """Raised when the saved quiz slot cannot be read or written."""


class SavedQuizStore:
    """Insertion-ordered set of quizzes keyed by id."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._quizzes: Dict[str, Quiz] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._quizzes)

    def __contains__(self, quiz_id: object) -> bool:
        return quiz_id in self._quizzes

    def __iter__(self) -> Iterator[Quiz]:
        return iter(list(self._quizzes.values()))

    def list(self) -> List[Quiz]:
        return list(self._quizzes.values())

    def get(self, quiz_id: str) -> Optional[Quiz]:
        return self._quizzes.get(quiz_id)

    def add(self, quiz: Quiz) -> bool:
        """Save ``quiz``; returns ``False`` without writing if the id exists."""

        if quiz.id in self._quizzes:
            return False
        self._quizzes[quiz.id] = quiz
        try:
            self._write()
        except SavedQuizStoreError:
            del self._quizzes[quiz.id]
            raise
        logger.info(
            "Quiz saved", extra={"quiz_id": quiz.id, "topic": quiz.topic}
        )
        return True

    def remove(self, quiz_id: str) -> bool:
        """Delete ``quiz_id``; returns ``False`` if it was not saved."""

        if quiz_id not in self._quizzes:
            return False
        previous = dict(self._quizzes)
        del self._quizzes[quiz_id]
        try:
            self._write()
        except SavedQuizStoreError:
            self._quizzes = previous
            raise
        logger.info("Quiz deleted", extra={"quiz_id": quiz_id})
        return True

    def _load(self) -> None:
        if not self._path.is_file():
            return
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SavedQuizStoreError(
                f"Failed to parse saved quizzes: {self._path}"
            ) from exc
        if not isinstance(payload, list):
            raise SavedQuizStoreError(
                f"Saved quizzes must be a JSON list: {self._path}"
            )
        for item in payload:
            try:
                quiz = Quiz.from_dict(item)
            except (ValueError, AttributeError) as exc:
                raise SavedQuizStoreError(
                    f"Malformed saved quiz in {self._path}: {exc}"
                ) from exc
            self._quizzes.setdefault(quiz.id, quiz)
        logger.debug(
            "Saved quizzes loaded",
            extra={"path": self._path, "count": len(self._quizzes)},
        )

    def _write(self) -> None:
        payload = [quiz.to_dict() for quiz in self._quizzes.values()]
        try:
            _atomic_write_json(self._path, payload)
        except OSError as exc:
            raise SavedQuizStoreError(
                f"Failed to write saved quizzes: {self._path}"
            ) from exc


def _atomic_write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        encoding="utf-8",
        dir=str(path.parent),
    )
    try:
        json.dump(payload, handle, indent=2, ensure_ascii=False)
        handle.flush()
        os.fsync(handle.fileno())
    finally:
        handle.close()
    os.replace(handle.name, path)
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
