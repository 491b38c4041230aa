"""Quiz data structures shared by the proxy, the controller and the store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, MutableMapping, Sequence

OPTION_COUNT = 4


@dataclass(frozen=True)
class Question:
    """A single multiple-choice question with exactly four options."""

    id: int
    question: str
    options: tuple[str, str, str, str]
    correct_answer: int
    explanation: str = ""

    def __post_init__(self) -> None:
        if len(self.options) != OPTION_COUNT:
            raise ValueError("a question needs exactly 4 options")
        if not 0 <= self.correct_answer < OPTION_COUNT:
            raise ValueError("correct_answer must be between 0 and 3")

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_answer]

    def to_dict(self) -> MutableMapping[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Question":
        """Rebuild a question from its wire form.

        Only use this on data this package wrote; model output goes through
        the sanitizer instead.
        """

        try:
            options = tuple(str(option) for option in payload["options"])
            return cls(
                id=int(payload["id"]),
                question=str(payload["question"]),
                options=options,  # type: ignore[arg-type]
                correct_answer=int(payload["correctAnswer"]),
                explanation=str(payload.get("explanation") or ""),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed question payload: {exc}") from exc


@dataclass(frozen=True)
class Quiz:
    """A generated quiz. Never mutated after construction."""

    id: str
    topic: str
    questions: tuple[Question, ...]
    created_at: str

    @classmethod
    def create(cls, topic: str, questions: Sequence[Question]) -> "Quiz":
        return cls(
            id=_generate_quiz_id(),
            topic=topic,
            questions=tuple(questions),
            created_at=_timestamp(),
        )

    @property
    def total(self) -> int:
        return len(self.questions)

    def to_dict(self) -> MutableMapping[str, Any]:
        return {
            "id": self.id,
            "topic": self.topic,
            "questions": [question.to_dict() for question in self.questions],
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Quiz":
        try:
            raw_questions = payload["questions"]
            if not isinstance(raw_questions, list):
                raise TypeError("questions must be a list")
            if not raw_questions:
                raise ValueError("Malformed quiz payload: no questions")
            return cls(
                id=str(payload["id"]),
                topic=str(payload["topic"]),
                questions=tuple(
                    Question.from_dict(item) for item in raw_questions
                ),
                created_at=str(payload.get("createdAt") or ""),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed quiz payload: {exc}") from exc


def _generate_quiz_id() -> str:
    return uuid.uuid4().hex


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
