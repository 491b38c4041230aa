"""Quiz payloads and fake network seams shared by tests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

import httpx

from ai_quiz.models import Question


def question_record(number: int, *, correct: int = 0) -> dict[str, Any]:
    """Return a well-formed wire question numbered ``number``."""

    return {
        "id": number,
        "question": f"Question {number}?",
        "options": [f"Q{number} option {key}" for key in "ABCD"],
        "correctAnswer": correct,
        "explanation": f"Because of reason {number}.",
    }


def quiz_text(
    count: int = 5,
    *,
    fenced: bool = False,
    prose: bool = False,
    correct: int = 0,
) -> str:
    """Render ``count`` questions the way a model might answer."""

    body = json.dumps(
        {
            "questions": [
                question_record(number, correct=correct)
                for number in range(1, count + 1)
            ]
        }
    )
    if fenced:
        body = f"```json\n{body}\n```"
    if prose:
        body = f"Sure! Here is your quiz:\n{body}\nGood luck!"
    return body


def make_questions(
    count: int = 5, *, correct: Sequence[int] | None = None
) -> List[Question]:
    answers = list(correct) if correct is not None else [0] * count
    return [
        Question(
            id=number,
            question=f"Question {number}?",
            options=tuple(f"Q{number} option {key}" for key in "ABCD"),  # type: ignore[arg-type]
            correct_answer=answers[number - 1],
            explanation=f"Because of reason {number}.",
        )
        for number in range(1, count + 1)
    ]


@dataclass
class RecordingOllama:
    """``httpx.MockTransport`` handler that answers like ``/api/generate``.

    ``responses`` are consumed in order; the last one repeats. A response
    may be a ready ``httpx.Response``, a ``str`` (wrapped as the model's
    ``response`` text) or an exception instance to raise.
    """

    responses: List[Any]
    requests: List[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.responses)) - 1
        item = self.responses[index]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json={"response": item, "done": True})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def payload(self, index: int = -1) -> dict[str, Any]:
        return json.loads(self.requests[index].content)


@dataclass
class ScriptedGenerator:
    """Stand-in for a question source used by the controller."""

    questions: Optional[List[Question]] = None
    error: Optional[Exception] = None
    topics: List[str] = field(default_factory=list)
    before_return: Optional[Callable[[], Any]] = None

    async def generate(self, topic: str) -> List[Question]:
        self.topics.append(topic)
        if self.before_return is not None:
            await self.before_return()
        if self.error is not None:
            raise self.error
        return list(self.questions if self.questions is not None else make_questions())
