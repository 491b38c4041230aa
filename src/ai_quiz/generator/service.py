"""Topic in, validated questions out."""

from __future__ import annotations

import logging
from typing import Any, List, Protocol

from ..models import Question
from .errors import InvalidInputError
from .prompt import build_quiz_prompt
from .sanitizer import sanitize_questions

__all__ = ["TextGenerator", "generate_quiz", "validate_topic"]

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


def validate_topic(topic: Any) -> str:
    """Return the stripped topic or raise :class:`InvalidInputError`."""

    if not isinstance(topic, str) or not topic.strip():
        raise InvalidInputError("topic must be a non-empty string")
    return topic.strip()


async def generate_quiz(
    topic: Any,
    *,
    client: TextGenerator,
    question_count: int = 5,
) -> List[Question]:
    """Generate ``question_count`` questions about ``topic``.

    Makes exactly one call to ``client``; no retries.
    """

    clean_topic = validate_topic(topic)
    prompt = build_quiz_prompt(clean_topic, question_count=question_count)
    logger.info("Generating quiz", extra={"topic": clean_topic})
    raw = await client.generate(prompt)
    questions = sanitize_questions(
        raw, clean_topic, question_count=question_count
    )
    logger.info(
        "Quiz generated",
        extra={"topic": clean_topic, "questions": len(questions)},
    )
    return questions
