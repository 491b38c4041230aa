"""Coerce untrusted model text into a list of well-formed questions.

The pipeline is deliberately forgiving: code fences are stripped, a JSON
object is salvaged from surrounding prose when the direct parse fails, and
every per-question field falls back to a safe default. Only output with no
recoverable question list is rejected.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence, Union

from ..models import OPTION_COUNT, Question
from .errors import ParseError, SchemaError

__all__ = [
    "DEFAULT_OPTIONS",
    "ParsedQuestions",
    "ParseFailure",
    "SchemaFailure",
    "strip_code_fences",
    "parse_model_output",
    "coerce_question",
    "sanitize_questions",
]

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS: tuple[str, str, str, str] = (
    "Option A",
    "Option B",
    "Option C",
    "Option D",
)

_FENCE_RE = re.compile(r"```(?:json)?")
_BRACE_SPAN_RE = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class ParsedQuestions:
    """The output held a ``questions`` list (entries still unchecked)."""

    records: List[Any]


@dataclass(frozen=True)
class ParseFailure:
    reason: str
    text: str


@dataclass(frozen=True)
class SchemaFailure:
    reason: str


ParseResult = Union[ParsedQuestions, ParseFailure, SchemaFailure]


def strip_code_fences(text: str) -> str:
    """Remove every ```json / ``` marker and trim surrounding whitespace."""

    return _FENCE_RE.sub("", text).strip()


def parse_model_output(text: str) -> ParseResult:
    """Run the fence strip, direct parse and brace-span fallback stages."""

    cleaned = strip_code_fences(text or "")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as first_error:
        match = _BRACE_SPAN_RE.search(cleaned)
        if not match:
            return ParseFailure(f"no JSON object found ({first_error})", cleaned)
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            return ParseFailure(f"embedded JSON is invalid ({exc})", cleaned)

    if not isinstance(data, dict):
        return SchemaFailure(
            f"expected a JSON object, found {type(data).__name__}"
        )
    records = data.get("questions")
    if not isinstance(records, list):
        return SchemaFailure("'questions' is missing or not a list")
    return ParsedQuestions(records)


def _coerce_id(raw: Any, position: int) -> int:
    if isinstance(raw, bool):
        return position
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw.strip())
    if isinstance(raw, int) and raw > 0:
        return raw
    return position


def _coerce_text(raw: Any, fallback: str) -> str:
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return fallback


def _coerce_options(raw: Any) -> tuple[str, str, str, str]:
    if (
        isinstance(raw, list)
        and len(raw) == OPTION_COUNT
        and all(isinstance(option, str) for option in raw)
    ):
        return tuple(raw)  # type: ignore[return-value]
    return DEFAULT_OPTIONS


def _coerce_correct_answer(raw: Any) -> int:
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if isinstance(raw, int) and 0 <= raw < OPTION_COUNT:
        return raw
    return 0


def coerce_question(raw: Any, position: int, topic: str) -> Question:
    """Build a :class:`Question` from one untrusted record. Never fails.

    ``position`` is 1-based and doubles as the fallback id.
    """

    record: Mapping[str, Any] = raw if isinstance(raw, dict) else {}
    explanation = record.get("explanation")
    return Question(
        id=_coerce_id(record.get("id"), position),
        question=_coerce_text(
            record.get("question"), f"Question about {topic}"
        ),
        options=_coerce_options(record.get("options")),
        correct_answer=_coerce_correct_answer(record.get("correctAnswer")),
        explanation=explanation.strip() if isinstance(explanation, str) else "",
    )


def sanitize_questions(
    text: str,
    topic: str,
    *,
    question_count: int = 5,
) -> List[Question]:
    """Turn raw model text into exactly ``question_count`` questions.

    Raises :class:`ParseError` when no JSON can be recovered and
    :class:`SchemaError` when the question list is absent or too short.
    Extra questions are dropped.
    """

    result = parse_model_output(text)
    if isinstance(result, ParseFailure):
        logger.warning(
            "Failed to parse model output",
            extra={"reason": result.reason, "raw_output": result.text[:2000]},
        )
        raise ParseError(result.reason)
    if isinstance(result, SchemaFailure):
        logger.warning(
            "Model output has no usable question list",
            extra={"reason": result.reason},
        )
        raise SchemaError(result.reason)

    records: Sequence[Any] = result.records
    if len(records) < question_count:
        logger.warning(
            "Model returned too few questions",
            extra={"expected": question_count, "received": len(records)},
        )
        raise SchemaError(
            f"expected {question_count} questions, received {len(records)}"
        )
    if len(records) > question_count:
        logger.info(
            "Dropping surplus questions",
            extra={"expected": question_count, "received": len(records)},
        )
    return [
        coerce_question(record, position, topic)
        for position, record in enumerate(records[:question_count], start=1)
    ]
