from __future__ import annotations

import json

import pytest

from ai_quiz.generator import sanitizer as sz
from ai_quiz.generator.errors import ParseError, SchemaError
from fixtures import question_record, quiz_text


def test_strip_code_fences_removes_every_marker():
    text = "```json\n{\"a\": 1}\n```\n```"
    assert sz.strip_code_fences(text) == '{"a": 1}'


def test_parse_model_output_direct_json():
    result = sz.parse_model_output(quiz_text(5))
    assert isinstance(result, sz.ParsedQuestions)
    assert len(result.records) == 5


def test_parse_model_output_handles_fences_and_prose():
    fenced = sz.parse_model_output(quiz_text(5, fenced=True))
    wrapped = sz.parse_model_output(quiz_text(5, prose=True))
    both = sz.parse_model_output(quiz_text(5, fenced=True, prose=True))
    assert isinstance(fenced, sz.ParsedQuestions)
    assert isinstance(wrapped, sz.ParsedQuestions)
    assert isinstance(both, sz.ParsedQuestions)
    assert wrapped.records[0]["question"] == "Question 1?"
    assert len(both.records) == 5
    assert both.records[4]["question"] == "Question 5?"


def test_parse_model_output_unrecoverable_text():
    result = sz.parse_model_output("I cannot help with that.")
    assert isinstance(result, sz.ParseFailure)
    assert "no JSON object" in result.reason


def test_parse_model_output_invalid_embedded_span():
    result = sz.parse_model_output("Here: {questions: [oops]} done")
    assert isinstance(result, sz.ParseFailure)


@pytest.mark.parametrize(
    "text",
    [
        "[1, 2, 3]",
        '{"quiz": []}',
        '{"questions": {"id": 1}}',
    ],
)
def test_parse_model_output_schema_failures(text):
    assert isinstance(sz.parse_model_output(text), sz.SchemaFailure)


def test_coerce_question_keeps_valid_fields():
    question = sz.coerce_question(question_record(3, correct=2), 3, "Space")
    assert question.id == 3
    assert question.question == "Question 3?"
    assert question.options[2] == "Q3 option C"
    assert question.correct_answer == 2
    assert question.explanation == "Because of reason 3."


def test_coerce_question_defaults_everything_for_non_object():
    question = sz.coerce_question("not a question", 4, "Astronomy")
    assert question.id == 4
    assert question.question == "Question about Astronomy"
    assert question.options == sz.DEFAULT_OPTIONS
    assert question.correct_answer == 0
    assert question.explanation == ""


def test_coerce_question_repairs_bad_fields():
    raw = {
        "id": 0,
        "question": "   ",
        "options": ["only", "three", "options"],
        "correctAnswer": 7,
        "explanation": 42,
    }
    question = sz.coerce_question(raw, 2, "Rivers")
    assert question.id == 2
    assert question.question == "Question about Rivers"
    assert question.options == sz.DEFAULT_OPTIONS
    assert question.correct_answer == 0
    assert question.explanation == ""


def test_coerce_question_rejects_booleans_and_non_string_options():
    raw = {
        "id": True,
        "question": "Q?",
        "options": ["a", "b", "c", 4],
        "correctAnswer": True,
    }
    question = sz.coerce_question(raw, 5, "T")
    assert question.id == 5
    assert question.options == sz.DEFAULT_OPTIONS
    assert question.correct_answer == 0


def test_coerce_question_accepts_integral_floats_and_digit_ids():
    raw = {
        "id": "7",
        "question": "Q?",
        "options": ["a", "b", "c", "d"],
        "correctAnswer": 3.0,
    }
    question = sz.coerce_question(raw, 1, "T")
    assert question.id == 7
    assert question.correct_answer == 3


def test_sanitize_questions_returns_exact_count():
    questions = sz.sanitize_questions(quiz_text(5), "Space")
    assert [q.id for q in questions] == [1, 2, 3, 4, 5]


def test_sanitize_questions_truncates_surplus():
    questions = sz.sanitize_questions(quiz_text(8), "Space")
    assert len(questions) == 5
    assert questions[-1].id == 5


def test_sanitize_questions_rejects_short_list():
    with pytest.raises(SchemaError) as excinfo:
        sz.sanitize_questions(quiz_text(3), "Space")
    assert excinfo.value.public_message == "Invalid quiz structure from Ollama"


def test_sanitize_questions_parse_error():
    with pytest.raises(ParseError) as excinfo:
        sz.sanitize_questions("totally not json", "Space")
    assert "parse" in excinfo.value.public_message


def test_sanitize_questions_schema_error_for_missing_list():
    with pytest.raises(SchemaError):
        sz.sanitize_questions(json.dumps({"items": []}), "Space")


def test_sanitize_questions_mixed_entries_are_coerced():
    records = [question_record(n) for n in range(1, 5)] + [None]
    text = json.dumps({"questions": records})
    questions = sz.sanitize_questions(text, "Mixed")
    assert questions[-1].question == "Question about Mixed"
    assert questions[-1].id == 5
