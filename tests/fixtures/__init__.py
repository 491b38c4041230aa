from .quiz import (
    RecordingOllama,
    ScriptedGenerator,
    make_questions,
    question_record,
    quiz_text,
)

__all__ = [
    "RecordingOllama",
    "ScriptedGenerator",
    "make_questions",
    "question_record",
    "quiz_text",
]
