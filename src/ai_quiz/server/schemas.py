from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from ..models import Question


class QuestionModel(BaseModel):
    id: int = Field(gt=0)
    question: str
    options: List[str] = Field(min_length=4, max_length=4)
    correctAnswer: int = Field(ge=0, le=3)
    explanation: str = ""

    @classmethod
    def from_question(cls, question: Question) -> "QuestionModel":
        return cls(**question.to_dict())

    def to_question(self) -> Question:
        return Question(
            id=self.id,
            question=self.question,
            options=tuple(self.options),  # type: ignore[arg-type]
            correct_answer=self.correctAnswer,
            explanation=self.explanation,
        )


class QuizResponse(BaseModel):
    questions: List[QuestionModel]


class ErrorResponse(BaseModel):
    error: str
