from .app import create_app, router
from .schemas import ErrorResponse, QuestionModel, QuizResponse

__all__ = [
    "create_app",
    "router",
    "ErrorResponse",
    "QuestionModel",
    "QuizResponse",
]
