from .api_client import DirectGenerator, QuizApiClient, QuizGenerator
from .countdown import Countdown
from .session import (
    QuestionReview,
    QuizController,
    SessionState,
    feedback_message,
    format_clock,
)
from .share import ShareMessage, ShareOutcome, format_share_text, share_message
from .store import SavedQuizStore, SavedQuizStoreError
from .view import QuizApp, render_home, render_question, render_results

__all__ = [
    "DirectGenerator",
    "QuizApiClient",
    "QuizGenerator",
    "Countdown",
    "QuestionReview",
    "QuizController",
    "SessionState",
    "feedback_message",
    "format_clock",
    "ShareMessage",
    "ShareOutcome",
    "format_share_text",
    "share_message",
    "SavedQuizStore",
    "SavedQuizStoreError",
    "QuizApp",
    "render_home",
    "render_question",
    "render_results",
]
