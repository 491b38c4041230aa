"""Quiz session controller.

``QuizController`` owns everything a single player interacts with: the topic
being generated, the active quiz, per-question answers, the countdown and the
saved quiz collection. Front ends call its entry points and re-render from
its read-only properties whenever a registered listener fires.

Guard violations (answering while on the home screen, advancing past an
unanswered question, and so on) are reported by returning ``False`` rather
than raising, mirroring how the terminal front end disables the matching
controls.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from ..generator import GenerationError
from ..models import OPTION_COUNT, Question, Quiz
from .api_client import QuizGenerator
from .countdown import Countdown
from .share import (
    ShareMessage,
    ShareOutcome,
    ShareTarget,
    format_share_text,
    share_message,
)
from .store import SavedQuizStore, SavedQuizStoreError

__all__ = [
    "DEFAULT_COUNTDOWN_SECONDS",
    "GENERATION_FAILED_MESSAGE",
    "HURRY_THRESHOLD_SECONDS",
    "QuestionReview",
    "QuizController",
    "SessionState",
    "feedback_message",
    "format_clock",
    "is_hurry",
]

logger = logging.getLogger(__name__)

DEFAULT_COUNTDOWN_SECONDS = 300
HURRY_THRESHOLD_SECONDS = 60
SHARE_TITLE = "AI Quiz Result"
GENERATION_FAILED_MESSAGE = (
    "Failed to generate quiz. Please make sure the quiz service and "
    "Ollama are running."
)
NOT_ANSWERED = "Not answered"

Listener = Callable[["QuizController"], None]


class SessionState(str, enum.Enum):
    HOME = "home"
    GENERATING = "generating"
    PLAYING = "playing"
    RESULTS = "results"


@dataclass(frozen=True)
class QuestionReview:
    """One row of the results review."""

    number: int
    question: str
    selected: int | None
    selected_text: str
    correct_answer: int
    correct_text: str
    is_correct: bool
    explanation: str


def format_clock(seconds: int) -> str:
    """Render remaining seconds as ``m:ss``."""

    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


def is_hurry(seconds: int) -> bool:
    return seconds <= HURRY_THRESHOLD_SECONDS


def feedback_message(score: int, total: int) -> str:
    if total <= 0:
        return "Keep practicing! You'll get there! 💪"
    if score == total:
        return "Perfect score! You're an expert! 🏆"
    ratio = score / total
    if ratio >= 0.7:
        return "Great job! You know your stuff! 🌟"
    if ratio >= 0.5:
        return "Good effort! Keep learning! 📚"
    return "Keep practicing! You'll get there! 💪"


def score_answers(
    questions: Sequence[Question], answers: Sequence[int | None]
) -> int:
    """Count exact matches per position; unanswered never counts."""

    correct = 0
    for position, question in enumerate(questions):
        selected = answers[position] if position < len(answers) else None
        if selected is not None and selected == question.correct_answer:
            correct += 1
    return correct


class QuizController:
    """Explicit context object driving one player's quiz session."""

    def __init__(
        self,
        generator: QuizGenerator,
        store: SavedQuizStore,
        *,
        countdown_seconds: int = DEFAULT_COUNTDOWN_SECONDS,
        tick_interval: float = 1.0,
        share_url: str | None = None,
    ) -> None:
        if countdown_seconds <= 0:
            raise ValueError("countdown_seconds must be positive")
        self.generator = generator
        self.store = store
        self.countdown_seconds = countdown_seconds
        self.share_url = share_url
        self._countdown = Countdown(
            interval=tick_interval,
            on_tick=self._on_tick,
            on_expire=self._on_expire,
        )
        self._countdown.reset(countdown_seconds)
        self._listeners: list[Listener] = []
        self._state = SessionState.HOME
        self._topic = ""
        self._quiz: Quiz | None = None
        self._index = 0
        self._answers: list[int | None] = []
        self._score = 0
        self._error: str | None = None
        self._notice: str | None = None

    # Read-only view -----------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def quiz(self) -> Quiz | None:
        return self._quiz

    @property
    def index(self) -> int:
        return self._index

    @property
    def answers(self) -> tuple[int | None, ...]:
        return tuple(self._answers)

    @property
    def score(self) -> int:
        return self._score

    @property
    def total(self) -> int:
        return self._quiz.total if self._quiz is not None else 0

    @property
    def remaining(self) -> int:
        return self._countdown.remaining

    @property
    def timer_running(self) -> bool:
        return self._countdown.running

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def notice(self) -> str | None:
        return self._notice

    @property
    def current_question(self) -> Question | None:
        if self._quiz is None:
            return None
        return self._quiz.questions[self._index]

    @property
    def current_answer(self) -> int | None:
        if not self._answers:
            return None
        return self._answers[self._index]

    @property
    def is_last_question(self) -> bool:
        return self._quiz is not None and self._index == self._quiz.total - 1

    @property
    def progress_text(self) -> str:
        return f"Question {self._index + 1} of {self.total}"

    @property
    def clock_text(self) -> str:
        return format_clock(self.remaining)

    @property
    def hurry(self) -> bool:
        return self._state is SessionState.PLAYING and is_hurry(self.remaining)

    @property
    def is_current_saved(self) -> bool:
        return self._quiz is not None and self._quiz.id in self.store

    @property
    def saved_quizzes(self) -> list[Quiz]:
        return self.store.list()

    @property
    def feedback(self) -> str:
        return feedback_message(self._score, self.total)

    def review(self) -> list[QuestionReview]:
        if self._quiz is None:
            return []
        rows: list[QuestionReview] = []
        for position, question in enumerate(self._quiz.questions):
            selected = self._answers[position]
            selected_text = (
                question.options[selected]
                if selected is not None
                else NOT_ANSWERED
            )
            rows.append(
                QuestionReview(
                    number=position + 1,
                    question=question.question,
                    selected=selected,
                    selected_text=selected_text,
                    correct_answer=question.correct_answer,
                    correct_text=question.correct_option,
                    is_correct=selected == question.correct_answer,
                    explanation=question.explanation,
                )
            )
        return rows

    # Listeners ----------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception(
                    "Session listener failed",
                    extra={"state": self._state.value},
                )

    # Generation ---------------------------------------------------------

    async def submit_topic(self, topic: str) -> bool:
        """Generate a quiz for ``topic`` and start playing it."""

        if self._state is SessionState.GENERATING:
            logger.info("Generation already in progress; submit ignored")
            return False
        if self._state is not SessionState.HOME:
            return False
        cleaned = topic.strip() if isinstance(topic, str) else ""
        if not cleaned:
            return False

        self._topic = cleaned
        self._error = None
        self._notice = None
        self._state = SessionState.GENERATING
        logger.info("Generating quiz", extra={"topic": cleaned})
        self._notify()

        try:
            questions = await self.generator.generate(cleaned)
            if not questions:
                raise GenerationError("Generator returned no questions")
            quiz = Quiz.create(cleaned, questions)
        except GenerationError as exc:
            logger.warning(
                "Quiz generation failed",
                extra={"topic": cleaned, "error": str(exc)},
            )
            return self._generation_failed()
        except Exception:
            logger.exception(
                "Unexpected quiz generation failure",
                extra={"topic": cleaned},
            )
            return self._generation_failed()

        self._begin(quiz)
        return True

    def _generation_failed(self) -> bool:
        self._state = SessionState.HOME
        self._error = GENERATION_FAILED_MESSAGE
        self._notify()
        return False

    def dismiss_error(self) -> None:
        if self._error is None and self._notice is None:
            return
        self._error = None
        self._notice = None
        self._notify()

    # Playing ------------------------------------------------------------

    def _begin(self, quiz: Quiz) -> None:
        self._countdown.stop()
        self._quiz = quiz
        self._index = 0
        self._answers = [None] * quiz.total
        self._score = 0
        self._error = None
        self._notice = None
        self._state = SessionState.PLAYING
        self._countdown.start(self.countdown_seconds)
        logger.info(
            "Quiz started",
            extra={
                "quiz_id": quiz.id,
                "topic": quiz.topic,
                "questions": quiz.total,
            },
        )
        self._notify()

    def select_answer(self, option: int) -> bool:
        if self._state is not SessionState.PLAYING:
            return False
        if isinstance(option, bool) or not isinstance(option, int):
            return False
        if not 0 <= option < OPTION_COUNT:
            return False
        self._answers[self._index] = option
        self._notify()
        return True

    def advance(self) -> bool:
        """Move to the next question, finishing on the last one."""

        if self._state is not SessionState.PLAYING:
            return False
        if self._answers[self._index] is None:
            return False
        if self.is_last_question:
            return self.score_and_finish()
        self._index += 1
        self._notify()
        return True

    def retreat(self) -> bool:
        if self._state is not SessionState.PLAYING or self._index == 0:
            return False
        self._index -= 1
        self._notify()
        return True

    def score_and_finish(self) -> bool:
        if self._state is not SessionState.PLAYING or self._quiz is None:
            return False
        self._countdown.stop()
        self._score = score_answers(self._quiz.questions, self._answers)
        self._state = SessionState.RESULTS
        logger.info(
            "Quiz finished",
            extra={
                "quiz_id": self._quiz.id,
                "score": self._score,
                "total": self._quiz.total,
                "remaining": self.remaining,
            },
        )
        self._notify()
        return True

    def abandon(self) -> bool:
        """Leave a quiz in progress and return home."""

        if self._state is not SessionState.PLAYING:
            return False
        self._countdown.reset(self.countdown_seconds)
        self._state = SessionState.HOME
        self._quiz = None
        self._index = 0
        self._answers = []
        logger.info("Quiz abandoned")
        self._notify()
        return True

    def restart(self) -> bool:
        """Replay the finished quiz with fresh answers and a full clock."""

        if self._state is not SessionState.RESULTS or self._quiz is None:
            return False
        self._begin(self._quiz)
        return True

    def new_quiz(self) -> bool:
        if self._state is not SessionState.RESULTS:
            return False
        self._countdown.reset(self.countdown_seconds)
        self._topic = ""
        self._quiz = None
        self._index = 0
        self._answers = []
        self._score = 0
        self._notice = None
        self._state = SessionState.HOME
        self._notify()
        return True

    def _on_tick(self, remaining: int) -> None:
        self._notify()

    def _on_expire(self) -> None:
        if self._state is SessionState.PLAYING:
            logger.info("Time is up; scoring recorded answers")
            self.score_and_finish()

    # Saved quizzes ------------------------------------------------------

    def save_current_quiz(self) -> bool:
        """Persist the active quiz. Saving twice is a no-op."""

        if self._quiz is None:
            return False
        try:
            self.store.add(self._quiz)
        except SavedQuizStoreError as exc:
            logger.error("Failed to save quiz", extra={"error": str(exc)})
            self._error = "Failed to save quiz."
            self._notify()
            return False
        self._notify()
        return True

    def load_saved_quiz(self, quiz_id: str) -> bool:
        if self._state is not SessionState.HOME:
            return False
        quiz = self.store.get(quiz_id)
        if quiz is None:
            logger.info("Saved quiz not found", extra={"quiz_id": quiz_id})
            return False
        if quiz.total == 0:
            logger.warning(
                "Saved quiz has no questions", extra={"quiz_id": quiz_id}
            )
            return False
        self._begin(quiz)
        return True

    def delete_saved_quiz(self, quiz_id: str) -> bool:
        try:
            removed = self.store.remove(quiz_id)
        except SavedQuizStoreError as exc:
            logger.error(
                "Failed to delete quiz",
                extra={"quiz_id": quiz_id, "error": str(exc)},
            )
            self._error = "Failed to delete quiz."
            self._notify()
            return False
        if removed:
            self._notify()
        return removed

    # Sharing ------------------------------------------------------------

    def share_text(self) -> str:
        topic = self._quiz.topic if self._quiz is not None else self._topic
        return format_share_text(self._score, self.total, topic)

    async def share_result(
        self,
        *,
        native: ShareTarget | None = None,
        clipboard: ShareTarget | None = None,
    ) -> ShareOutcome:
        """Share the score; reports the outcome and never raises."""

        if self._state is not SessionState.RESULTS:
            return ShareOutcome("failed", "Finish the quiz before sharing.")
        message = ShareMessage(
            title=SHARE_TITLE,
            text=self.share_text(),
            url=self.share_url,
        )
        outcome = await share_message(
            message, native=native, clipboard=clipboard
        )
        self._notice = outcome.message
        self._notify()
        return outcome
