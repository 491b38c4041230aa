"""Textual front end for :class:`~ai_quiz.quizzer.session.QuizController`.

The app is a thin shell: every screen is produced by the pure ``render_*``
helpers below and refreshed from a controller listener, so the helpers can be
exercised with a recording Rich console without starting Textual.
"""

from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Footer, Input, Static

from ..models import Question, Quiz
from .session import (
    QuestionReview,
    QuizController,
    SessionState,
    format_clock,
    is_hurry,
)

__all__ = [
    "OPTION_KEYS",
    "QuizApp",
    "format_clock",
    "render_home",
    "render_question",
    "render_results",
    "render_screen",
]

OPTION_KEYS = ("A", "B", "C", "D")


def render_home(
    topic: str,
    saved: Sequence[Quiz],
    *,
    error: Optional[str] = None,
    generating: bool = False,
) -> RenderableType:
    parts: list[RenderableType] = [
        Text("AI Quiz", style="bold magenta"),
        Text("Enter any topic and get a five question quiz.", style="dim"),
    ]
    if generating:
        parts.append(
            Text(f"Generating quiz about {topic!r}...", style="bold yellow")
        )
    if error:
        parts.append(Text(error, style="bold red"))

    if saved:
        table = Table(title="Saved quizzes", box=box.SIMPLE, expand=True)
        table.add_column("#", justify="right")
        table.add_column("Topic", overflow="fold")
        table.add_column("Questions", justify="right")
        for number, quiz in enumerate(saved, start=1):
            table.add_row(str(number), quiz.topic, str(quiz.total))
        parts.append(table)
    else:
        parts.append(Text("No saved quizzes yet.", style="dim"))
    return Panel(Group(*parts), title="Home", border_style="magenta")


def render_question(
    question: Question,
    *,
    topic: str,
    index: int,
    total: int,
    selected: Optional[int],
    remaining: int,
) -> RenderableType:
    clock_style = "bold red" if is_hurry(remaining) else "bold cyan"
    header = Text.assemble(
        (f"Question {index + 1} of {total}", "bold cyan"),
        ("  |  ", "dim"),
        (topic, "italic"),
        ("  |  ", "dim"),
        (format_clock(remaining), clock_style),
    )
    if is_hurry(remaining):
        header.append("  Hurry up!", style="bold red")

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Option")
    for position, option in enumerate(question.options):
        marker = "•" if position == selected else " "
        text = Text(f"{marker} {option}")
        if position == selected:
            text.stylize("bold green")
        table.add_row(OPTION_KEYS[position], text)

    hint = Text(
        "a-d select, n next, p previous, s save, h home",
        style="dim",
    )
    return Panel(
        Group(header, Text(question.question, style="bold"), table, hint),
        title="Quiz",
        border_style="red" if is_hurry(remaining) else "cyan",
    )


def render_results(
    *,
    topic: str,
    score: int,
    total: int,
    feedback: str,
    reviews: Sequence[QuestionReview],
    notice: Optional[str] = None,
) -> RenderableType:
    percent = round(score / total * 100) if total else 0
    card = Text.assemble(
        (f"{score}/{total}", "bold magenta"),
        (f"  ({percent}%)", "dim"),
        ("\n", ""),
        (feedback, "bold"),
    )
    parts: list[RenderableType] = [
        Text(topic, style="italic"),
        card,
    ]
    for review in reviews:
        border = "green" if review.is_correct else "red"
        lines = Text()
        lines.append(f"Your answer: {review.selected_text}\n")
        if not review.is_correct:
            lines.append(
                f"Correct answer: {review.correct_text}\n", style="green"
            )
        if review.explanation:
            lines.append(review.explanation, style="dim")
        parts.append(
            Panel(
                lines,
                title=f"{review.number}. {review.question}",
                title_align="left",
                border_style=border,
            )
        )
    if notice:
        parts.append(Text(notice, style="bold green"))
    parts.append(
        Text("x share, r try again, h new quiz, s save", style="dim")
    )
    return Panel(Group(*parts), title="Results", border_style="magenta")


def render_screen(controller: QuizController) -> RenderableType:
    state = controller.state
    if state in (SessionState.HOME, SessionState.GENERATING):
        return render_home(
            controller.topic,
            controller.saved_quizzes,
            error=controller.error,
            generating=state is SessionState.GENERATING,
        )
    quiz = controller.quiz
    if quiz is None or quiz.total == 0:
        return render_home(
            controller.topic, controller.saved_quizzes, error=controller.error
        )
    if state is SessionState.PLAYING:
        return render_question(
            quiz.questions[controller.index],
            topic=quiz.topic,
            index=controller.index,
            total=quiz.total,
            selected=controller.current_answer,
            remaining=controller.remaining,
        )
    return render_results(
        topic=quiz.topic,
        score=controller.score,
        total=quiz.total,
        feedback=controller.feedback,
        reviews=controller.review(),
        notice=controller.notice or controller.error,
    )


class QuizApp(App):
    CSS_PATH = None
    CSS = """
#screen { height: auto; }
#actions Button { margin: 0 1; }
#saved Button { margin: 0 1; }
"""
    BINDINGS = [
        ("a", "select(0)", "A"),
        ("b", "select(1)", "B"),
        ("c", "select(2)", "C"),
        ("d", "select(3)", "D"),
        ("n", "next", "Next"),
        ("p", "prev", "Prev"),
        ("s", "save", "Save"),
        ("r", "restart", "Try again"),
        ("h", "home", "Home"),
        ("x", "share", "Share"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, controller: QuizController):
        super().__init__()
        self.controller = controller
        self.controller.add_listener(self._on_controller_change)

    def compose(self) -> ComposeResult:
        yield Static(render_screen(self.controller), id="screen")
        yield Input(placeholder="Enter a topic", id="topic")
        with Horizontal(id="actions"):
            yield from self._action_buttons()
        with Vertical(id="saved"):
            yield from self._saved_buttons()
        yield Footer()

    # Pure helpers (testable without running App)
    def _action_buttons(self) -> list[Button]:
        state = self.controller.state
        if state is SessionState.HOME:
            return [Button("Generate Quiz", id="generate")]
        if state is SessionState.GENERATING:
            return [Button("Generating...", id="generate", disabled=True)]
        if state is SessionState.PLAYING:
            buttons = [
                Button(f"{key}", id=f"choice-{key}") for key in OPTION_KEYS
            ]
            buttons.append(
                Button(
                    "Previous",
                    id="prev",
                    disabled=self.controller.index == 0,
                )
            )
            buttons.append(
                Button(
                    "Finish" if self.controller.is_last_question else "Next",
                    id="next",
                    disabled=self.controller.current_answer is None,
                )
            )
            if not self.controller.is_current_saved:
                buttons.append(Button("Save Quiz", id="save"))
            buttons.append(Button("Home", id="home"))
            return buttons
        buttons = [Button("Share Result", id="share")]
        if not self.controller.is_current_saved:
            buttons.append(Button("Save Quiz", id="save"))
        buttons.append(Button("Try Again", id="restart"))
        buttons.append(Button("New Quiz", id="home"))
        return buttons

    def _saved_buttons(self) -> list[Button]:
        if self.controller.state is not SessionState.HOME:
            return []
        buttons: list[Button] = []
        for number, quiz in enumerate(self.controller.saved_quizzes, start=1):
            buttons.append(
                Button(f"Play {number}. {quiz.topic}", id=f"play-{number}")
            )
            buttons.append(Button(f"Delete {number}", id=f"delete-{number}"))
        return buttons

    def _saved_quiz_id(self, number: str) -> str | None:
        """Map a 1-based saved button number back to its quiz id."""

        if not number.isdigit():
            return None
        saved = self.controller.saved_quizzes
        position = int(number) - 1
        if not 0 <= position < len(saved):
            return None
        return saved[position].id

    def _controls_key(self) -> tuple[object, ...]:
        """Everything the button rows depend on; the clock is excluded."""

        controller = self.controller
        return (
            controller.state,
            controller.index,
            controller.current_answer is None,
            controller.is_current_saved,
            tuple(quiz.id for quiz in controller.saved_quizzes),
        )

    def on_mount(self) -> None:
        self._rendered_controls = self._controls_key()
        self._sync_topic_input()

    def _sync_topic_input(self) -> None:
        topic_input = self.query_one("#topic", Input)
        topic_input.display = self.controller.state is SessionState.HOME

    def _on_controller_change(self, _controller: QuizController) -> None:
        if not self.is_running:
            return
        self.query_one("#screen", Static).update(
            render_screen(self.controller)
        )
        key = self._controls_key()
        if key == getattr(self, "_rendered_controls", None):
            return
        self._rendered_controls = key
        self._sync_topic_input()
        self.run_worker(self._rebuild_controls(), exclusive=True, group="ui")

    async def _rebuild_controls(self) -> None:
        actions = self.query_one("#actions", Horizontal)
        await actions.remove_children()
        await actions.mount_all(self._action_buttons())
        saved = self.query_one("#saved", Vertical)
        await saved.remove_children()
        await saved.mount_all(self._saved_buttons())

    def submit_topic(self, topic: str) -> None:
        if self.controller.state is not SessionState.HOME:
            return
        self.run_worker(
            self.controller.submit_topic(topic),
            exclusive=True,
            group="generate",
        )

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.submit_topic(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = getattr(event.button, "id", "") or ""
        if bid == "generate":
            self.submit_topic(self.query_one("#topic", Input).value)
        elif bid.startswith("choice-"):
            self.action_select(OPTION_KEYS.index(bid[-1]))
        elif bid.startswith("play-"):
            quiz_id = self._saved_quiz_id(bid[len("play-"):])
            if quiz_id is not None:
                self.controller.load_saved_quiz(quiz_id)
        elif bid.startswith("delete-"):
            quiz_id = self._saved_quiz_id(bid[len("delete-"):])
            if quiz_id is not None:
                self.controller.delete_saved_quiz(quiz_id)
        elif bid == "next":
            self.action_next()
        elif bid == "prev":
            self.action_prev()
        elif bid == "save":
            self.action_save()
        elif bid == "restart":
            self.action_restart()
        elif bid == "home":
            self.action_home()
        elif bid == "share":
            self.action_share()

    def action_select(self, option: int) -> None:
        self.controller.select_answer(option)

    def action_next(self) -> None:
        self.controller.advance()

    def action_prev(self) -> None:
        self.controller.retreat()

    def action_save(self) -> None:
        if self.controller.save_current_quiz() and self.is_running:
            self.notify("Quiz saved.")

    def action_restart(self) -> None:
        self.controller.restart()

    def action_home(self) -> None:
        if self.controller.state is SessionState.PLAYING:
            self.controller.abandon()
        elif self.controller.state is SessionState.RESULTS:
            self.controller.new_quiz()

    def action_share(self) -> None:
        if self.controller.state is not SessionState.RESULTS:
            return
        self.run_worker(
            self.controller.share_result(clipboard=self.copy_to_clipboard),
            exclusive=True,
            group="share",
        )
