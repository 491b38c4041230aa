"""Share a finished quiz result through whatever the host platform offers."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

__all__ = [
    "ShareMessage",
    "ShareOutcome",
    "ShareTarget",
    "format_share_text",
    "share_message",
]

logger = logging.getLogger(__name__)

ShareMethod = Literal["native", "clipboard", "failed"]


@dataclass(frozen=True)
class ShareMessage:
    title: str
    text: str
    url: Optional[str] = None

    @property
    def clipboard_text(self) -> str:
        if not self.url:
            return self.text
        return f"{self.text}\n\nPlay here: {self.url}"


@dataclass(frozen=True)
class ShareOutcome:
    method: ShareMethod
    message: str

    @property
    def ok(self) -> bool:
        return self.method != "failed"


# A native share target receives the whole message; a clipboard target only
# the text. Either may be sync or async and signals failure by raising.
ShareTarget = Callable[[Any], Any]


def format_share_text(score: int, total: int, topic: str) -> str:
    return (
        f'🎯 I scored {score}/{total} on the "{topic}" quiz! '
        "Can you beat my score?"
    )


async def _call(target: ShareTarget, argument: Any) -> None:
    result = target(argument)
    if inspect.isawaitable(result):
        await result


async def share_message(
    message: ShareMessage,
    *,
    native: Optional[ShareTarget] = None,
    clipboard: Optional[ShareTarget] = None,
) -> ShareOutcome:
    """Try ``native`` first, then ``clipboard``. Never raises."""

    if native is not None:
        try:
            await _call(native, message)
            return ShareOutcome("native", "Result shared.")
        except Exception as exc:
            logger.info(
                "Native share failed, falling back to clipboard",
                extra={"error": repr(exc)},
            )

    if clipboard is not None:
        try:
            await _call(clipboard, message.clipboard_text)
            return ShareOutcome(
                "clipboard",
                "Result copied to clipboard! Share it with your friends.",
            )
        except Exception as exc:
            logger.error("Failed to copy result", extra={"error": repr(exc)})

    return ShareOutcome("failed", "Sharing is not available here.")
