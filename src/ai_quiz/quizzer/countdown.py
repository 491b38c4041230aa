"""Session countdown backed by a single cancellable asyncio task."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

__all__ = ["Countdown"]

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], None]
ExpireCallback = Callable[[], None]


class Countdown:
    """Tick once per ``interval`` until zero, then fire ``on_expire`` once.

    ``stop`` cancels the task synchronously and bumps a generation counter,
    so a tick already scheduled by a superseded task is discarded instead
    of mutating the next session.
    """

    def __init__(
        self,
        *,
        interval: float = 1.0,
        on_tick: Optional[TickCallback] = None,
        on_expire: Optional[ExpireCallback] = None,
    ) -> None:
        self.interval = interval
        self.on_tick = on_tick
        self.on_expire = on_expire
        self._remaining = 0
        self._running = False
        self._generation = 0
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._running

    def start(self, seconds: int) -> None:
        """Restart the clock at ``seconds``. Needs a running event loop."""

        if seconds <= 0:
            raise ValueError("countdown needs a positive number of seconds")
        self.stop()
        loop = asyncio.get_running_loop()
        self._remaining = seconds
        self._running = True
        self._task = loop.create_task(self._run(self._generation))
        logger.debug("Countdown started", extra={"seconds": seconds})

    def stop(self) -> bool:
        """Stop ticking. Returns ``True`` if the clock was running."""

        was_running = self._running
        self._running = False
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        if was_running:
            logger.debug(
                "Countdown stopped", extra={"remaining": self._remaining}
            )
        return was_running

    def reset(self, seconds: int) -> None:
        """Stop and set the remaining time without starting."""

        self.stop()
        self._remaining = seconds

    def tick(self) -> None:
        """Advance the clock by one step; a no-op once stopped."""

        if not self._running:
            return
        self._remaining = max(0, self._remaining - 1)
        if self.on_tick is not None:
            try:
                self.on_tick(self._remaining)
            except Exception:
                logger.exception(
                    "Countdown tick callback failed",
                    extra={"remaining": self._remaining},
                )
        if self._remaining == 0:
            self.stop()
            logger.info("Countdown expired")
            if self.on_expire is not None:
                self.on_expire()

    async def _run(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if generation != self._generation:
                return
            try:
                self.tick()
            except Exception:
                logger.exception("Countdown expiry callback failed")
                self.stop()
                return
            if not self._running:
                return
