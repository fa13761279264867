"""Polling loop that turns wall-clock time into block completions.

The driver only polls while a session is running.  Each poll compares the
clock against the session deadline, so it doesn't matter how late or how
rarely a poll actually fires: one late poll still produces exactly one
``deadline_reached``.
"""

from __future__ import annotations

import time
from typing import Callable

from loguru import logger
from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .session import Session

Clock = Callable[[], float]

DEFAULT_POLL_INTERVAL_MS = 200
MIN_POLL_INTERVAL_MS = 50
MAX_POLL_INTERVAL_MS = 1000  # keeps the display accurate to the second


class TimingDriver(QObject):
    """Watches one session's deadline.

    Signals
    -------
    deadline_reached()
        The running block's deadline has passed.  Polling is already
        stopped; the owner completes the block and calls ``sync`` again.
    tick(remaining_seconds: int)
        The displayed second changed.
    keep_awake_changed(active: bool)
        A running session started or stopped existing.
    """

    deadline_reached = pyqtSignal()
    tick = pyqtSignal(int)
    keep_awake_changed = pyqtSignal(bool)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Clock = time.time,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._clock = clock
        self._session: Session | None = None
        self._firing = False
        self._keep_awake = False
        self._last_remaining: int | None = None

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(
            max(MIN_POLL_INTERVAL_MS, min(interval_ms, MAX_POLL_INTERVAL_MS))
        )
        self._qt_timer.timeout.connect(self._on_poll)

    # ── public API ────────────────────────────────────────────────────

    @property
    def interval_ms(self) -> int:
        return self._qt_timer.interval()

    @property
    def is_polling(self) -> bool:
        return self._qt_timer.isActive()

    @property
    def keep_awake(self) -> bool:
        return self._keep_awake

    def sync(self, session: Session | None) -> None:
        """Start or stop polling to match *session*'s state."""
        self._session = session
        running = (
            session is not None
            and not session.finished
            and not session.is_paused
            and session.deadline is not None
        )
        if running:
            if not self._qt_timer.isActive():
                self._qt_timer.start()
        else:
            self._qt_timer.stop()
        self._last_remaining = None
        self._set_keep_awake(running)

    def stop(self) -> None:
        self.sync(None)

    def poll(self) -> None:
        """Sample the clock once (the QTimer calls this)."""
        self._on_poll()

    # ── internal ──────────────────────────────────────────────────────

    def _on_poll(self) -> None:
        session = self._session
        if session is None or self._firing:
            return
        now = self._clock()

        if session.is_due(now):
            self._qt_timer.stop()
            self._firing = True
            try:
                logger.debug(
                    "Deadline reached for block {} ({:.3f}s late)",
                    session.current_block_index, now - session.deadline,
                )
                self.deadline_reached.emit()
            finally:
                self._firing = False
            return

        remaining = session.current_remaining(now)
        if remaining != self._last_remaining:
            self._last_remaining = remaining
            self.tick.emit(remaining)

    def _set_keep_awake(self, active: bool) -> None:
        if active != self._keep_awake:
            self._keep_awake = active
            self.keep_awake_changed.emit(active)
