"""Session runner: the one owner of the live session.

The runner takes UI commands, applies them to the session, dispatches the
side effects the session asks for and appends the history entry when the
session ends.  It is the only object that ever holds a ``Session``, so at
most one routine can be running at a time.

Cues, notifications and the wake lock are conveniences: any exception they
raise is logged and dropped here so it can never disturb a transition.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Callable

from loguru import logger
from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..history.recorder import HistoryEntry, HistoryRecorder
from ..ports import AudioCuePort, Cue, NotificationPort, NullAudio, NullNotifier, NullWakeLock, WakeLockPort
from ..routines.models import Routine
from .driver import Clock, DEFAULT_POLL_INTERVAL_MS, TimingDriver
from .session import (
    CueRequest,
    Effect,
    NotifyRequest,
    RunnerState,
    Session,
    START_CUE_DELAY_MS,
)

Defer = Callable[[int, Callable[[], None]], None]

DEFAULT_COUNTDOWN_CUES = 3


def _qt_defer(delay_ms: int, callback: Callable[[], None]) -> None:
    QTimer.singleShot(delay_ms, callback)


class SessionRunner(QObject):
    """Runs routines one at a time.

    Signals
    -------
    state_changed(new_state: RunnerState)
        Emitted on every state transition (including block changes).
    tick(remaining_seconds: int)
        Emitted when the displayed second changes.
    block_changed(index: int)
        Emitted when a session starts and when it advances to a new block.
    session_finished(entry: HistoryEntry)
        Emitted after the entry has been appended to history.
    """

    state_changed = pyqtSignal(object)
    tick = pyqtSignal(int)
    block_changed = pyqtSignal(int)
    session_finished = pyqtSignal(object)

    def __init__(
        self,
        history: HistoryRecorder,
        parent: QObject | None = None,
        *,
        audio: AudioCuePort | None = None,
        notifier: NotificationPort | None = None,
        wake_lock: WakeLockPort | None = None,
        clock: Clock = time.time,
        defer: Defer = _qt_defer,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        start_cue_delay_ms: int = START_CUE_DELAY_MS,
        countdown_cues: int = DEFAULT_COUNTDOWN_CUES,
        on_started: Callable[[Routine, datetime], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self._history = history
        self._audio: AudioCuePort = audio or NullAudio()
        self._notifier: NotificationPort = notifier or NullNotifier()
        self._wake_lock: WakeLockPort = wake_lock or NullWakeLock()
        self._clock = clock
        self._defer = defer
        self._start_cue_delay_ms = start_cue_delay_ms
        self._countdown_cues = countdown_cues
        self._on_started = on_started

        self._session: Session | None = None
        self._wake_handle: Any | None = None
        self._last_countdown_cue: int | None = None

        self._driver = TimingDriver(self, clock=clock, interval_ms=poll_interval_ms)
        self._driver.deadline_reached.connect(self._on_deadline_reached)
        self._driver.tick.connect(self._on_driver_tick)
        self._driver.keep_awake_changed.connect(self._on_keep_awake_changed)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def driver(self) -> TimingDriver:
        return self._driver

    @property
    def history(self) -> HistoryRecorder:
        return self._history

    @property
    def state(self) -> RunnerState:
        if self._session is None:
            return RunnerState.IDLE
        return self._session.state

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def remaining(self) -> int:
        """Seconds left on the current block (0 when idle)."""
        if self._session is None:
            return 0
        return self._session.current_remaining(self._clock())

    @property
    def progress(self) -> float:
        if self._session is None:
            return 0.0
        return self._session.block_progress(self._clock())

    @property
    def wake_lock_held(self) -> bool:
        return self._wake_handle is not None

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, routine: Routine) -> Session | None:
        """Start *routine*.  Raises ``EmptyRoutine``.

        Ignored (returns None) while another session is active.
        """
        if self._session is not None:
            logger.warning(
                "Ignoring start of {!r}: {!r} is still running",
                routine.name, self._session.routine.name,
            )
            return None
        now = self._clock()
        session = Session.start(
            routine, now, start_cue_delay_ms=self._start_cue_delay_ms,
        )
        self._session = session
        self._last_countdown_cue = None
        self._after_transition()
        self.block_changed.emit(session.current_block_index)
        if self._on_started is not None:
            self._on_started(routine, datetime.fromtimestamp(now))
        return session

    def pause(self) -> None:
        if self._session is None or self._session.is_paused:
            return
        self._session.pause(self._clock())
        self._after_transition()

    def resume(self) -> None:
        if self._session is None or not self._session.is_paused:
            return
        self._session.resume(self._clock())
        self._after_transition()

    def toggle_pause(self) -> None:
        if self._session is None:
            return
        if self._session.is_paused:
            self.resume()
        else:
            self.pause()

    def adjust_time(self, delta_seconds: int) -> None:
        if self._session is None:
            return
        before = self._session.current_remaining(self._clock())
        self._session.adjust_time(delta_seconds, self._clock())
        if self._session.current_remaining(self._clock()) != before:
            self._last_countdown_cue = None
        self._after_transition()

    def skip(self) -> None:
        """Complete the current block now; same path as a natural timeout."""
        if self._session is None:
            return
        self._complete_current_block()

    def quit(self) -> HistoryEntry | None:
        """Abort the session.  The caller has already asked the user."""
        if self._session is None:
            return None
        session = self._session
        self._driver.stop()
        entry = session.quit(self._clock())
        self._finish(session, entry)
        return entry

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: transitions
    # ══════════════════════════════════════════════════════════════════

    def _on_deadline_reached(self) -> None:
        if self._session is None:
            return
        self._complete_current_block()

    def _complete_current_block(self) -> None:
        session = self._session
        entry = session.complete_block(self._clock())
        if entry is not None:
            self._driver.stop()
            self._finish(session, entry)
            return
        self._last_countdown_cue = None
        self._after_transition()
        self.block_changed.emit(session.current_block_index)

    def _finish(self, session: Session, entry: HistoryEntry) -> None:
        self._session = None
        self._dispatch(session.take_effects())
        try:
            self._history.append(entry)
        finally:
            self.state_changed.emit(RunnerState.IDLE)
            self.session_finished.emit(entry)

    def _after_transition(self) -> None:
        session = self._session
        self._dispatch(session.take_effects())
        self._driver.sync(session)
        self.state_changed.emit(session.state)
        self.tick.emit(session.current_remaining(self._clock()))

    def _on_driver_tick(self, remaining: int) -> None:
        if (
            0 < remaining <= self._countdown_cues
            and remaining != self._last_countdown_cue
        ):
            self._last_countdown_cue = remaining
            self._play(Cue.TICK)
        self.tick.emit(remaining)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: side effects
    # ══════════════════════════════════════════════════════════════════

    def _dispatch(self, effects: list[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, CueRequest):
                if effect.delay_ms > 0:
                    self._defer(
                        effect.delay_ms,
                        lambda c=effect.cue, s=self._session: self._play_if_current(c, s),
                    )
                else:
                    self._play(effect.cue)
            elif isinstance(effect, NotifyRequest):
                self._notify(effect.title, effect.body)

    def _play_if_current(self, cue: Cue, session: Session | None) -> None:
        # Dropped when the session that asked for it has ended since
        if session is None or self._session is not session:
            return
        self._play(cue)

    def _play(self, cue: Cue) -> None:
        try:
            self._audio.play_cue(cue)
        except Exception:
            logger.opt(exception=True).warning("Audio cue {} failed", cue.value)

    def _notify(self, title: str, body: str) -> None:
        try:
            self._notifier.notify(title, body)
        except Exception:
            logger.opt(exception=True).warning("Notification {!r} failed", title)

    def _on_keep_awake_changed(self, active: bool) -> None:
        if active:
            if self._wake_handle is not None:
                return
            try:
                self._wake_handle = self._wake_lock.acquire()
            except Exception:
                logger.opt(exception=True).warning("Wake lock unavailable")
                self._wake_handle = None
            return
        handle, self._wake_handle = self._wake_handle, None
        if handle is None:
            return
        try:
            self._wake_lock.release(handle)
        except Exception:
            logger.opt(exception=True).warning("Wake lock release failed")
