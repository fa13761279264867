"""Session state machine for Cronos.

A ``Session`` is the live execution of one routine.  It holds no timers
and performs no I/O: every operation receives the current wall-clock time
(epoch seconds) and side effects are queued as requests for the owner to
drain with ``take_effects()``.

States
------
IDLE      No session exists (the owner holds ``None``).
RUNNING   Counting down; ``deadline`` is authoritative.
PAUSED    Frozen; ``remaining_seconds`` is authoritative.

Transitions
-----------
IDLE → RUNNING(0)                          (start)
RUNNING(i) ⇄ PAUSED(i)                     (pause / resume)
RUNNING(i) | PAUSED(i) → RUNNING(i + 1)    (deadline reached / skip)
RUNNING(last) | PAUSED(last) → IDLE        (deadline reached / skip, COMPLETED)
Any → IDLE                                 (quit, ABORTED)

Remaining time is always derived from ``deadline - now`` and never from a
decrementing counter, so a suspended process sees the right value as soon
as it samples the clock again.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from loguru import logger

from ..errors import EmptyRoutine, SessionFinished
from ..history.recorder import HistoryEntry
from ..ports import Cue
from ..routines.models import Block, Routine


class RunnerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


START_CUE_DELAY_MS = 500  # keeps the "end" and "start" cues audibly apart
MIN_REMAINING_AFTER_ADJUST = 1


# ── side-effect requests ──────────────────────────────────────────────────


@dataclass(frozen=True)
class CueRequest:
    cue: Cue
    delay_ms: int = 0


@dataclass(frozen=True)
class NotifyRequest:
    title: str
    body: str


Effect = CueRequest | NotifyRequest


# ── session ───────────────────────────────────────────────────────────────


class Session:
    """One running routine.  Create with ``Session.start``."""

    def __init__(
        self,
        routine: Routine,
        now: float,
        *,
        start_cue_delay_ms: int = START_CUE_DELAY_MS,
    ) -> None:
        if not routine.blocks:
            raise EmptyRoutine(f"routine {routine.name!r} has no blocks")

        self._routine = routine
        self._start_cue_delay_ms = start_cue_delay_ms
        self._index = 0
        self._paused = False
        first = routine.blocks[0].duration
        self._deadline: float | None = now + first
        self._remaining = first
        self._finished = False
        self._effects: list[Effect] = [CueRequest(Cue.START)]

    @classmethod
    def start(
        cls,
        routine: Routine,
        now: float,
        *,
        start_cue_delay_ms: int = START_CUE_DELAY_MS,
    ) -> Session:
        """Begin *routine* at block 0.  Raises ``EmptyRoutine``."""
        session = cls(routine, now, start_cue_delay_ms=start_cue_delay_ms)
        logger.info(
            "Session started: {!r} ({} blocks, {}s)",
            routine.name, routine.block_count, routine.total_duration,
        )
        return session

    # ══════════════════════════════════════════════════════════════════
    #  QUERIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def routine(self) -> Routine:
        return self._routine

    @property
    def current_block_index(self) -> int:
        return self._index

    @property
    def current_block(self) -> Block:
        return self._routine.blocks[self._index]

    @property
    def next_block(self) -> Block | None:
        if self.is_last_block:
            return None
        return self._routine.blocks[self._index + 1]

    @property
    def is_last_block(self) -> bool:
        return self._index == len(self._routine.blocks) - 1

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def deadline(self) -> float | None:
        """Wall-clock instant the current block ends; None while paused."""
        return self._deadline

    @property
    def remaining_seconds(self) -> int:
        """Frozen remainder.  Only meaningful while paused."""
        return self._remaining

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def state(self) -> RunnerState:
        if self._finished:
            return RunnerState.IDLE
        return RunnerState.PAUSED if self._paused else RunnerState.RUNNING

    def current_remaining(self, now: float) -> int:
        """Whole seconds left on the current block, never negative."""
        if self._finished:
            return 0
        if self._paused:
            return self._remaining
        return max(0, math.ceil(self._deadline - now))

    def is_due(self, now: float) -> bool:
        """True when a running block has reached its deadline."""
        return (
            not self._finished
            and not self._paused
            and self._deadline is not None
            and now >= self._deadline
        )

    def block_progress(self, now: float) -> float:
        """0.0 → 1.0 progress through the current block."""
        duration = self.current_block.duration
        elapsed = duration - self.current_remaining(now)
        return max(0.0, min(1.0, elapsed / duration))

    def take_effects(self) -> list[Effect]:
        """Return and clear the side-effect requests queued so far."""
        effects, self._effects = self._effects, []
        return effects

    # ══════════════════════════════════════════════════════════════════
    #  TRANSITIONS
    # ══════════════════════════════════════════════════════════════════

    def pause(self, now: float) -> None:
        self._require_active("pause")
        if self._paused:
            return
        self._remaining = self.current_remaining(now)
        self._deadline = None
        self._paused = True
        logger.debug("Paused at block {} with {}s left", self._index, self._remaining)

    def resume(self, now: float) -> None:
        self._require_active("resume")
        if not self._paused:
            return
        self._deadline = now + self._remaining
        self._paused = False
        logger.debug("Resumed block {} with {}s left", self._index, self._remaining)

    def adjust_time(self, delta_seconds: int, now: float) -> None:
        """Add (or remove) time from the current block.

        The result never drops below one second, so an adjustment can't
        complete a block outside the normal completion path.
        """
        self._require_active("adjust_time")
        new_remaining = max(
            MIN_REMAINING_AFTER_ADJUST,
            self.current_remaining(now) + delta_seconds,
        )
        if self._paused:
            self._remaining = new_remaining
        else:
            self._deadline = now + new_remaining
        logger.debug("Adjusted block {} by {}s → {}s", self._index, delta_seconds, new_remaining)

    def skip(self, now: float) -> HistoryEntry | None:
        """Finish the current block right away, paused or not."""
        return self.complete_block(now)

    def complete_block(self, now: float) -> HistoryEntry | None:
        """Close the current block and move on.

        Returns the COMPLETED history entry when this was the last block,
        otherwise None.
        """
        self._require_active("complete_block")
        finished = self.current_block
        self._effects.append(CueRequest(Cue.END))
        self._effects.append(
            NotifyRequest("Block finished", f"{finished.name} has finished."),
        )

        if not self.is_last_block:
            self._index += 1
            duration = self.current_block.duration
            self._deadline = now + duration
            self._remaining = duration
            self._paused = False
            self._effects.append(CueRequest(Cue.START, self._start_cue_delay_ms))
            logger.info(
                "Block {}/{}: {} ({}s)",
                self._index + 1, self._routine.block_count,
                self.current_block.name, duration,
            )
            return None

        self._terminate()
        self._effects.append(
            NotifyRequest("Routine complete", f"{self._routine.name} is done."),
        )
        logger.info("Session completed: {!r}", self._routine.name)
        return HistoryEntry.completed(
            self._routine.name,
            self._routine.total_duration,
            datetime.fromtimestamp(now),
        )

    def quit(self, now: float) -> HistoryEntry:
        """Abort the session from any state."""
        self._require_active("quit")
        self._terminate()
        logger.info(
            "Session aborted: {!r} at block {}", self._routine.name, self._index,
        )
        return HistoryEntry.aborted(self._routine.name, datetime.fromtimestamp(now))

    # ── internal ──────────────────────────────────────────────────────

    def _terminate(self) -> None:
        self._finished = True
        self._deadline = None
        self._paused = False

    def _require_active(self, operation: str) -> None:
        if self._finished:
            raise SessionFinished(f"cannot {operation}: session has ended")
