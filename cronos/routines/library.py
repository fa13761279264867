"""The user's stored routine templates.

Loaded from the persistence port on construction and written back after
every change.  When nothing has been stored yet the two seed routines
below are used.
"""

from __future__ import annotations

import json
from datetime import datetime

from loguru import logger

from ..ports import PersistencePort
from .models import Block, BlockKind, Routine, validate_for_save

ROUTINES_KEY = "cronos_routines"


def default_routines() -> list[Routine]:
    return [
        Routine(
            id="tabata",
            name="Tabata Workout",
            blocks=(
                Block("Warm-up", 60, BlockKind.PREP, id="tabata-1"),
                Block("Sprints", 20, BlockKind.WORK, id="tabata-2"),
                Block("Rest", 10, BlockKind.REST, id="tabata-3"),
                Block("Sprints", 20, BlockKind.WORK, id="tabata-4"),
                Block("Rest", 10, BlockKind.REST, id="tabata-5"),
                Block("Cool-down", 90, BlockKind.REST, id="tabata-6"),
            ),
        ),
        Routine(
            id="study",
            name="Study Pomodoro",
            blocks=(
                Block("Focus", 25 * 60, BlockKind.WORK, id="study-1"),
                Block("Break", 5 * 60, BlockKind.REST, id="study-2"),
            ),
        ),
    ]


class RoutineLibrary:
    """Ordered collection of routines keyed by id."""

    def __init__(self, store: PersistencePort | None = None) -> None:
        self._store = store
        self._routines: list[Routine] = self._load()

    @property
    def routines(self) -> tuple[Routine, ...]:
        return tuple(self._routines)

    def __len__(self) -> int:
        return len(self._routines)

    def get(self, routine_id: str) -> Routine | None:
        for routine in self._routines:
            if routine.id == routine_id:
                return routine
        return None

    def save(self, routine: Routine) -> Routine:
        """Insert or replace *routine*.  Raises ``InvalidRoutine``."""
        validate_for_save(routine)
        for i, existing in enumerate(self._routines):
            if existing.id == routine.id:
                self._routines[i] = routine
                break
        else:
            self._routines.append(routine)
        logger.info(
            "Saved routine {!r} ({} blocks, {}s)",
            routine.name, routine.block_count, routine.total_duration,
        )
        self._persist()
        return routine

    def delete(self, routine_id: str) -> bool:
        """Remove a routine.  The caller has already asked the user."""
        before = len(self._routines)
        self._routines = [r for r in self._routines if r.id != routine_id]
        if len(self._routines) == before:
            return False
        logger.info("Deleted routine {}", routine_id)
        self._persist()
        return True

    def mark_played(self, routine_id: str, when: datetime) -> None:
        for i, routine in enumerate(self._routines):
            if routine.id == routine_id:
                self._routines[i] = routine.played_at(when)
                self._persist()
                return

    # ── persistence ───────────────────────────────────────────────────

    def _load(self) -> list[Routine]:
        if self._store is None:
            return default_routines()
        raw = self._store.load(ROUTINES_KEY)
        if raw is None:
            return default_routines()
        try:
            return [Routine.from_dict(d) for d in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable routines ({}); using defaults", exc)
            return default_routines()

    def _persist(self) -> None:
        if self._store is None:
            return
        self._store.save(
            ROUTINES_KEY, json.dumps([r.to_dict() for r in self._routines]),
        )
