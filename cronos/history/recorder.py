"""Append-only log of finished sessions.

Every session that ends, whether it ran to the last block or was quit,
leaves exactly one ``HistoryEntry``.  Entries are never edited or removed.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from loguru import logger

from ..ports import PersistencePort

HISTORY_KEY = "cronos_history"


class HistoryStatus(Enum):
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


@dataclass(frozen=True)
class HistoryEntry:
    routine_name: str
    date: datetime
    total_time: int  # seconds; 0 when aborted
    status: HistoryStatus
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    @classmethod
    def completed(cls, routine_name: str, total_time: int, when: datetime) -> HistoryEntry:
        return cls(
            routine_name=routine_name,
            date=when,
            total_time=total_time,
            status=HistoryStatus.COMPLETED,
        )

    @classmethod
    def aborted(cls, routine_name: str, when: datetime) -> HistoryEntry:
        return cls(
            routine_name=routine_name,
            date=when,
            total_time=0,
            status=HistoryStatus.ABORTED,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "routine_name": self.routine_name,
            "date": self.date.isoformat(),
            "total_time": self.total_time,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> HistoryEntry:
        return cls(
            id=str(data["id"]),
            routine_name=str(data["routine_name"]),
            date=datetime.fromisoformat(data["date"]),
            total_time=int(data["total_time"]),
            status=HistoryStatus(data["status"]),
        )


class HistoryRecorder:
    """Insertion-ordered history, persisted after every append."""

    def __init__(self, store: PersistencePort | None = None) -> None:
        self._store = store
        self._entries: list[HistoryEntry] = self._load()

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)
        logger.info(
            "History: {} {} ({}s)",
            entry.status.value, entry.routine_name, entry.total_time,
        )
        self._persist()

    def newest_first(self) -> list[HistoryEntry]:
        """Entries sorted by date, most recent first (for display)."""
        return sorted(self._entries, key=lambda e: e.date, reverse=True)

    # ── persistence ───────────────────────────────────────────────────

    def _load(self) -> list[HistoryEntry]:
        if self._store is None:
            return []
        raw = self._store.load(HISTORY_KEY)
        if raw is None:
            return []
        try:
            return [HistoryEntry.from_dict(d) for d in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable history ({}); starting empty", exc)
            return []

    def _persist(self) -> None:
        """Write all entries.  A failed write keeps them in memory only."""
        if self._store is None:
            return
        try:
            self._store.save(
                HISTORY_KEY, json.dumps([e.to_dict() for e in self._entries]),
            )
        except Exception:
            logger.opt(exception=True).error(
                "Could not save history; {} entries kept in memory", len(self._entries),
            )
