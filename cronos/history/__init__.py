"""History package."""

from .recorder import HistoryEntry, HistoryRecorder, HistoryStatus, HISTORY_KEY

__all__ = ["HistoryEntry", "HistoryRecorder", "HistoryStatus", "HISTORY_KEY"]
