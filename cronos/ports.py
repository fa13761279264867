"""Interfaces the core expects the surrounding application to provide.

The timing engine never performs I/O itself: it asks these collaborators
to persist data, play cues, show notifications and keep the screen awake.
All of them except persistence are best-effort.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol


class Cue(Enum):
    START = "start"
    TICK = "tick"
    END = "end"


class PersistencePort(Protocol):
    def load(self, key: str) -> str | None: ...

    def save(self, key: str, value: str) -> None: ...


class NotificationPort(Protocol):
    def notify(self, title: str, body: str) -> None: ...


class AudioCuePort(Protocol):
    def play_cue(self, cue: Cue) -> None: ...


class WakeLockPort(Protocol):
    def acquire(self) -> Any | None:
        """Return an opaque handle, or None when the lock isn't available."""
        ...

    def release(self, handle: Any) -> None: ...


class ConfirmationPort(Protocol):
    def confirm(self, title: str, question: str) -> bool: ...


class NullNotifier:
    def notify(self, title: str, body: str) -> None:
        pass


class NullAudio:
    def play_cue(self, cue: Cue) -> None:
        pass


class NullWakeLock:
    def acquire(self) -> None:
        return None

    def release(self, handle: Any) -> None:
        pass
