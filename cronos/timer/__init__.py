"""Timer package."""

from .session import (
    Session,
    RunnerState,
    CueRequest,
    NotifyRequest,
    START_CUE_DELAY_MS,
)
from .driver import TimingDriver, DEFAULT_POLL_INTERVAL_MS
from .runner import SessionRunner, DEFAULT_COUNTDOWN_CUES

__all__ = [
    "Session",
    "RunnerState",
    "CueRequest",
    "NotifyRequest",
    "START_CUE_DELAY_MS",
    "TimingDriver",
    "DEFAULT_POLL_INTERVAL_MS",
    "SessionRunner",
    "DEFAULT_COUNTDOWN_CUES",
]
