"""Small display helpers shared by the widgets."""

from __future__ import annotations

from ..routines.models import BlockKind

KIND_LABELS: dict[BlockKind, str] = {
    BlockKind.PREP: "PREPARE",
    BlockKind.WORK: "WORK",
    BlockKind.REST: "REST",
    BlockKind.OTHER: "OTHER",
}

KIND_COLORS: dict[BlockKind, str] = {
    BlockKind.PREP: "#F9E2AF",
    BlockKind.WORK: "#F38BA8",
    BlockKind.REST: "#A6E3A1",
    BlockKind.OTHER: "#89B4FA",
}


def format_time(seconds: int) -> str:
    """``mm:ss`` with zero padding; minutes may exceed 59."""
    m, s = divmod(max(0, seconds), 60)
    return f"{m:02d}:{s:02d}"
