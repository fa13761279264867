"""Routines package."""

from .models import (
    Block,
    BlockKind,
    Routine,
    new_block,
    validate_for_save,
)
from .library import RoutineLibrary, default_routines, ROUTINES_KEY

__all__ = [
    "Block",
    "BlockKind",
    "Routine",
    "new_block",
    "validate_for_save",
    "RoutineLibrary",
    "default_routines",
    "ROUTINES_KEY",
]
