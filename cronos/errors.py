"""Exceptions raised by the Cronos core."""


class CronosError(Exception):
    """Base class for Cronos errors."""


class EmptyRoutine(CronosError):
    """Raised when a session is started on a routine with no blocks."""


class InvalidRoutine(CronosError):
    """Raised when a routine with a blank name or no blocks is saved."""


class SessionFinished(CronosError):
    """Raised when a transition is attempted on a terminated session."""
