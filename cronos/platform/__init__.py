"""Platform integrations."""

from .wake_lock import ProcessWakeLock, default_command

__all__ = ["ProcessWakeLock", "default_command"]
