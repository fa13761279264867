"""Database package."""

from .db import configure_engine, get_session, init_db
from .models import StoredValue
from .store import SqlKeyValueStore

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "StoredValue",
    "SqlKeyValueStore",
]
