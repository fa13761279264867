"""Key-value persistence port backed by the SQLite database.

Routines and history are stored as opaque JSON snapshots, one row per
collection, and re-loaded verbatim.
"""

from __future__ import annotations

from .db import get_session
from .models import StoredValue


class SqlKeyValueStore:
    """``load(key)`` / ``save(key, value)`` over the ``stored_values`` table."""

    def load(self, key: str) -> str | None:
        with get_session() as db:
            row = db.get(StoredValue, key)
            return row.value if row is not None else None

    def save(self, key: str, value: str) -> None:
        with get_session() as db:
            row = db.get(StoredValue, key)
            if row is None:
                db.add(StoredValue(key=key, value=value))
            else:
                row.value = value

    def delete(self, key: str) -> None:
        with get_session() as db:
            row = db.get(StoredValue, key)
            if row is not None:
                db.delete(row)
