"""Synchronous key-value storage on top of the SQLite database."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from shared.errors import PersistenceError, StorageQuotaExceededError, StorageReadError

from . import connection
from .models import KeyValueEntry

_logger = logging.getLogger("advisor")


class SqliteKeyValueStore:
    """String values keyed by string, persisted in the ``kv_entries`` table.

    ``set`` enforces an optional per-value byte quota and raises
    instead of truncating.
    """

    def __init__(self, max_value_bytes: Optional[int] = None):
        self.max_value_bytes = max_value_bytes
        connection.init_db()

    def get(self, key: str) -> Optional[str]:
        try:
            with connection.get_db_session() as db:
                entry = db.get(KeyValueEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            _logger.warning("Storage read failed for %s: %r", key, e)
            raise StorageReadError() from e

    def set(self, key: str, value: str) -> None:
        size = len(value.encode("utf-8"))
        if self.max_value_bytes is not None and size > self.max_value_bytes:
            raise StorageQuotaExceededError()
        try:
            with connection.get_db_session() as db:
                entry = db.get(KeyValueEntry, key)
                if entry is None:
                    db.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
                    entry.updated_at = datetime.utcnow()
        except SQLAlchemyError as e:
            raise PersistenceError() from e
        _logger.debug("Stored %d bytes under %s", size, key)

    def delete(self, key: str) -> None:
        try:
            with connection.get_db_session() as db:
                entry = db.get(KeyValueEntry, key)
                if entry is not None:
                    db.delete(entry)
        except SQLAlchemyError as e:
            raise PersistenceError() from e
