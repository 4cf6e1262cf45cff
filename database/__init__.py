"""Database package for the advisor's local storage."""
from .models import Base, KeyValueEntry
from .connection import (
    get_db_session,
    init_db,
    get_db_path,
)
from .kv_store import SqliteKeyValueStore

__all__ = [
    "Base",
    "KeyValueEntry",
    "get_db_session",
    "init_db",
    "get_db_path",
    "SqliteKeyValueStore",
]
