"""Repositories package - local cache and remote store access."""

from app.repositories.base import BaseRepository
from app.repositories.db import (
    close_db,
    connect,
    get_db,
    init_tables,
)
from app.repositories.local import LocalCacheRepository
from app.repositories.remote import (
    DocumentBackend,
    FirestoreBackend,
    RemoteShardedStore,
    get_firestore_client,
)

__all__ = [
    # DB
    "get_db",
    "close_db",
    "init_tables",
    "connect",
    # Base
    "BaseRepository",
    # Local
    "LocalCacheRepository",
    # Remote
    "DocumentBackend",
    "FirestoreBackend",
    "RemoteShardedStore",
    "get_firestore_client",
]
