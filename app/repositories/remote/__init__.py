"""Remote store repositories."""

from app.repositories.remote.backend import BackendBatch, DailyDoc, DocumentBackend, ShardDoc
from app.repositories.remote.firestore import FirestoreBackend, get_firestore_client
from app.repositories.remote.store import OPS_PER_RECORD, BatchChain, CappedBatch, RemoteShardedStore

__all__ = [
    # Backend contract
    "DocumentBackend",
    "BackendBatch",
    "ShardDoc",
    "DailyDoc",
    # Firestore
    "FirestoreBackend",
    "get_firestore_client",
    # Store
    "RemoteShardedStore",
    "BatchChain",
    "CappedBatch",
    "OPS_PER_RECORD",
]
