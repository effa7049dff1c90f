"""Cloud Firestore implementation of the document backend."""

from collections.abc import Iterator
from contextlib import contextmanager

from google.api_core.exceptions import GoogleAPICallError, RetryError
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath
from loguru import logger

from app.errors import ConnectivityError
from app.repositories.remote.backend import DailyDoc, ShardDoc

DAILY_COLLECTION = "daily"


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    """Re-raise Google API failures as ConnectivityError."""
    try:
        yield
    except (GoogleAPICallError, RetryError) as e:
        raise ConnectivityError(f"Firestore {action} failed: {e}") from e


def get_firestore_client(project: str | None = None, credentials_path: str | None = None) -> firestore.AsyncClient:
    """Return an async Firestore client using an optional service account JSON."""
    if credentials_path:
        return firestore.AsyncClient.from_service_account_json(credentials_path)
    return firestore.AsyncClient(project=project)


class FirestoreBatch:
    """Thin wrapper over a Firestore write batch."""

    def __init__(self, backend: "FirestoreBackend"):
        self._backend = backend
        self._batch = backend.client.batch()

    def upsert_shard(self, shard_id: str, data: dict) -> None:
        self._batch.set(self._backend.shard_ref(shard_id), data, merge=True)

    def set_daily(self, shard_id: str, date: str, data: dict) -> None:
        self._batch.set(self._backend.daily_ref(shard_id).document(date), data)

    def delete_daily(self, shard_id: str, date: str) -> None:
        self._batch.delete(self._backend.daily_ref(shard_id).document(date))

    def delete_shard(self, shard_id: str) -> None:
        self._batch.delete(self._backend.shard_ref(shard_id))

    async def commit(self) -> None:
        with _translate_errors("batch commit"):
            await self._batch.commit()


class FirestoreBackend:
    """Shard collection with dated child collections in Firestore."""

    def __init__(self, client: firestore.AsyncClient, collection: str = "demandRecords"):
        self.client = client
        self._collection = client.collection(collection)
        logger.info("FirestoreBackend: collection={}", collection)

    def shard_ref(self, shard_id: str):
        return self._collection.document(shard_id)

    def daily_ref(self, shard_id: str):
        return self.shard_ref(shard_id).collection(DAILY_COLLECTION)

    def batch(self) -> FirestoreBatch:
        return FirestoreBatch(self)

    async def list_shards(
        self,
        client: str | None = None,
        city: str | None = None,
        limit: int | None = None,
    ) -> list[ShardDoc]:
        query = self._collection
        if client:
            query = query.where(filter=FieldFilter("client", "==", client))
        if city:
            query = query.where(filter=FieldFilter("city", "==", city))
        if limit:
            query = query.limit(limit)

        with _translate_errors("shard query"):
            docs = await query.get()
        return [ShardDoc(d.id, d.to_dict() or {}) for d in docs]

    async def list_daily(self, shard_id: str) -> list[DailyDoc]:
        with _translate_errors(f"daily listing for {shard_id}"):
            docs = await self.daily_ref(shard_id).get()
        return [DailyDoc(d.id, d.to_dict() or {}) for d in docs]

    async def get_daily(self, shard_id: str, date: str) -> dict | None:
        with _translate_errors(f"daily read {shard_id}/{date}"):
            snap = await self.daily_ref(shard_id).document(date).get()
        return snap.to_dict() if snap.exists else None

    async def query_daily_range(self, shard_id: str, start: str, end: str) -> list[DailyDoc]:
        daily = self.daily_ref(shard_id)
        doc_id = FieldPath.document_id()
        query = (
            daily.where(filter=FieldFilter(doc_id, ">=", daily.document(start)))
            .where(filter=FieldFilter(doc_id, "<=", daily.document(end)))
            .order_by(doc_id)
        )
        with _translate_errors(f"daily range {shard_id}"):
            docs = await query.get()
        return [DailyDoc(d.id, d.to_dict() or {}) for d in docs]
