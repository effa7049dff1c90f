"""Dependency Injection container - initialized at app startup."""

from app.repositories.local import LocalCacheRepository
from app.repositories.remote import FirestoreBackend, RemoteShardedStore, get_firestore_client
from app.services.demand import DemandReportService
from etl.sync import SyncReconciler
from settings import FIRESTORE_COLLECTION, FIRESTORE_CREDENTIALS, FIRESTORE_PROJECT


class Container:
    """Application DI container - holds all singleton instances."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def init(self) -> None:
        """Initialize all dependencies. Call once at app startup."""
        if self._initialized:
            return

        # Remote store
        self._backend = FirestoreBackend(
            get_firestore_client(FIRESTORE_PROJECT, FIRESTORE_CREDENTIALS),
            collection=FIRESTORE_COLLECTION,
        )
        self.store = RemoteShardedStore(self._backend)

        # Local cache
        self.cache = LocalCacheRepository()

        # Services (with injected repos)
        self.reconciler = SyncReconciler(
            store=self.store,
            cache=self.cache,
        )

        self.reports = DemandReportService(
            store=self.store,
            cache=self.cache,
        )

        self._initialized = True


# Global container instance
container = Container()
