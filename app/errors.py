"""Error kinds raised by the storage and sync layers."""


class DemandStoreError(Exception):
    """Base class for demand storage errors."""

    def __init__(self, message: str = "Demand store error"):
        self.message = message
        super().__init__(self.message)


class ConnectivityError(DemandStoreError):
    """Remote backend unreachable or answered with a failure."""


class QuotaExceededError(DemandStoreError):
    """Staging one more operation would cross the batch ceiling."""


class PartialWriteError(DemandStoreError):
    """Some batches committed before a later one failed."""

    def __init__(self, message: str, committed: int):
        self.committed = committed
        super().__init__(message)


class EmptySourceError(DemandStoreError):
    """A query or upstream source legitimately returned zero rows."""


class ShardEnumerationError(DemandStoreError):
    """Listing the shard collection failed; the read cannot proceed."""
