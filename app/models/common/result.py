"""Operation results returned across the local/remote boundary."""

from dataclasses import dataclass, field

from app.models.common.base import BaseEntity


@dataclass
class OperationResult(BaseEntity):
    """Outcome of a write, clear or sync operation."""

    success: bool
    message: str
    partial_count: int | None = None


@dataclass
class WriteResult(OperationResult):
    records_written: int = 0
    batches_committed: int = 0


@dataclass
class ClearResult(OperationResult):
    shards_deleted: int = 0
    daily_entries_deleted: int = 0


@dataclass
class ClientStatus(BaseEntity):
    """Outcome of fetching one upstream client."""

    client: str
    status: str  # success | error | empty
    row_count: int = 0
    message: str | None = None


@dataclass
class SyncResult(OperationResult):
    records_synced: int = 0
    client_statuses: list[ClientStatus] = field(default_factory=list)
