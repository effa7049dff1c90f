"""Sync API response schemas."""

from datetime import datetime

from pydantic import BaseModel


class ClientStatusItem(BaseModel):
    """Fetch outcome of one upstream client."""

    client: str
    status: str
    row_count: int
    message: str | None = None


class OperationResponse(BaseModel):
    """Outcome of a write, clear or sync operation."""

    success: bool
    message: str
    partial_count: int | None = None


class SyncResponse(OperationResponse):
    records_synced: int = 0
    client_statuses: list[ClientStatusItem] = []


class StatusResponse(BaseModel):
    """Local cache status."""

    last_synced_at: datetime | None
    total_records: int
    dates: list[str]
