"""Sync API views - thin layer over the reconciler."""

from app.container import container
from app.models.common import SyncResult
from app.models.demand import ClientName
from web.api.errors import validate_clients, validate_date_key

from .schemas import ClientStatusItem, OperationResponse, StatusResponse, SyncResponse


def _sync_response(result: SyncResult) -> SyncResponse:
    return SyncResponse(
        success=result.success,
        message=result.message,
        partial_count=result.partial_count,
        records_synced=result.records_synced,
        client_statuses=[ClientStatusItem(**s.to_dict()) for s in result.client_statuses],
    )


async def full_resync(clients: list[str] | None = None) -> SyncResponse:
    """Replace remote data with a fresh upstream fetch."""
    validate_clients(clients)
    selected = [ClientName(c) for c in clients] if clients else None
    result = await container.reconciler.full_resync(selected)
    return _sync_response(result)


async def sync_date(date: str) -> SyncResponse:
    """Mirror one remote day into the local cache."""
    validate_date_key(date)
    result = await container.reconciler.sync_date(date)
    return _sync_response(result)


async def sync_today() -> SyncResponse:
    result = await container.reconciler.sync_today()
    return _sync_response(result)


async def clear_local() -> OperationResponse:
    """Wipe the local cache."""
    result = await container.reconciler.clear_local()
    return OperationResponse(**result.to_dict())


async def clear_remote() -> OperationResponse:
    """Wipe the remote store."""
    result = await container.reconciler.clear_remote()
    return OperationResponse(
        success=result.success,
        message=result.message,
        partial_count=result.partial_count,
    )


def get_status() -> StatusResponse:
    """Get local cache status."""
    data = container.reconciler.status()
    return StatusResponse(**data)
