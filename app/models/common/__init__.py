"""Common models - base classes and operation results."""

from app.models.common.base import BaseEntity
from app.models.common.result import (
    ClearResult,
    ClientStatus,
    OperationResult,
    SyncResult,
    WriteResult,
)

__all__ = [
    "BaseEntity",
    "OperationResult",
    "WriteResult",
    "ClearResult",
    "ClientStatus",
    "SyncResult",
]
