"""Spreadsheet client package."""

from sheets_client.base import BaseClient
from sheets_client.client import SheetsClient

__all__ = [
    # Base
    "BaseClient",
    # Clients
    "SheetsClient",
]
