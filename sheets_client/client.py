"""Published spreadsheet client - CSV exports of client demand sheets."""

from sheets_client.base import BaseClient


class SheetsClient(BaseClient):
    """Client for published Google Sheets CSV exports."""

    async def fetch_csv(self, url: str) -> str:
        """GET a sheet's CSV export."""
        return await self._get_text(url)
