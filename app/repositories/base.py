"""Base repository class."""

from typing import Any

import duckdb
from loguru import logger

from app.repositories.db import get_db, init_tables


class BaseRepository:
    """Base repository over a DuckDB connection."""

    def __init__(self, conn: duckdb.DuckDBPyConnection | None = None):
        if conn is None:
            conn = get_db()
        else:
            init_tables(conn)
        self._db = conn
        logger.debug("{} initialized", self.__class__.__name__)

    def execute(self, query: str, params: list | None = None) -> Any:
        """Execute SQL query."""
        if params:
            return self._db.execute(query, params)
        return self._db.execute(query)

    def fetchall(self, query: str, params: list | None = None) -> list:
        """Execute and fetch all rows."""
        return self.execute(query, params).fetchall()

    def fetchone(self, query: str, params: list | None = None) -> Any:
        """Execute and fetch one row."""
        return self.execute(query, params).fetchone()
