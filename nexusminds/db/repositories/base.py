"""Base repository class."""

import json
from typing import Any, List

import duckdb
from ...utils.logger import get_app_logger


class BaseRepository:
    """Base class for all repositories."""

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        """
        Initialize repository with database connection.

        Args:
            conn: DuckDB connection instance
        """
        self.conn = conn
        self.logger = get_app_logger()

    @staticmethod
    def _load_json(value: Any, default: Any) -> Any:
        """Decode a JSON column, which DuckDB hands back as text."""
        if value is None:
            return default
        if isinstance(value, str):
            return json.loads(value) if value else default
        return value

    @staticmethod
    def _dump_list(value: List[str]) -> str:
        return json.dumps(list(value or []))
