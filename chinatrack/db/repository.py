"""
ChinaTrack Repository - Base class for a table-owning data access object.

Usage:
    class KeyValueTable(Repository):
        TABLE_NAME = "kv_store"
        CREATE_TABLE_SQL = '''CREATE TABLE IF NOT EXISTS kv_store (...)'''
"""

import logging

logger = logging.getLogger(__name__)


class Repository:
    """
    Base class for table access.

    Subclasses define TABLE_NAME, CREATE_TABLE_SQL and their own queries.
    """

    TABLE_NAME: str = ""
    CREATE_TABLE_SQL: str = ""

    def __init__(self, db: "Database"):
        self._db = db

    @property
    def db(self) -> "Database":
        return self._db

    async def ensure_table(self) -> None:
        """Create the table if it does not exist. Call once at startup."""
        if self.CREATE_TABLE_SQL:
            await self._db.execute(self.CREATE_TABLE_SQL)
            logger.debug(f"Ensured table: {self.TABLE_NAME}")
