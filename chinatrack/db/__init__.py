"""
ChinaTrack Database - asyncpg access for the Postgres store backend.

- Database: shared connection pool manager (one per app)
- Repository: base class owning one table
"""

from .database import Database
from .repository import Repository

__all__ = ["Database", "Repository"]
