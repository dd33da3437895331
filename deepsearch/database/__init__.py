"""PostgreSQL/pgvector session store."""

from deepsearch.database.connection import DatabaseManager
from deepsearch.database.repository import SessionStore

__all__ = ["DatabaseManager", "SessionStore"]
