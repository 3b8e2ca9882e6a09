"""Database access layer (asyncpg, hand-written SQL)."""

from .connection import DatabaseManager, db_manager, get_db_pool
from .query import SelectQuery

__all__ = [
    "DatabaseManager",
    "db_manager",
    "get_db_pool",
    "SelectQuery",
]
