"""Minimal SELECT builder over asyncpg used by cursor pagination."""

import logging
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import asyncpg

from .connection import get_db_pool


logger = logging.getLogger(__name__)

# ":name" placeholders, but not PostgreSQL "::type" casts
_NAMED_PARAM = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


def _to_datetime(value: Any) -> Any:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


def _to_date(value: Any) -> Any:
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value


# Cursor values arrive as JSON scalars; these restore the driver types
COLUMN_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "timestamptz": _to_datetime,
    "timestamp": _to_datetime,
    "date": _to_date,
}


class SelectQuery:
    """Accumulates WHERE/ORDER BY/LIMIT clauses for one SELECT statement.

    Conditions are written with ``:name`` placeholders and rendered to
    asyncpg's positional ``$n`` arguments by :meth:`build`. A name used
    more than once maps to a single argument.
    """

    def __init__(
        self,
        table: str,
        alias: str,
        columns: Sequence[str],
        joins: Optional[Sequence[str]] = None,
        column_types: Optional[Dict[str, str]] = None,
        pool: Optional[asyncpg.Pool] = None
    ):
        self.table = table
        self.alias = alias
        self.columns = list(columns)
        self.joins = list(joins or [])
        self.column_types = dict(column_types or {})
        self.pool = pool
        self._conditions: List[str] = []
        self._params: Dict[str, Any] = {}
        self._order_by: List[Tuple[str, str]] = []
        self._limit: Optional[int] = None

    def add_condition(self, sql: str, params: Optional[Dict[str, Any]] = None) -> None:
        """AND a condition onto the WHERE clause.

        Raises:
            ValueError: If a parameter name is already bound to a different value
        """
        for name, value in (params or {}).items():
            value = self._coerce(name, value)
            if name in self._params and self._params[name] != value:
                raise ValueError(f"Parameter ':{name}' is already bound to a different value")
            self._params[name] = value
        self._conditions.append(sql)

    def add_order_by(self, column: str, direction: str) -> None:
        """Replace any existing ordering with ``column``."""
        self._order_by = [(column, direction)]

    def add_secondary_order_by(self, column: str, direction: str) -> None:
        """Append a tie-breaking ordering."""
        self._order_by.append((column, direction))

    def set_limit(self, limit: int) -> None:
        self._limit = limit

    def _coerce(self, name: str, value: Any) -> Any:
        coercer = COLUMN_COERCERS.get(self.column_types.get(name, ""))
        if coercer is None:
            return value
        try:
            return coercer(value)
        except (TypeError, ValueError):
            # Left as-is; PostgreSQL reports the mismatch as a DataError
            return value

    def build(self) -> Tuple[str, List[Any]]:
        """Render the statement and its positional arguments."""
        positions: Dict[str, int] = {}
        args: List[Any] = []

        def _replace(match: re.Match) -> str:
            name = match.group(1)
            if name not in self._params:
                raise KeyError(f"No value bound for parameter ':{name}'")
            if name not in positions:
                args.append(self._params[name])
                positions[name] = len(args)
            return f"${positions[name]}"

        parts = [f"SELECT {', '.join(self.columns)}", f"FROM {self.table} {self.alias}"]
        parts.extend(self.joins)

        if self._conditions:
            where = " AND ".join(f"({condition})" for condition in self._conditions)
            parts.append("WHERE " + _NAMED_PARAM.sub(_replace, where))

        if self._order_by:
            ordering = ", ".join(
                f"{self.alias}.{column} {direction}" for column, direction in self._order_by
            )
            parts.append(f"ORDER BY {ordering}")

        if self._limit is not None:
            args.append(self._limit)
            parts.append(f"LIMIT ${len(args)}")

        return "\n".join(parts), args

    async def execute(self) -> List[asyncpg.Record]:
        """Run the statement and return its rows."""
        sql, args = self.build()
        pool = self.pool or await get_db_pool()

        logger.debug(f"Executing paginated query on {self.table}", extra={"sql": sql})
        async with pool.acquire() as conn:
            return await conn.fetch(sql, *args)
