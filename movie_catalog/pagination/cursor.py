"""Cursor-based pagination utilities for the Movie Catalog API.

A cursor is an opaque, URL-safe base64 token wrapping the JSON document
``{"values": {...}, "order": [...]}``: the sort that produced a page and the
value every sorted column held on the last row of that page. Clients hand the
token back unchanged to fetch the following page.
"""

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Protocol, Sequence
from urllib.parse import urlencode

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..errors.problem_details import MalformedCursor, InvalidOrderDirection


logger = logging.getLogger(__name__)

ORDER_DIRECTIONS = ("ASC", "DESC")
DEFAULT_ORDER = ["id_DESC"]
DEFAULT_TAKE = 2

_COLUMN_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class OrderEntry(NamedTuple):
    """One `<column>_<ASC|DESC>` sort instruction."""
    column: str
    direction: str


class QueryBuilder(Protocol):
    """Query collaborator the codec drives.

    SQL fragments passed to ``add_condition`` use ``:name`` placeholders that
    are bound from ``params``.
    """

    alias: str

    def add_condition(self, sql: str, params: Dict[str, Any]) -> None: ...

    def add_order_by(self, column: str, direction: str) -> None: ...

    def add_secondary_order_by(self, column: str, direction: str) -> None: ...

    def set_limit(self, limit: int) -> None: ...

    async def execute(self) -> Sequence[Any]: ...


def _split_order_entry(entry: str) -> Optional[OrderEntry]:
    column, sep, direction = entry.rpartition("_")
    if not sep or direction not in ORDER_DIRECTIONS or not _COLUMN_PATTERN.match(column):
        return None
    return OrderEntry(column, direction)


def parse_order(order: Sequence[str]) -> List[OrderEntry]:
    """Parse order strings such as ``["like_count_DESC", "id_DESC"]``.

    The direction is whatever follows the last underscore and must be exactly
    ``ASC`` or ``DESC``.

    Raises:
        InvalidOrderDirection: If the list is empty, an entry is malformed or
            a column is listed twice
    """
    if not order:
        raise InvalidOrderDirection("Order must contain at least one <column>_<ASC|DESC> entry")

    entries = []
    seen = set()
    for raw in order:
        entry = _split_order_entry(raw)
        if entry is None:
            raise InvalidOrderDirection(
                f"Order '{raw}' is invalid; expected <column>_ASC or <column>_DESC"
            )
        if entry.column in seen:
            raise InvalidOrderDirection(f"Column '{entry.column}' appears more than once in order")
        seen.add(entry.column)
        entries.append(entry)

    return entries


class CursorPayload(BaseModel):
    """Decoded content of a pagination cursor."""

    values: Dict[str, Any] = Field(description="Sorted column values of the last row on the page")
    order: List[str] = Field(min_length=1, description="Sort that produced the page")

    @model_validator(mode="after")
    def check_values_match_order(self) -> "CursorPayload":
        """Every ordered column needs exactly one value."""
        columns = []
        for raw in self.order:
            entry = _split_order_entry(raw)
            if entry is None:
                raise ValueError(f"invalid order entry '{raw}'")
            columns.append(entry.column)

        if sorted(columns) != sorted(self.values):
            raise ValueError(
                f"cursor values {sorted(self.values)} do not match ordered columns {columns}"
            )
        return self


class CursorPaginationParams(BaseModel):
    """Query parameters for cursor pagination."""

    cursor: Optional[str] = Field(default=None, description="Cursor returned with the previous page")
    order: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ORDER),
        description="Sort instructions, each <column>_<ASC|DESC>",
        examples=[["id_DESC"], ["like_count_DESC", "id_DESC"]]
    )
    take: int = Field(default=DEFAULT_TAKE, ge=1, le=100, description="Number of items per page")

    @field_validator("order", mode="before")
    @classmethod
    def wrap_single_order(cls, v):
        """Accept a lone order string as a one-element list."""
        if isinstance(v, str):
            return [v]
        return v


@dataclass
class CursorPage:
    """One page of rows plus the cursor for the page after it."""

    data: List[Any]
    next_cursor: Optional[str]
    has_next_page: bool


def encode_cursor(order: Sequence[str], values: Mapping[str, Any]) -> str:
    """Encode a pagination cursor.

    Args:
        order: Active sort instructions
        values: Value of every ordered column on the last row of the page

    Returns:
        URL-safe base64 encoded cursor string
    """
    payload = CursorPayload(values=dict(values), order=list(order))
    cursor_json = payload.model_dump_json()
    return base64.urlsafe_b64encode(cursor_json.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> CursorPayload:
    """Decode pagination cursor.

    Both the URL-safe and the standard base64 alphabet are accepted, with or
    without padding.

    Args:
        cursor: Base64 encoded cursor string

    Returns:
        Decoded cursor payload

    Raises:
        MalformedCursor: If cursor is not base64, not JSON, or not a valid payload
    """
    if not cursor:
        raise MalformedCursor("Empty cursor provided")

    try:
        normalized = cursor.strip().replace("-", "+").replace("_", "/")
        normalized += "=" * (-len(normalized) % 4)
        cursor_bytes = base64.b64decode(normalized.encode("ascii"), validate=True)
        cursor_dict = json.loads(cursor_bytes.decode("utf-8"))
        return CursorPayload.model_validate(cursor_dict)

    except (binascii.Error, UnicodeError, json.JSONDecodeError, RecursionError) as e:
        raise MalformedCursor(f"Invalid cursor format: {e}")
    except ValidationError as e:
        raise MalformedCursor(f"Invalid cursor payload: {e.errors()[0]['msg']}")


def _field_value(row: Any, column: str) -> Any:
    try:
        return row[column]
    except TypeError:
        return getattr(row, column)


def generate_next_cursor(rows: Sequence[Any], order: Sequence[str]) -> Optional[str]:
    """Build the cursor that resumes after the last of ``rows``.

    Returns:
        Encoded cursor, or None when there are no rows
    """
    if not rows:
        return None

    last_row = rows[-1]
    values = {entry.column: _field_value(last_row, entry.column) for entry in parse_order(order)}
    return encode_cursor(order, values)


def build_cursor_condition(alias: str, entries: Sequence[OrderEntry]) -> str:
    """Build the WHERE fragment selecting rows strictly after the cursor.

    When every column sorts the same way this is a single row-value
    comparison, ``(c1, c2) < (:c1, :c2)`` for DESC and ``>`` for ASC. Mixed
    directions need the expanded form, one disjunct per column:
    ``(c1 > :c1) OR (c1 = :c1 AND c2 < :c2)``.
    """
    prefix = f"{alias}." if alias else ""
    refs = [f"{prefix}{entry.column}" for entry in entries]
    directions = {entry.direction for entry in entries}

    if len(directions) == 1:
        operator = "<" if "DESC" in directions else ">"
        columns = ", ".join(refs)
        placeholders = ", ".join(f":{entry.column}" for entry in entries)
        return f"({columns}) {operator} ({placeholders})"

    disjuncts = []
    for index, entry in enumerate(entries):
        terms = [f"{refs[i]} = :{entries[i].column}" for i in range(index)]
        operator = "<" if entry.direction == "DESC" else ">"
        terms.append(f"{refs[index]} {operator} :{entry.column}")
        disjuncts.append("(" + " AND ".join(terms) + ")")
    return "(" + " OR ".join(disjuncts) + ")"


async def apply_cursor_pagination(
    qb: QueryBuilder,
    params: CursorPaginationParams
) -> CursorPage:
    """Apply cursor, ordering and limit to ``qb``, run it, and page the result.

    A cursor carries its own order, which wins over ``params.order`` so that
    every page of one traversal is sorted the same way. One extra row is
    fetched to detect whether another page exists; it is dropped before the
    next cursor is built.

    Args:
        qb: Query builder to constrain and execute
        params: Pagination parameters

    Returns:
        The page of rows with its continuation cursor

    Raises:
        MalformedCursor: If the cursor cannot be decoded
        InvalidOrderDirection: If an order entry is malformed
    """
    order = list(params.order)
    cursor_values = None

    if params.cursor:
        payload = decode_cursor(params.cursor)
        if payload.order != order:
            logger.debug(f"Cursor order {payload.order} overrides requested order {order}")
        order = payload.order
        cursor_values = payload.values

    entries = parse_order(order)

    if cursor_values is not None:
        qb.add_condition(
            build_cursor_condition(qb.alias, entries),
            {entry.column: cursor_values[entry.column] for entry in entries}
        )

    for index, entry in enumerate(entries):
        if index == 0:
            qb.add_order_by(entry.column, entry.direction)
        else:
            qb.add_secondary_order_by(entry.column, entry.direction)

    qb.set_limit(params.take + 1)

    rows = list(await qb.execute())

    has_next_page = len(rows) > params.take
    page_rows = rows[:params.take]
    next_cursor = generate_next_cursor(page_rows, order) if has_next_page else None

    return CursorPage(data=page_rows, next_cursor=next_cursor, has_next_page=has_next_page)


def create_link_header(
    base_url: str,
    params: Dict[str, Any],
    next_cursor: Optional[str] = None
) -> Optional[str]:
    """Create Link header for pagination as per RFC 8288.

    Args:
        base_url: Base URL for the resource
        params: Current query parameters; list values repeat the key
        next_cursor: Cursor for next page

    Returns:
        Link header value or None if there is no next page
    """
    if not next_cursor:
        return None

    next_params = {**params, "cursor": next_cursor}
    next_url = f"{base_url}?{urlencode(next_params, doseq=True)}"
    return f'<{next_url}>; rel="next"'
