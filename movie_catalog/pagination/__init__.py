"""Pagination module for cursor-based pagination."""

from .cursor import (
    OrderEntry,
    QueryBuilder,
    CursorPayload,
    CursorPaginationParams,
    CursorPage,
    parse_order,
    encode_cursor,
    decode_cursor,
    generate_next_cursor,
    build_cursor_condition,
    apply_cursor_pagination,
    create_link_header
)

__all__ = [
    "OrderEntry",
    "QueryBuilder",
    "CursorPayload",
    "CursorPaginationParams",
    "CursorPage",
    "parse_order",
    "encode_cursor",
    "decode_cursor",
    "generate_next_cursor",
    "build_cursor_condition",
    "apply_cursor_pagination",
    "create_link_header"
]
