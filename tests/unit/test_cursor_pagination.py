"""Tests for the cursor pagination codec."""

import base64
import json
import sqlite3
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from movie_catalog.errors.problem_details import BadRequestError, MalformedCursor, InvalidOrderDirection
from movie_catalog.pagination import (
    OrderEntry,
    CursorPaginationParams,
    parse_order,
    encode_cursor,
    decode_cursor,
    generate_next_cursor,
    build_cursor_condition,
    apply_cursor_pagination,
    create_link_header
)

from conftest import MOVIE_ROWS, SqliteQueryBuilder


def _raw_cursor(document) -> str:
    return base64.urlsafe_b64encode(json.dumps(document).encode("utf-8")).decode("ascii")


async def _collect_all(make_qb, order, take):
    """Walk every page and return the ids in the order they were served."""
    ids = []
    cursor = None
    pages = 0
    while True:
        params = CursorPaginationParams(cursor=cursor, order=order, take=take)
        page = await apply_cursor_pagination(make_qb(), params)
        ids.extend(row["id"] for row in page.data)
        pages += 1
        if not page.has_next_page:
            assert page.next_cursor is None
            return ids, pages
        cursor = page.next_cursor


class TestParseOrder:
    """Test order string parsing."""

    def test_parses_snake_case_columns(self):
        """The direction is split off at the last underscore."""
        entries = parse_order(["like_count_DESC", "id_ASC"])

        assert entries == [OrderEntry("like_count", "DESC"), OrderEntry("id", "ASC")]

    @pytest.mark.parametrize("entry", ["id_desc", "id_Asc", "id", "idDESC", "_DESC", "id_DESC ", "id;--_ASC"])
    def test_rejects_malformed_entries(self, entry):
        with pytest.raises(InvalidOrderDirection):
            parse_order([entry])

    def test_rejects_empty_order(self):
        with pytest.raises(InvalidOrderDirection):
            parse_order([])

    def test_rejects_repeated_column(self):
        with pytest.raises(InvalidOrderDirection) as exc_info:
            parse_order(["id_DESC", "id_ASC"])

        assert "more than once" in exc_info.value.detail

    def test_invalid_order_is_a_bad_request(self):
        with pytest.raises(BadRequestError) as exc_info:
            parse_order(["id_SIDEWAYS"])

        assert exc_info.value.status == 400
        assert exc_info.value.type_uri == "urn:movie-catalog:problem:invalid-order"


class TestCursorEncoding:
    """Test cursor encoding and decoding."""

    def test_encode_decode_round_trip(self):
        cursor = encode_cursor(["like_count_DESC", "id_DESC"], {"like_count": 5, "id": 27})

        payload = decode_cursor(cursor)

        assert payload.order == ["like_count_DESC", "id_DESC"]
        assert payload.values == {"like_count": 5, "id": 27}

    def test_encoded_cursor_is_url_safe_json(self):
        cursor = encode_cursor(["id_DESC"], {"id": 27})

        document = json.loads(base64.urlsafe_b64decode(cursor))
        assert document == {"values": {"id": 27}, "order": ["id_DESC"]}
        assert "+" not in cursor and "/" not in cursor

    def test_decode_accepts_standard_alphabet_without_padding(self):
        raw = base64.b64encode(json.dumps({"values": {"title": "??>"}, "order": ["title_ASC"]}).encode())
        cursor = raw.decode("ascii").rstrip("=")

        payload = decode_cursor(cursor)

        assert payload.values == {"title": "??>"}

    def test_decode_empty_cursor(self):
        with pytest.raises(MalformedCursor):
            decode_cursor("")

    def test_decode_not_base64(self):
        with pytest.raises(MalformedCursor) as exc_info:
            decode_cursor("not a cursor!")

        assert exc_info.value.status == 400
        assert "Invalid cursor format" in exc_info.value.detail

    def test_decode_not_json(self):
        cursor = base64.urlsafe_b64encode(b"definitely not json").decode("ascii")

        with pytest.raises(MalformedCursor):
            decode_cursor(cursor)

    def test_decode_deeply_nested_json(self):
        cursor = base64.urlsafe_b64encode(b"[" * 1200 + b"]" * 1200).decode("ascii")

        with pytest.raises(MalformedCursor):
            decode_cursor(cursor)

    def test_decode_deeply_nested_values(self):
        nested = b"[" * 1200 + b"1" + b"]" * 1200
        raw = b'{"order": ["id_DESC"], "values": {"id": ' + nested + b"}}"

        with pytest.raises(MalformedCursor):
            decode_cursor(base64.urlsafe_b64encode(raw).decode("ascii"))

    def test_decode_missing_order(self):
        with pytest.raises(MalformedCursor) as exc_info:
            decode_cursor(_raw_cursor({"values": {"id": 1}}))

        assert "Invalid cursor payload" in exc_info.value.detail

    def test_decode_values_not_matching_order(self):
        with pytest.raises(MalformedCursor):
            decode_cursor(_raw_cursor({"values": {"title": "Alien"}, "order": ["id_DESC"]}))

    def test_decode_order_with_bad_direction(self):
        with pytest.raises(MalformedCursor):
            decode_cursor(_raw_cursor({"values": {"id": 1}, "order": ["id_UP"]}))

    def test_generate_next_cursor_empty_rows(self):
        assert generate_next_cursor([], ["id_DESC"]) is None

    def test_generate_next_cursor_uses_last_row(self):
        rows = [{"id": 9, "title": "B"}, {"id": 4, "title": "A"}]

        payload = decode_cursor(generate_next_cursor(rows, ["title_ASC", "id_ASC"]))

        assert payload.values == {"title": "A", "id": 4}

    def test_generate_next_cursor_reads_attributes(self):
        rows = [SimpleNamespace(id=3, like_count=8)]

        payload = decode_cursor(generate_next_cursor(rows, ["like_count_DESC"]))

        assert payload.values == {"like_count": 8}


class TestPaginationParams:
    """Test pagination parameter model."""

    def test_defaults(self):
        params = CursorPaginationParams()

        assert params.cursor is None
        assert params.order == ["id_DESC"]
        assert params.take == 2

    def test_single_order_string_is_wrapped(self):
        params = CursorPaginationParams(order="title_ASC")

        assert params.order == ["title_ASC"]

    def test_defaults_are_not_shared(self):
        first = CursorPaginationParams()
        first.order.append("title_ASC")

        assert CursorPaginationParams().order == ["id_DESC"]

    @pytest.mark.parametrize("take", [0, -1, 101])
    def test_take_bounds(self, take):
        with pytest.raises(ValidationError):
            CursorPaginationParams(take=take)


class TestBuildCursorCondition:
    """Test WHERE fragment generation."""

    def test_single_direction_desc_uses_row_comparison(self):
        condition = build_cursor_condition("m", parse_order(["like_count_DESC", "id_DESC"]))

        assert condition == "(m.like_count, m.id) < (:like_count, :id)"

    def test_single_direction_asc_uses_row_comparison(self):
        condition = build_cursor_condition("m", parse_order(["id_ASC"]))

        assert condition == "(m.id) > (:id)"

    def test_mixed_directions_expand_per_column(self):
        condition = build_cursor_condition("m", parse_order(["like_count_DESC", "id_ASC"]))

        assert condition == "((m.like_count < :like_count) OR (m.like_count = :like_count AND m.id > :id))"

    def test_no_alias(self):
        condition = build_cursor_condition("", parse_order(["id_DESC"]))

        assert condition == "(id) < (:id)"


class TestApplyCursorPagination:
    """Test decode-and-apply against a real SQL engine."""

    @pytest.mark.asyncio
    async def test_first_page(self, make_qb):
        qb = make_qb()

        page = await apply_cursor_pagination(qb, CursorPaginationParams())

        assert [row["id"] for row in page.data] == [7, 6]
        assert page.has_next_page is True
        assert decode_cursor(page.next_cursor).values == {"id": 6}
        assert qb.conditions == []
        assert qb.order_by == [("id", "DESC")]
        assert qb.limit == 3

    @pytest.mark.asyncio
    async def test_second_page_continues_after_cursor(self, make_qb):
        cursor = encode_cursor(["id_DESC"], {"id": 6})
        qb = make_qb()

        page = await apply_cursor_pagination(qb, CursorPaginationParams(cursor=cursor, take=2))

        assert [row["id"] for row in page.data] == [5, 4]
        assert qb.conditions == ["(m.id) < (:id)"]
        assert qb.params == {"id": 6}

    @pytest.mark.asyncio
    async def test_full_traversal_visits_every_row_once(self, make_qb):
        ids, pages = await _collect_all(make_qb, ["id_DESC"], take=2)

        assert ids == [7, 6, 5, 4, 3, 2, 1]
        assert pages == 4

    @pytest.mark.asyncio
    async def test_exact_multiple_has_no_empty_trailing_page(self, make_qb):
        """The lookahead row tells the last full page apart from a middle one."""
        ids, pages = await _collect_all(make_qb, ["id_ASC"], take=7)

        assert ids == [1, 2, 3, 4, 5, 6, 7]
        assert pages == 1

    @pytest.mark.asyncio
    async def test_empty_result(self, empty_sqlite_conn):
        page = await apply_cursor_pagination(
            SqliteQueryBuilder(empty_sqlite_conn),
            CursorPaginationParams(take=5)
        )

        assert page.data == []
        assert page.has_next_page is False
        assert page.next_cursor is None

    @pytest.mark.asyncio
    async def test_multi_column_order_with_ties(self, make_qb):
        ids, _ = await _collect_all(make_qb, ["like_count_DESC", "id_DESC"], take=2)

        expected = [row[0] for row in sorted(MOVIE_ROWS, key=lambda r: (r[2], r[0]), reverse=True)]
        assert ids == expected

    @pytest.mark.asyncio
    async def test_mixed_directions(self, make_qb):
        ids, _ = await _collect_all(make_qb, ["like_count_DESC", "id_ASC"], take=3)

        expected = [row[0] for row in sorted(MOVIE_ROWS, key=lambda r: (-r[2], r[0]))]
        assert ids == expected

    @pytest.mark.asyncio
    async def test_cursor_order_overrides_request_order(self, make_qb):
        cursor = encode_cursor(["id_DESC"], {"id": 6})
        qb = make_qb()

        page = await apply_cursor_pagination(
            qb,
            CursorPaginationParams(cursor=cursor, order=["id_ASC"], take=2)
        )

        assert [row["id"] for row in page.data] == [5, 4]
        assert qb.order_by == [("id", "DESC")]
        assert decode_cursor(page.next_cursor).order == ["id_DESC"]

    @pytest.mark.asyncio
    async def test_invalid_direction_never_touches_builder(self, make_qb):
        qb = make_qb()

        with pytest.raises(InvalidOrderDirection):
            await apply_cursor_pagination(qb, CursorPaginationParams(order=["id_desc"]))

        assert qb.executed is False
        assert qb.conditions == []
        assert qb.order_by == []
        assert qb.limit is None

    @pytest.mark.asyncio
    async def test_malformed_cursor_fails_before_order_check(self, make_qb):
        qb = make_qb()

        with pytest.raises(MalformedCursor):
            await apply_cursor_pagination(
                qb,
                CursorPaginationParams(cursor="%%%", order=["id_bogus"])
            )

        assert qb.executed is False

    @pytest.mark.asyncio
    async def test_unknown_column_error_propagates(self, make_qb):
        with pytest.raises(sqlite3.OperationalError):
            await apply_cursor_pagination(make_qb(), CursorPaginationParams(order=["rating_DESC"]))

    @pytest.mark.asyncio
    async def test_next_cursor_only_when_more_rows(self, make_qb):
        page = await apply_cursor_pagination(make_qb(), CursorPaginationParams(take=50))

        assert len(page.data) == 7
        assert page.has_next_page is False
        assert page.next_cursor is None


class TestLinkHeader:
    """Test RFC 8288 Link header creation."""

    def test_no_cursor_no_header(self):
        assert create_link_header("http://test/movie", {"take": "2"}, None) is None

    def test_repeats_list_parameters(self):
        header = create_link_header(
            "http://test/movie",
            {"order": ["like_count_DESC", "id_DESC"], "take": "2"},
            "abc="
        )

        assert header == (
            '<http://test/movie?order=like_count_DESC&order=id_DESC&take=2&cursor=abc%3D>; rel="next"'
        )
