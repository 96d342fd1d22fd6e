"""Tests for sort parsing and page arithmetic."""

import pytest

from userdirectory.engine.pagination import InvalidSortError, build_page, parse_sort, total_pages, with_id_tiebreak
from userdirectory.models.page import PageRequest, SortDirection, SortOrder


class TestParseSort:
    """`field[,direction]` parsing."""

    def test_default_is_id_ascending(self):
        assert parse_sort(None) == [SortOrder(field="id", direction=SortDirection.ASC)]
        assert parse_sort([]) == [SortOrder(field="id")]

    def test_camel_and_snake_case_fields(self):
        orders = parse_sort(["lastName,desc", "first_name"])
        assert orders == [
            SortOrder(field="last_name", direction=SortDirection.DESC),
            SortOrder(field="first_name", direction=SortDirection.ASC),
        ]

    def test_direction_is_case_insensitive(self):
        assert parse_sort(["email,DESC"])[0].direction == SortDirection.DESC

    def test_unknown_field_rejected(self):
        with pytest.raises(InvalidSortError) as exc_info:
            parse_sort(["password,asc"])
        assert "password" in str(exc_info.value)

    def test_bad_direction_rejected(self):
        with pytest.raises(InvalidSortError):
            parse_sort(["email,sideways"])

    def test_malformed_expression_rejected(self):
        with pytest.raises(InvalidSortError):
            parse_sort(["email,asc,desc"])

    def test_sort_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            parse_sort(["nickname"])


class TestTiebreak:

    def test_id_appended_when_missing(self):
        orders = with_id_tiebreak([SortOrder(field="last_name")])
        assert [o.field for o in orders] == ["last_name", "id"]

    def test_id_not_duplicated(self):
        orders = with_id_tiebreak([SortOrder(field="id", direction=SortDirection.DESC)])
        assert orders == [SortOrder(field="id", direction=SortDirection.DESC)]


class TestPageMetadata:

    @pytest.mark.parametrize("total,size,expected", [(0, 20, 0), (1, 20, 1), (5, 3, 2), (6, 3, 2), (7, 3, 3)])
    def test_total_pages_is_ceiling(self, total, size, expected):
        assert total_pages(total, size) == expected

    def test_empty_result(self):
        page = build_page([], 0, PageRequest(page=0, size=20))
        assert page.empty is True
        assert page.first is True
        assert page.last is True
        assert page.total_pages == 0

    def test_last_page_of_five_with_size_three(self):
        page = build_page(["d", "e"], 5, PageRequest(page=1, size=3))
        assert page.total_pages == 2
        assert page.first is False
        assert page.last is True
        assert page.number_of_elements == 2
        assert page.pageable.page_number == 1
        assert page.pageable.page_size == 3
