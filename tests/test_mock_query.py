"""Client-side evaluation of PostgREST-style query chains."""

from __future__ import annotations

import pytest

from family_logistics.repositories.mock_query import MockQueryBuilder

ROWS = [
    {"id": "1", "title": "Tent", "category": "gear", "weight": 3.5, "packed": False},
    {"id": "2", "title": "toothbrush", "category": "toiletries", "weight": 0.1, "packed": True},
    {"id": "3", "title": "Torch", "category": "gear", "weight": None, "packed": False},
    {"id": "4", "title": "Passport", "category": "documents", "weight": 0.2, "packed": True},
]


def titles(rows):
    return [row["title"] for row in rows]


class TestFilters:
    def test_no_calls_returns_rows_unchanged(self):
        assert MockQueryBuilder().apply(ROWS) == ROWS

    def test_eq_and_neq(self):
        assert titles(MockQueryBuilder().eq("category", "gear").apply(ROWS)) == ["Tent", "Torch"]
        assert "Tent" not in titles(MockQueryBuilder().neq("category", "gear").apply(ROWS))

    def test_range_filters_skip_nulls(self):
        assert titles(MockQueryBuilder().gt("weight", 0.15).apply(ROWS)) == ["Tent", "Passport"]
        assert titles(MockQueryBuilder().lte("weight", 0.2).apply(ROWS)) == [
            "toothbrush",
            "Passport",
        ]

    def test_in_and_is(self):
        assert titles(MockQueryBuilder().in_("id", ["1", "4"]).apply(ROWS)) == ["Tent", "Passport"]
        assert titles(MockQueryBuilder().is_("weight", "null").apply(ROWS)) == ["Torch"]

    def test_like_is_case_sensitive_ilike_is_not(self):
        assert titles(MockQueryBuilder().like("title", "T%").apply(ROWS)) == ["Tent", "Torch"]
        assert titles(MockQueryBuilder().ilike("title", "t%").apply(ROWS)) == [
            "Tent",
            "toothbrush",
            "Torch",
        ]

    def test_filters_combine(self):
        chain = MockQueryBuilder().eq("packed", False).eq("category", "gear").eq("id", "3")
        assert titles(chain.apply(ROWS)) == ["Torch"]


class TestShaping:
    def test_order_ascending_and_descending(self):
        assert titles(MockQueryBuilder().order("id", desc=True).apply(ROWS)) == [
            "Passport",
            "Torch",
            "toothbrush",
            "Tent",
        ]

    def test_nulls_sort_last_when_ascending(self):
        assert titles(MockQueryBuilder().order("weight").apply(ROWS)) == [
            "toothbrush",
            "Passport",
            "Tent",
            "Torch",
        ]

    def test_nulls_sort_first_when_descending(self):
        assert titles(MockQueryBuilder().order("weight", desc=True).apply(ROWS)) == [
            "Torch",
            "Tent",
            "Passport",
            "toothbrush",
        ]

    @pytest.mark.parametrize(
        "desc,nullsfirst,expected",
        [
            (False, True, ["Torch", "toothbrush", "Passport", "Tent"]),
            (True, False, ["Tent", "Passport", "toothbrush", "Torch"]),
        ],
    )
    def test_explicit_nullsfirst_wins(self, desc, nullsfirst, expected):
        builder = MockQueryBuilder().order("weight", desc=desc, nullsfirst=nullsfirst)
        assert titles(builder.apply(ROWS)) == expected

    def test_first_order_call_takes_precedence(self):
        result = MockQueryBuilder().order("category").order("title", desc=True).apply(ROWS)
        assert titles(result) == ["Passport", "Torch", "Tent", "toothbrush"]

    def test_limit_applies_after_ordering(self):
        result = MockQueryBuilder().order("title").limit(2).apply(ROWS)
        assert titles(result) == ["Passport", "Tent"]

    def test_select_and_single_are_accepted(self):
        builder = MockQueryBuilder().select("*").eq("id", "1").maybe_single().single()
        assert titles(builder.apply(ROWS)) == ["Tent"]

    def test_unsupported_method_raises_attribute_error(self):
        with pytest.raises(AttributeError):
            MockQueryBuilder().text_search("title", "tent")
