"""
Cart API — Merge-by-sku Unit Tests
===================================

What:  Tests for merge_cart_item, the pure core of cart PATCH.

What we test:
    ✅ Unknown sku is appended, order otherwise preserved
    ✅ Known sku has its quantity replaced in place
    ✅ Quantity 0 removes exactly the matching entry
    ✅ Quantity 0 on an unknown sku appends a zero line (inherited asymmetry)
    ✅ Only the first duplicate is acted on
    ✅ The input list is never mutated
"""

import copy

import pytest

from cartapi.services.cart_service import MergeOutcome, merge_cart_item


@pytest.fixture
def items():
    return [
        {"sku": "a", "quantity": 1},
        {"sku": "b", "quantity": 2},
        {"sku": "c", "quantity": 3},
    ]


class TestAppend:
    def test_unknown_sku_is_appended(self, items):
        merged, outcome = merge_cart_item(items, {"sku": "d", "quantity": 4})

        assert outcome is MergeOutcome.APPENDED
        assert merged == items + [{"sku": "d", "quantity": 4}]

    def test_append_to_empty_cart(self):
        merged, outcome = merge_cart_item([], {"sku": "a", "quantity": 1})

        assert outcome is MergeOutcome.APPENDED
        assert merged == [{"sku": "a", "quantity": 1}]

    def test_zero_quantity_miss_appends_zero_line(self, items):
        """A zero quantity only deletes on a hit; on a miss it is stored as-is."""
        merged, outcome = merge_cart_item(items, {"sku": "d", "quantity": 0})

        assert outcome is MergeOutcome.APPENDED
        assert merged[-1] == {"sku": "d", "quantity": 0}
        assert len(merged) == 4


class TestReplace:
    @pytest.mark.parametrize("position", [0, 1, 2])
    def test_quantity_replaced_in_place(self, items, position):
        sku = items[position]["sku"]

        merged, outcome = merge_cart_item(items, {"sku": sku, "quantity": 42})

        assert outcome is MergeOutcome.REPLACED
        assert [item["sku"] for item in merged] == ["a", "b", "c"]
        assert merged[position] == {"sku": sku, "quantity": 42}
        for index, item in enumerate(merged):
            if index != position:
                assert item == items[index]

    def test_only_first_duplicate_is_replaced(self):
        items = [
            {"sku": "a", "quantity": 1},
            {"sku": "x", "quantity": 2},
            {"sku": "a", "quantity": 3},
        ]

        merged, _ = merge_cart_item(items, {"sku": "a", "quantity": 9})

        assert merged == [
            {"sku": "a", "quantity": 9},
            {"sku": "x", "quantity": 2},
            {"sku": "a", "quantity": 3},
        ]

    def test_extra_fields_on_existing_item_are_dropped_by_replacement(self):
        """The candidate replaces the whole item, not just its quantity."""
        items = [{"sku": "a", "quantity": 1, "note": "gift"}]

        merged, _ = merge_cart_item(items, {"sku": "a", "quantity": 2})

        assert merged == [{"sku": "a", "quantity": 2}]


class TestRemove:
    @pytest.mark.parametrize("sku, expected", [
        ("a", ["b", "c"]),
        ("b", ["a", "c"]),
        ("c", ["a", "b"]),
    ])
    def test_zero_quantity_removes_match(self, items, sku, expected):
        merged, outcome = merge_cart_item(items, {"sku": sku, "quantity": 0})

        assert outcome is MergeOutcome.REMOVED
        assert [item["sku"] for item in merged] == expected

    def test_zero_quantity_removes_only_first_duplicate(self):
        items = [{"sku": "a", "quantity": 1}, {"sku": "a", "quantity": 5}]

        merged, outcome = merge_cart_item(items, {"sku": "a", "quantity": 0})

        assert outcome is MergeOutcome.REMOVED
        assert merged == [{"sku": "a", "quantity": 5}]


def test_input_items_not_mutated(items):
    original = copy.deepcopy(items)

    merge_cart_item(items, {"sku": "b", "quantity": 0})
    merge_cart_item(items, {"sku": "a", "quantity": 7})
    merge_cart_item(items, {"sku": "z", "quantity": 1})

    assert items == original


def test_non_object_entries_never_match():
    items = ["a", 3, None, {"sku": "a", "quantity": 1}]

    merged, outcome = merge_cart_item(items, {"sku": "a", "quantity": 0})

    assert outcome is MergeOutcome.REMOVED
    assert merged == ["a", 3, None]
