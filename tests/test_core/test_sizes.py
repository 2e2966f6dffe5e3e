"""Tests for per-size inventory policy."""

import pytest

from storefront.core.sizes import (
    DEFAULT_SIZES,
    can_add_to_cart,
    clamp_quantity,
    default_selection,
    default_size_rows,
    editor_rows,
    is_selectable,
    max_quantity,
    parse_stock_input,
    sellable_sizes,
    sort_size_labels,
    sort_sizes,
    stock_label,
    total_enabled_stock,
    uses_size_inventory,
)
from storefront.schemas.catalog import SizeRow


class TestOrdering:
    """Tests for canonical size ordering."""

    def test_known_sizes_in_canonical_order(self):
        assert sort_size_labels(["3XL", "M", "XS"]) == ["XS", "M", "3XL"]

    def test_unknown_labels_last_and_lexical(self):
        labels = ["One Size", "L", "42", "XS"]

        assert sort_size_labels(labels) == ["XS", "L", "42", "One Size"]

    def test_sort_sizes_ignores_storage_order(self, make_size):
        rows = [make_size("XL"), make_size("S"), make_size("XXL"), make_size("M")]

        assert [row.size for row in sort_sizes(rows)] == ["S", "M", "XL", "XXL"]


class TestEditorDefaults:
    def test_default_rows(self):
        rows = default_size_rows()

        assert [row.size for row in rows] == ["XS", "S", "M", "L", "XL"]
        assert list(DEFAULT_SIZES) == [row.size for row in rows]
        assert all(row.stock == 0 and row.is_enabled for row in rows)

    def test_editor_uses_defaults_when_empty(self):
        assert editor_rows([]) == default_size_rows()

    def test_editor_uses_stored_rows(self, make_size):
        rows = editor_rows([make_size("L", stock=3), make_size("S", stock=1, is_enabled=False)])

        assert rows == [
            SizeRow(size="S", stock=1, is_enabled=False),
            SizeRow(size="L", stock=3, is_enabled=True),
        ]


class TestSelection:
    """Tests for size selection on the product page."""

    def test_sellable_excludes_disabled_keeps_out_of_stock(self, make_size):
        rows = [make_size("M", stock=0), make_size("S", stock=2, is_enabled=False), make_size("L", stock=4)]

        assert [row.size for row in sellable_sizes(rows)] == ["M", "L"]

    def test_uses_size_inventory_only_with_enabled_rows(self, make_size):
        assert uses_size_inventory([make_size("M")])
        assert not uses_size_inventory([make_size("M", is_enabled=False)])
        assert not uses_size_inventory([])

    def test_default_selection_prefers_stock(self, make_size):
        rows = [make_size("XS", stock=0), make_size("S", stock=0), make_size("M", stock=2)]

        assert default_selection(rows) == "M"

    def test_default_selection_falls_back_to_first_enabled(self, make_size):
        rows = [make_size("L", stock=0), make_size("S", stock=0), make_size("XS", is_enabled=False)]

        assert default_selection(rows) == "S"

    def test_default_selection_none_without_sizes(self):
        assert default_selection([]) is None

    def test_is_selectable(self, make_size):
        assert is_selectable(make_size("M", stock=1))
        assert not is_selectable(make_size("M", stock=0))
        assert not is_selectable(make_size("M", stock=5, is_enabled=False))


class TestMaxQuantity:
    """Tests for purchase limits."""

    def test_flat_stock_without_sizes(self, make_product):
        assert max_quantity(make_product(stock=7), [], None) == 7

    def test_flat_stock_when_all_sizes_disabled(self, make_product, make_size):
        sizes = [make_size("M", stock=3, is_enabled=False)]

        assert max_quantity(make_product(stock=7), sizes, None) == 7

    def test_selected_size_stock(self, make_product, make_size):
        sizes = [make_size("M", stock=3), make_size("L", stock=9)]

        assert max_quantity(make_product(stock=100), sizes, "M") == 3

    def test_flat_stock_ignored_in_size_mode(self, make_product, make_size):
        sizes = [make_size("M", stock=3)]

        assert max_quantity(make_product(stock=100), sizes, None) == 0
        assert max_quantity(make_product(stock=100), sizes, "XL") == 0

    def test_can_add_to_cart(self, make_product, make_size):
        sizes = [make_size("M", stock=3), make_size("L", stock=0)]
        product = make_product(stock=100)

        assert can_add_to_cart(product, sizes, "M")
        assert not can_add_to_cart(product, sizes, "L")
        assert not can_add_to_cart(product, sizes, None)
        assert can_add_to_cart(product, [], None)
        assert not can_add_to_cart(make_product(stock=0), [], None)


class TestQuantityHelpers:
    @pytest.mark.parametrize(
        ("requested", "maximum", "expected"),
        [(3, 10, 3), (0, 10, 1), (-2, 10, 1), (12, 10, 10), (1, 0, 0), (4, -1, 0)],
    )
    def test_clamp_quantity(self, requested, maximum, expected):
        assert clamp_quantity(requested, maximum) == expected

    @pytest.mark.parametrize(
        ("stock", "label"),
        [(0, "Out of stock"), (1, "Only 1 left"), (5, "Only 5 left"), (6, "In stock")],
    )
    def test_stock_label(self, stock, label):
        assert stock_label(stock) == label

    def test_total_enabled_stock(self):
        rows = [
            SizeRow(size="S", stock=2),
            SizeRow(size="M", stock=5, is_enabled=False),
            SizeRow(size="L", stock=4),
        ]

        assert total_enabled_stock(rows) == 6

    @pytest.mark.parametrize(("value", "expected"), [("12", 12), ("", 0), (" 3 ", 3), ("abc", 0), ("-4", 0)])
    def test_parse_stock_input(self, value, expected):
        assert parse_stock_input(value) == expected
