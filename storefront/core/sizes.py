"""Per-size inventory policy.

A product either sells by size (at least one enabled size row) or from
its flat `stock` count. When any enabled size exists the flat count is
ignored for purchase limits.
"""

from collections.abc import Iterable, Sequence
from typing import TypeVar

from storefront.schemas.catalog import Product, ProductSize, SizeRow

SIZE_ORDER: tuple[str, ...] = ("XS", "S", "M", "L", "XL", "XXL", "2XL", "3XL")
DEFAULT_SIZES: tuple[str, ...] = SIZE_ORDER[:5]

LOW_STOCK_THRESHOLD = 5

RowT = TypeVar("RowT", ProductSize, SizeRow)


def size_sort_key(label: str) -> tuple[int, str]:
    """Sort key placing known sizes first, then unknown labels lexically."""
    try:
        return (SIZE_ORDER.index(label), "")
    except ValueError:
        return (len(SIZE_ORDER), label)


def sort_size_labels(labels: Iterable[str]) -> list[str]:
    return sorted(labels, key=size_sort_key)


def sort_sizes(rows: Iterable[RowT]) -> list[RowT]:
    """Return rows in canonical size order, independent of storage order."""
    return sorted(rows, key=lambda row: size_sort_key(row.size))


def default_size_rows() -> list[SizeRow]:
    """Rows for a product that has never had sizes: all enabled, no stock."""
    return [SizeRow(size=size, stock=0, is_enabled=True) for size in DEFAULT_SIZES]


def editor_rows(existing: Sequence[ProductSize]) -> list[SizeRow]:
    """Rows shown in the size editor: stored rows, or the defaults."""
    if not existing:
        return default_size_rows()
    return [
        SizeRow(size=row.size, stock=row.stock, is_enabled=row.is_enabled)
        for row in sort_sizes(existing)
    ]


def sellable_sizes(sizes: Iterable[ProductSize]) -> list[ProductSize]:
    """Enabled sizes in canonical order. Out-of-stock ones are included."""
    return sort_sizes(row for row in sizes if row.is_enabled)


def uses_size_inventory(sizes: Iterable[ProductSize]) -> bool:
    return any(row.is_enabled for row in sizes)


def default_selection(sizes: Iterable[ProductSize]) -> str | None:
    """Size preselected on the product page.

    First enabled size with stock, else the first enabled size.
    """
    enabled = sellable_sizes(sizes)
    for row in enabled:
        if row.stock > 0:
            return row.size
    return enabled[0].size if enabled else None


def is_selectable(row: ProductSize) -> bool:
    """Enabled sizes without stock are shown but cannot be picked."""
    return row.is_enabled and row.stock > 0


def max_quantity(
    product: Product,
    sizes: Sequence[ProductSize],
    selected_size: str | None,
) -> int:
    """Upper bound for the quantity selector."""
    enabled = sellable_sizes(sizes)
    if not enabled:
        return product.stock
    for row in enabled:
        if row.size == selected_size:
            return row.stock
    return 0


def can_add_to_cart(
    product: Product,
    sizes: Sequence[ProductSize],
    selected_size: str | None,
) -> bool:
    if uses_size_inventory(sizes) and selected_size is None:
        return False
    return max_quantity(product, sizes, selected_size) > 0


def clamp_quantity(requested: int, maximum: int) -> int:
    """Clamp a requested quantity into [1, maximum]; 0 when nothing is in stock."""
    if maximum <= 0:
        return 0
    return min(max(requested, 1), maximum)


def stock_label(stock: int) -> str:
    if stock <= 0:
        return "Out of stock"
    if stock <= LOW_STOCK_THRESHOLD:
        return f"Only {stock} left"
    return "In stock"


def total_enabled_stock(rows: Iterable[SizeRow | ProductSize]) -> int:
    return sum(row.stock for row in rows if row.is_enabled)


def parse_stock_input(value: str) -> int:
    """Parse a stock field typed into the editor.

    Blank or non-numeric input counts as 0 and negatives clamp to 0.
    """
    try:
        parsed = int(value.strip() or 0)
    except ValueError:
        return 0
    return max(parsed, 0)
