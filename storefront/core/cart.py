"""Client-side cart store.

Lines are keyed by (product id, size). Every mutation writes the whole
list through the injected storage before it takes effect, so memory
never runs ahead of what the next session will rehydrate.
"""

from collections.abc import Iterable
from decimal import Decimal

from storefront.core.pricing import ZERO, summarize
from storefront.infra.logging import get_logger
from storefront.infra.storage import CartStorage
from storefront.schemas.cart import CartLineItem, CartSummary
from storefront.schemas.catalog import Product

logger = get_logger(__name__)


class CartValidationError(ValueError):
    """Raised for invalid cart arguments, e.g. a non-positive quantity."""


def _describe(product: Product, size: str | None) -> str:
    return f"{product.name} ({size})" if size else product.name


class CartStore:
    """Cart line items with derived totals.

    Stock limits are not enforced here; the quantity selector clamps
    before calling `add_item`.
    """

    def __init__(self, storage: CartStorage) -> None:
        """Initialize the store and rehydrate persisted lines.

        Args:
            storage: Durable storage the lines are written through
        """
        self._storage = storage
        self._lines: list[CartLineItem] = storage.load()

        logger.debug("Cart loaded", lines=len(self._lines))

    @property
    def items(self) -> list[CartLineItem]:
        """Copy of the current lines, in insertion order."""
        return list(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def subtotal(self) -> Decimal:
        """Live price times quantity over all lines."""
        return sum((line.line_total for line in self._lines), ZERO)

    def summary(self) -> CartSummary:
        return summarize(self._lines)

    def get_line(self, product_id: str, size: str | None = None) -> CartLineItem | None:
        for line in self._lines:
            if line.key == (product_id, size):
                return line
        return None

    def add_item(self, product: Product, quantity: int = 1, size: str | None = None) -> CartLineItem:
        """Add a product, merging with an existing (product, size) line.

        Args:
            product: Product to add
            quantity: Units to add, at least 1
            size: Selected size, None for flat-stock products

        Returns:
            The resulting line

        Raises:
            CartValidationError: If quantity is below 1
            OSError: If the cart could not be saved; the cart is left unchanged
        """
        if quantity < 1:
            raise CartValidationError(f"Quantity must be at least 1, got {quantity}")

        for index, line in enumerate(self._lines):
            if line.key == (product.id, size):
                updated = line.model_copy(update={"quantity": line.quantity + quantity})
                self._commit([*self._lines[:index], updated, *self._lines[index + 1 :]])
                logger.info("Updated cart quantity", item=_describe(product, size), quantity=updated.quantity)
                return updated

        line = CartLineItem(product=product, quantity=quantity, size=size)
        self._commit([*self._lines, line])
        logger.info("Added to cart", item=_describe(product, size), quantity=quantity)
        return line

    def remove_item(self, product_id: str, size: str | None = None) -> None:
        """Remove a line. Removing a line that is not there is a no-op."""
        line = self.get_line(product_id, size)
        if line is None:
            return

        self._commit([current for current in self._lines if current.key != (product_id, size)])
        logger.info("Removed from cart", item=_describe(line.product, size))

    def update_quantity(self, product_id: str, quantity: int, size: str | None = None) -> None:
        """Set a line's quantity exactly; below 1 removes the line."""
        if quantity < 1:
            self.remove_item(product_id, size)
            return

        for index, line in enumerate(self._lines):
            if line.key == (product_id, size):
                updated = line.model_copy(update={"quantity": quantity})
                self._commit([*self._lines[:index], updated, *self._lines[index + 1 :]])
                return

    def clear(self) -> None:
        self._commit([])
        logger.info("Cart cleared")

    def refresh_products(self, products: Iterable[Product]) -> int:
        """Swap in fresh catalog data for products already in the cart.

        Args:
            products: Freshly fetched products

        Returns:
            Number of lines whose product changed
        """
        fresh = {product.id: product for product in products}
        changed = 0
        lines: list[CartLineItem] = []
        for line in self._lines:
            product = fresh.get(line.product.id)
            if product is not None and product != line.product:
                line = line.model_copy(update={"product": product})
                changed += 1
            lines.append(line)

        if changed:
            self._commit(lines)
            logger.info("Cart products refreshed", changed=changed)
        return changed

    def _commit(self, lines: list[CartLineItem]) -> None:
        """Persist lines, then make them current. A failed save leaves the cart as it was."""
        self._storage.save(lines)
        self._lines = lines
