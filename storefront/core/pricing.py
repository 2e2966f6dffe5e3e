"""Shipping and price display policy.

Every place that shows a total (cart summary, checkout summary, order
assembly) goes through `summarize` so the threshold comparisons never
diverge: `>=` for free shipping, strict `>` for doubling.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from storefront.schemas.cart import CartLineItem, CartSummary
from storefront.schemas.catalog import Product

#: Subtotal at or above which shipping is free (L.E.)
FAST_SHIPPING_THRESHOLD = Decimal("3000")

#: Per-unit shipping when the product has no override (L.E.)
DEFAULT_SHIPPING_COST = Decimal("299")

#: Item count above which shipping is doubled (6+ items = 2x shipping)
SHIPPING_DOUBLE_THRESHOLD = 5

CURRENCY_LABEL = "L.E."

ZERO = Decimal("0")


@dataclass(frozen=True)
class ShippingQuote:
    """Shipping cost for a set of lines."""

    cost: Decimal
    is_doubled: bool = False

    @property
    def is_free(self) -> bool:
        return self.cost == ZERO


def compute_shipping(lines: Iterable[CartLineItem], subtotal: Decimal) -> ShippingQuote:
    """Compute shipping for the given lines.

    Args:
        lines: Cart lines (or snapshots carrying product and quantity)
        subtotal: Order subtotal the free-shipping threshold is checked against

    Returns:
        ShippingQuote with the final cost and whether doubling applied
    """
    if subtotal >= FAST_SHIPPING_THRESHOLD:
        return ShippingQuote(cost=ZERO, is_doubled=False)

    item_count = 0
    base = ZERO
    for line in lines:
        unit = line.product.shipping_price
        if unit is None:
            unit = DEFAULT_SHIPPING_COST
        base += unit * line.quantity
        item_count += line.quantity

    is_doubled = item_count > SHIPPING_DOUBLE_THRESHOLD
    return ShippingQuote(cost=base * 2 if is_doubled else base, is_doubled=is_doubled)


def amount_to_free_shipping(subtotal: Decimal) -> Decimal:
    """How much more must be spent before shipping becomes free."""
    return max(FAST_SHIPPING_THRESHOLD - subtotal, ZERO)


def summarize(lines: Iterable[CartLineItem]) -> CartSummary:
    """Build the totals block shown for a cart or a checkout."""
    lines = list(lines)
    subtotal = sum((line.line_total for line in lines), ZERO)
    quote = compute_shipping(lines, subtotal)
    return CartSummary(
        item_count=sum(line.quantity for line in lines),
        subtotal=subtotal,
        shipping_cost=quote.cost,
        shipping_doubled=quote.is_doubled,
        total=subtotal + quote.cost,
        amount_to_free_shipping=amount_to_free_shipping(subtotal),
    )


def is_on_sale(product: Product) -> bool:
    return product.compare_at_price is not None and product.compare_at_price > product.price


def discount_percent(price: Decimal, compare_at_price: Decimal | None) -> int | None:
    """Whole-number discount percentage, or None when not on sale.

    Rounds half up, so 12.5% shows as 13%.
    """
    if compare_at_price is None or compare_at_price <= price:
        return None
    percent = (compare_at_price - price) / compare_at_price * 100
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_currency(amount: Decimal | int | float) -> str:
    """Format an amount as Egyptian pounds, e.g. '1,234.50 L.E.'."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{value:,.2f} {CURRENCY_LABEL}"
