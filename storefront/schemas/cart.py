"""Cart schemas."""

from decimal import Decimal

from pydantic import BaseModel, Field

from storefront.schemas.catalog import Product


class CartLineItem(BaseModel):
    """One (product, size, quantity) entry in the cart.

    Identity is (product.id, size): the same product in two sizes is
    two lines.
    """

    product: Product
    quantity: int = Field(ge=1)
    size: str | None = None

    model_config = {"extra": "ignore"}

    @property
    def key(self) -> tuple[str, str | None]:
        """Identity key of the line."""
        return (self.product.id, self.size)

    @property
    def line_total(self) -> Decimal:
        """Live price times quantity."""
        return self.product.price * self.quantity


class CartSummary(BaseModel):
    """Totals shown on the cart and checkout pages."""

    item_count: int = Field(ge=0)
    subtotal: Decimal
    shipping_cost: Decimal
    shipping_doubled: bool = False
    total: Decimal
    amount_to_free_shipping: Decimal = Field(
        description="How much more must be spent for free shipping (0 when already free)",
    )

    model_config = {"extra": "forbid"}
