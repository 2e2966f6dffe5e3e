"""Order schemas - checkout input, persisted orders and item snapshots."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class OrderStatus(str, Enum):
    """Fulfilment status of an order."""

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Address(BaseModel):
    """Postal address, stored as camelCase JSON on the order row."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    first_name: str = ""
    last_name: str = ""
    address1: str = ""
    address2: str | None = None
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = "US"
    phone: str | None = None


class CheckoutRequest(BaseModel):
    """Customer and address input collected by the checkout form.

    Validated before anything is sent to the backend.
    """

    email: str = Field(min_length=1)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    shipping_address: Address
    billing_address: Address | None = Field(
        default=None,
        description="Defaults to the shipping address",
    )
    notes: str | None = None

    model_config = {"extra": "forbid"}

    @field_validator("email", "first_name", "last_name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        """Required text fields must not be blank."""
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Minimal shape check, the auth backend owns real verification."""
        local, _, domain = v.partition("@")
        if not local or not domain or " " in v:
            raise ValueError("Invalid email address")
        return v

    @model_validator(mode="after")
    def validate_shipping_address(self) -> "CheckoutRequest":
        """Street address and city are required for shipping."""
        missing = [
            name
            for name in ("address1", "city")
            if not getattr(self.shipping_address, name).strip()
        ]
        if missing:
            raise ValueError(f"Shipping address is missing: {', '.join(missing)}")
        return self

    @property
    def customer_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def resolved_shipping_address(self) -> Address:
        """Shipping address with names defaulted from the contact fields."""
        return self.shipping_address.model_copy(
            update={
                "first_name": self.shipping_address.first_name or self.first_name,
                "last_name": self.shipping_address.last_name or self.last_name,
            }
        )

    def resolved_billing_address(self) -> Address:
        return self.billing_address or self.resolved_shipping_address()


class OrderItem(BaseModel):
    """Immutable snapshot of one cart line at order time."""

    id: str | None = None
    order_id: str | None = None
    product_id: str | None = None
    product_name: str
    product_image: str | None = None
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)
    total_price: Decimal = Field(ge=0)
    created_at: datetime | None = None

    model_config = {"extra": "ignore"}


class Order(BaseModel):
    """Persisted order row."""

    id: str
    user_id: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal
    shipping_address: Address | None = None
    billing_address: Address | None = None
    customer_email: str | None = None
    customer_name: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItem] | None = None

    model_config = {"extra": "ignore"}

    @field_validator("shipping_address", "billing_address", mode="before")
    @classmethod
    def parse_address(cls, v: object) -> object:
        """Non-object address JSON is treated as missing."""
        if not isinstance(v, (dict, Address)):
            return None
        return v


class OrderCreate(BaseModel):
    """Insert payload for the `orders` table."""

    user_id: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal
    shipping_address: Address
    billing_address: Address
    customer_email: str
    customer_name: str
    notes: str | None = None

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_total(self) -> "OrderCreate":
        """Total must always equal subtotal plus shipping."""
        if self.total != self.subtotal + self.shipping_cost:
            raise ValueError("total must equal subtotal + shipping_cost")
        return self

    def to_row(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class OrderItemCreate(BaseModel):
    """Insert payload for the `order_items` table."""

    order_id: str
    product_id: str | None
    product_name: str
    product_image: str | None = None
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)
    total_price: Decimal = Field(ge=0)

    model_config = {"extra": "forbid"}

    def to_row(self) -> dict:
        return self.model_dump(mode="json")
