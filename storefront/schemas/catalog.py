"""Catalog schemas - categories, products and per-size inventory rows."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class Category(BaseModel):
    """Product category as stored in the `categories` table."""

    id: str
    name: str
    slug: str
    description: str | None = None
    image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class ProductSize(BaseModel):
    """One size of a product with its own stock count.

    Rows are upserted on (product_id, size) and only ever disabled,
    never deleted.
    """

    id: str | None = None
    product_id: str
    size: str = Field(min_length=1)
    # Some clients return integer columns as strings; lax mode coerces them
    stock: int = Field(default=0, ge=0)
    is_enabled: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class Product(BaseModel):
    """Catalog product, read-only to cart and order logic."""

    id: str
    name: str
    slug: str = ""
    description: str | None = None
    price: Decimal = Field(ge=0)
    compare_at_price: Decimal | None = Field(default=None, ge=0)
    image_url: str | None = None
    images: list[str] = Field(default_factory=list)
    category_id: str | None = None
    category: Category | None = None
    stock: int = Field(default=0, ge=0, description="Flat stock, used when no sizes exist")
    shipping_price: Decimal | None = Field(
        default=None,
        ge=0,
        description="Per-unit shipping override",
    )
    is_featured: bool = False
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class SizeRow(BaseModel):
    """Editable size inventory row submitted by the admin size editor."""

    size: str = Field(min_length=1, max_length=20)
    stock: int = Field(default=0, ge=0)
    is_enabled: bool = True

    model_config = {"extra": "forbid"}

    @field_validator("size")
    @classmethod
    def normalize_size(cls, v: str) -> str:
        """Strip whitespace around the size label."""
        v = v.strip()
        if not v:
            raise ValueError("Size label is required")
        return v


class ProductInput(BaseModel):
    """Validated product form payload for create/update."""

    name: str = Field(min_length=1, description="Name is required")
    slug: str = Field(min_length=1, description="Slug is required")
    description: str | None = None
    price: Decimal = Field(ge=0)
    compare_at_price: Decimal | None = Field(default=None, ge=0)
    image_url: str | None = None
    images: list[str] = Field(default_factory=list)
    category_id: str | None = None
    stock: int = Field(default=0, ge=0)
    shipping_price: Decimal | None = Field(default=None, ge=0)
    is_featured: bool = False
    is_active: bool = True

    model_config = {"extra": "forbid"}

    @field_validator("description", "image_url", "category_id", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        """Treat empty form fields as missing."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("compare_at_price", "shipping_price", mode="before")
    @classmethod
    def blank_price_to_none(cls, v: object) -> object:
        """Optional price inputs may be submitted as empty strings."""
        if v == "":
            return None
        return v

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: str | None) -> str | None:
        """Image URLs must be absolute http(s) URLs."""
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("image_url must be an http(s) URL")
        return v


class CategoryInput(BaseModel):
    """Validated category form payload. Slug is derived from name if blank."""

    name: str = Field(min_length=1)
    slug: str | None = None
    description: str | None = None
    image_url: str | None = None

    model_config = {"extra": "forbid"}

    @field_validator("slug", "description", "image_url", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        """Treat empty form fields as missing."""
        if isinstance(v, str) and not v.strip():
            return None
        return v
