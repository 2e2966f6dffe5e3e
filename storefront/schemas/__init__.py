"""Pydantic schemas for catalog, cart, orders and service results."""

from storefront.schemas.cart import CartLineItem, CartSummary
from storefront.schemas.catalog import (
    Category,
    CategoryInput,
    Product,
    ProductInput,
    ProductSize,
    SizeRow,
)
from storefront.schemas.common import (
    DashboardStats,
    MonthlyRevenue,
    MutationResult,
    StatusCount,
)
from storefront.schemas.order import (
    Address,
    CheckoutRequest,
    Order,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    OrderStatus,
)

__all__ = [
    "Address",
    "CartLineItem",
    "CartSummary",
    "Category",
    "CategoryInput",
    "CheckoutRequest",
    "DashboardStats",
    "MonthlyRevenue",
    "MutationResult",
    "Order",
    "OrderCreate",
    "OrderItem",
    "OrderItemCreate",
    "OrderStatus",
    "Product",
    "ProductInput",
    "ProductSize",
    "SizeRow",
    "StatusCount",
]
