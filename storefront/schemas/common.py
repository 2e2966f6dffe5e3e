"""Common schemas for service results and dashboard aggregates."""

from decimal import Decimal
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

QueryKey = tuple[str, ...]

# Query keys consumers cache reads under
PRODUCTS: QueryKey = ("products",)
CATEGORIES: QueryKey = ("categories",)
ORDERS: QueryKey = ("orders",)
USER_ORDERS: QueryKey = ("user-orders",)
DASHBOARD_STATS: QueryKey = ("dashboard-stats",)
RECENT_ORDERS: QueryKey = ("recent-orders",)
ORDERS_BY_STATUS: QueryKey = ("orders-by-status",)
REVENUE_BY_MONTH: QueryKey = ("revenue-by-month",)

ORDER_AGGREGATES: list[QueryKey] = [
    ORDERS,
    USER_ORDERS,
    DASHBOARD_STATS,
    RECENT_ORDERS,
    ORDERS_BY_STATUS,
    REVENUE_BY_MONTH,
]


def product_sizes_key(product_id: str) -> QueryKey:
    return ("product-sizes", product_id)


def order_key(order_id: str) -> QueryKey:
    return ("order", order_id)


class MutationResult(BaseModel, Generic[T]):
    """Result of a write, naming the cached reads it made stale.

    Callers refetch every key in `invalidates`; nothing is invalidated
    behind their back.
    """

    data: T | None = Field(default=None, description="Written row(s)")
    invalidates: list[QueryKey] = Field(
        default_factory=list,
        description="Query keys whose cached data must be refetched",
    )

    model_config = {"extra": "forbid"}


class DashboardStats(BaseModel):
    """Headline numbers for the admin dashboard."""

    total_revenue: Decimal = Field(description="Sum of non-cancelled order totals")
    total_orders: int = Field(ge=0)
    total_products: int = Field(ge=0)
    total_customers: int = Field(ge=0)
    revenue_change: float = Field(description="Percent change, trailing 30 days vs prior 30")
    orders_change: float = Field(description="Percent change, trailing 30 days vs prior 30")

    model_config = {"extra": "forbid"}


class StatusCount(BaseModel):
    name: str
    value: int = Field(ge=0)

    model_config = {"extra": "forbid"}


class MonthlyRevenue(BaseModel):
    month: str = Field(description="Month label, e.g. 'Jan 2026'")
    revenue: Decimal

    model_config = {"extra": "forbid"}
