"""Dashboard service - aggregates for the admin console."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from storefront.core.permissions import Actor, require_staff
from storefront.infra.logging import get_logger
from storefront.schemas.common import DashboardStats, MonthlyRevenue, StatusCount
from storefront.schemas.order import Order, OrderStatus
from storefront.services.backend_client import BackendClient, Row

logger = get_logger(__name__)

COMPARISON_WINDOW = timedelta(days=30)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def percent_change(current: Decimal | int, previous: Decimal | int) -> float:
    """Percent change from previous to current, rounded to one decimal.

    A change from zero to something is reported as 100%.
    """
    if previous == 0:
        return 100.0 if current else 0.0
    return round(float((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100), 1)


class DashboardService:
    """Staff-only dashboard numbers computed from orders, products and profiles."""

    def __init__(self, client: BackendClient, clock: Callable[[], datetime] = _utcnow) -> None:
        self._client = client
        self._clock = clock

    async def stats(self, actor: Actor) -> DashboardStats:
        """Revenue, order, product and customer totals.

        Cancelled orders are excluded from revenue and order counts.
        Changes compare the trailing 30 days with the 30 days before.
        """
        require_staff(actor)

        orders = await self._revenue_rows()
        total_products = await self._client.count(self._client.table("products").select("id"))
        total_customers = await self._client.count(self._client.table("profiles").select("id"))

        now = self._clock()
        current_start = now - COMPARISON_WINDOW
        previous_start = current_start - COMPARISON_WINDOW

        current_revenue = previous_revenue = Decimal("0")
        current_orders = previous_orders = 0
        for row in orders:
            created = _parse_timestamp(row["created_at"])
            if current_start <= created <= now:
                current_revenue += Decimal(str(row["total"]))
                current_orders += 1
            elif previous_start <= created < current_start:
                previous_revenue += Decimal(str(row["total"]))
                previous_orders += 1

        return DashboardStats(
            total_revenue=sum((Decimal(str(row["total"])) for row in orders), Decimal("0")),
            total_orders=len(orders),
            total_products=total_products,
            total_customers=total_customers,
            revenue_change=percent_change(current_revenue, previous_revenue),
            orders_change=percent_change(current_orders, previous_orders),
        )

    async def recent_orders(self, actor: Actor, limit: int = 5) -> list[Order]:
        require_staff(actor)
        rows = await self._client.select(
            self._client.table("orders").order("created_at", descending=True).limit(limit)
        )
        return [Order.model_validate(row) for row in rows]

    async def orders_by_status(self, actor: Actor) -> list[StatusCount]:
        """Order count per status, every status present even when zero."""
        require_staff(actor)
        rows = await self._client.select(self._client.table("orders").select("status"))

        counts = {status: 0 for status in OrderStatus}
        for row in rows:
            try:
                counts[OrderStatus(row["status"])] += 1
            except (KeyError, ValueError):
                logger.warning("Order with unknown status", status=row.get("status"))

        return [
            StatusCount(name=status.value.capitalize(), value=count)
            for status, count in counts.items()
        ]

    async def revenue_by_month(self, actor: Actor, months: int = 6) -> list[MonthlyRevenue]:
        """Revenue of non-cancelled orders grouped by month, last `months` months with orders."""
        require_staff(actor)
        rows = await self._revenue_rows(ascending=True)

        monthly: dict[str, Decimal] = {}
        for row in rows:
            label = _parse_timestamp(row["created_at"]).strftime("%b %Y")
            monthly[label] = monthly.get(label, Decimal("0")) + Decimal(str(row["total"]))

        return [
            MonthlyRevenue(month=month, revenue=revenue)
            for month, revenue in list(monthly.items())[-months:]
        ]

    async def _revenue_rows(self, ascending: bool = False) -> list[Row]:
        query = self._client.table("orders").select("total,created_at").neq("status", OrderStatus.CANCELLED)
        if ascending:
            query = query.order("created_at")
        return await self._client.select(query)
