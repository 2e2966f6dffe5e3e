"""Order service - checkout assembly, order reads and status changes.

Order creation is two writes (order row, then item rows) because the
backend offers no multi-table transaction. If the item insert fails the
order row is deleted again; if that also fails the orphan's id is
reported in OrderCreationError so staff can clean it up.
"""

from pydantic import TypeAdapter, ValidationError

from storefront.core.cart import CartStore
from storefront.core.order_status import ensure_transition
from storefront.core.permissions import Actor, PermissionDeniedError, require_staff
from storefront.core.pricing import summarize
from storefront.infra.logging import get_logger
from storefront.schemas.cart import CartLineItem
from storefront.schemas.common import ORDER_AGGREGATES, MutationResult, order_key
from storefront.schemas.order import (
    CheckoutRequest,
    Order,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    OrderStatus,
)
from storefront.services.backend_client import BackendClient, BackendError

logger = get_logger(__name__)

_orders_adapter = TypeAdapter(list[Order])
_items_adapter = TypeAdapter(list[OrderItem])


class CheckoutError(Exception):
    """Base checkout exception"""


class EmptyCartError(CheckoutError):
    """Raised when checkout is attempted with no cart lines."""


class OrderCreationError(CheckoutError):
    """Raised when the order could not be fully written.

    Attributes:
        order_id: Id of an order row left behind without items, if any
    """

    def __init__(self, message: str, order_id: str | None = None) -> None:
        self.order_id = order_id
        super().__init__(message)


class ConcurrentStatusChangeError(BackendError):
    """Raised when an order's status changed between read and update."""


def snapshot_items(lines: list[CartLineItem]) -> list[OrderItem]:
    """Capture name, image and price of each line by value."""
    return [
        OrderItem(
            product_id=line.product.id,
            product_name=line.product.name,
            product_image=line.product.image_url,
            quantity=line.quantity,
            unit_price=line.product.price,
            total_price=line.product.price * line.quantity,
        )
        for line in lines
    ]


class OrderService:
    """Turns the cart into orders and manages order status."""

    def __init__(self, client: BackendClient, cart: CartStore) -> None:
        self._client = client
        self._cart = cart

    async def place_order(self, request: CheckoutRequest, actor: Actor) -> MutationResult[Order]:
        """Create an order with one item per cart line, then clear the cart.

        Once both writes succeed the order stands: a cart that cannot be
        cleared afterwards is logged, not raised.

        Args:
            request: Validated customer and address input
            actor: Current user; anonymous checkouts store no user id

        Returns:
            MutationResult with the order (items attached)

        Raises:
            EmptyCartError: If the cart has no lines
            OrderCreationError: If the order or its items could not be written
        """
        lines = self._cart.items
        if not lines:
            raise EmptyCartError("Your cart is empty")

        items = snapshot_items(lines)
        summary = summarize(lines)

        order_row = OrderCreate(
            user_id=actor.user_id,
            status=OrderStatus.PENDING,
            subtotal=summary.subtotal,
            shipping_cost=summary.shipping_cost,
            total=summary.total,
            shipping_address=request.resolved_shipping_address(),
            billing_address=request.resolved_billing_address(),
            customer_email=request.email,
            customer_name=request.customer_name,
            notes=request.notes,
        )

        try:
            rows = await self._client.insert("orders", order_row.to_row())
        except BackendError as e:
            logger.error("Failed to place order", error=e.message, user_id=actor.user_id)
            raise OrderCreationError(f"Failed to place order: {e.message}") from e
        if not rows:
            raise OrderCreationError("Failed to place order: backend returned no order")

        try:
            order = Order.model_validate(rows[0])
        except ValidationError as e:
            order_id = rows[0].get("id")
            orphan_id = await self._discard_order(order_id) if order_id else None
            logger.error("Backend returned an invalid order", order_id=order_id, error_count=e.error_count())
            raise OrderCreationError(
                "Failed to place order: backend returned an invalid order",
                order_id=orphan_id,
            ) from e

        item_rows = [
            OrderItemCreate(
                order_id=order.id,
                **item.model_dump(exclude={"id", "order_id", "created_at"}),
            ).to_row()
            for item in items
        ]
        try:
            stored_items = await self._client.insert("order_items", item_rows)
        except BackendError as e:
            orphan_id = await self._discard_order(order.id)
            logger.error(
                "Failed to store order items",
                order_id=order.id,
                error=e.message,
                orphaned=orphan_id is not None,
            )
            raise OrderCreationError(
                f"Failed to place order: {e.message}",
                order_id=orphan_id,
            ) from e

        if len(stored_items) != len(item_rows):
            orphan_id = await self._discard_order(order.id)
            raise OrderCreationError(
                "Failed to place order: not all items were stored",
                order_id=orphan_id,
            )

        try:
            stored = _items_adapter.validate_python(stored_items)
        except ValidationError as e:
            orphan_id = await self._discard_order(order.id)
            logger.error("Backend returned invalid order items", order_id=order.id, error_count=e.error_count())
            raise OrderCreationError(
                "Failed to place order: backend returned invalid order items",
                order_id=orphan_id,
            ) from e

        order = order.model_copy(update={"items": stored})

        # Order is committed; a failed cart save is only logged
        try:
            self._cart.clear()
        except OSError as e:
            logger.warning("Order placed but cart could not be cleared", order_id=order.id, error=str(e))

        logger.info(
            "Order placed",
            order_id=order.id,
            items=len(items),
            subtotal=str(order.subtotal),
            shipping_cost=str(order.shipping_cost),
            total=str(order.total),
        )
        return MutationResult(data=order, invalidates=list(ORDER_AGGREGATES))

    async def list_orders(
        self,
        actor: Actor,
        status: OrderStatus | None = None,
        user_id: str | None = None,
    ) -> list[Order]:
        """List orders newest first.

        Staff may list any orders; other users only their own.
        """
        if not actor.is_staff and (user_id is None or user_id != actor.user_id):
            raise PermissionDeniedError("Only staff can list other users' orders")

        query = self._client.table("orders").order("created_at", descending=True)
        if status is not None:
            query = query.eq("status", status)
        if user_id is not None:
            query = query.eq("user_id", user_id)

        return _orders_adapter.validate_python(await self._client.select(query))

    async def user_orders(self, actor: Actor) -> list[Order]:
        """Orders of the signed-in user; empty when anonymous."""
        if actor.user_id is None:
            return []
        return await self.list_orders(actor, user_id=actor.user_id)

    async def get_order(self, order_id: str) -> Order:
        """Fetch an order with its items.

        Raises:
            NotFoundError: If the order does not exist or is not visible
        """
        row = await self._client.select_one(self._client.table("orders").eq("id", order_id))
        items = await self._client.select(self._client.table("order_items").eq("order_id", order_id))
        order = Order.model_validate(row)
        return order.model_copy(update={"items": _items_adapter.validate_python(items)})

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        actor: Actor,
    ) -> MutationResult[Order]:
        """Move an order to a new status.

        Raises:
            PermissionDeniedError: If the actor is not staff
            InvalidStatusTransitionError: If the transition is not allowed
            ConcurrentStatusChangeError: If the status changed meanwhile
        """
        require_staff(actor)

        current = Order.model_validate(
            await self._client.select_one(
                self._client.table("orders").select("id,status,subtotal,shipping_cost,total").eq("id", order_id)
            )
        )
        ensure_transition(current.status, status)

        rows = await self._client.update(
            self._client.table("orders").eq("id", order_id).eq("status", current.status),
            {"status": status.value},
        )
        if not rows:
            raise ConcurrentStatusChangeError(
                f"Order '{order_id}' changed status meanwhile, reload and retry",
                status_code=409,
            )

        order = Order.model_validate(rows[0])
        logger.info(
            "Order status updated",
            order_id=order_id,
            from_status=current.status.value,
            to_status=status.value,
            by=actor.user_id,
        )
        return MutationResult(data=order, invalidates=[*ORDER_AGGREGATES, order_key(order_id)])

    async def _discard_order(self, order_id: str) -> str | None:
        """Delete an order whose items failed; return its id if it could not be deleted."""
        try:
            await self._client.delete(self._client.table("orders").eq("id", order_id))
        except BackendError as e:
            logger.error("Failed to discard incomplete order", order_id=order_id, error=e.message)
            return order_id
        logger.warning("Discarded incomplete order", order_id=order_id)
        return None
