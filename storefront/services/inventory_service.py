"""Inventory service - per-size stock rows for products."""

from collections.abc import Sequence

from pydantic import TypeAdapter

from storefront.core.permissions import Actor, require_staff
from storefront.core.sizes import default_size_rows, editor_rows, sort_sizes
from storefront.infra.logging import get_logger
from storefront.schemas.catalog import ProductSize, SizeRow
from storefront.schemas.common import PRODUCTS, MutationResult, product_sizes_key
from storefront.services.backend_client import BackendClient, NotFoundError

logger = get_logger(__name__)

SIZE_CONFLICT_TARGET = "product_id,size"

_sizes_adapter = TypeAdapter(list[ProductSize])


class InventoryService:
    """Reads and upserts `product_sizes` rows."""

    def __init__(self, client: BackendClient) -> None:
        self._client = client

    async def list_sizes(self, product_id: str) -> list[ProductSize]:
        """All size rows of a product in canonical size order."""
        rows = await self._client.select(
            self._client.table("product_sizes")
            .eq("product_id", product_id)
            .order("created_at")
        )
        return sort_sizes(_sizes_adapter.validate_python(rows))

    async def editor_rows(self, product_id: str) -> list[SizeRow]:
        """Rows for the admin size editor, defaults when none are stored."""
        return editor_rows(await self.list_sizes(product_id))

    async def bulk_save(
        self,
        product_id: str,
        rows: Sequence[SizeRow],
        actor: Actor,
    ) -> MutationResult[list[ProductSize]]:
        """Upsert every row by (product_id, size).

        Repeating the same input leaves the table unchanged.

        Raises:
            PermissionDeniedError: If the actor is not staff
            ValueError: If a size label appears more than once
            BackendError: If the upsert fails
        """
        require_staff(actor)

        labels = [row.size for row in rows]
        duplicates = sorted({label for label in labels if labels.count(label) > 1})
        if duplicates:
            raise ValueError(f"Duplicate sizes in request: {', '.join(duplicates)}")

        if not rows:
            return MutationResult(data=[], invalidates=[])

        payload = [
            {
                "product_id": product_id,
                "size": row.size,
                "stock": row.stock,
                "is_enabled": row.is_enabled,
            }
            for row in rows
        ]
        stored = await self._client.upsert("product_sizes", payload, on_conflict=SIZE_CONFLICT_TARGET)

        logger.info("Sizes saved", product_id=product_id, sizes=labels)
        return MutationResult(
            data=sort_sizes(_sizes_adapter.validate_python(stored)),
            invalidates=[product_sizes_key(product_id), PRODUCTS],
        )

    async def initialize_defaults(
        self,
        product_id: str,
        actor: Actor,
    ) -> MutationResult[list[ProductSize]]:
        """Create the default XS-XL rows (stock 0, enabled) for a product."""
        return await self.bulk_save(product_id, default_size_rows(), actor)

    async def update_size(
        self,
        size_id: str,
        actor: Actor,
        stock: int | None = None,
        is_enabled: bool | None = None,
    ) -> MutationResult[ProductSize]:
        """Change the stock and/or enabled flag of one size row."""
        require_staff(actor)

        updates: dict[str, int | bool] = {}
        if stock is not None:
            if stock < 0:
                raise ValueError("stock must be 0 or more")
            updates["stock"] = stock
        if is_enabled is not None:
            updates["is_enabled"] = is_enabled
        if not updates:
            raise ValueError("Nothing to update")

        rows = await self._client.update(
            self._client.table("product_sizes").eq("id", size_id),
            updates,
        )
        if not rows:
            raise NotFoundError(f"Size '{size_id}' not found", status_code=404)

        size = ProductSize.model_validate(rows[0])
        logger.info("Size updated", size_id=size_id, product_id=size.product_id, **updates)
        return MutationResult(
            data=size,
            invalidates=[product_sizes_key(size.product_id), PRODUCTS],
        )
