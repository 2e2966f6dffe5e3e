"""Catalog service - product and category reads plus admin CRUD."""

import re
from collections.abc import Sequence

from pydantic import TypeAdapter

from storefront.core.permissions import Actor, require_staff
from storefront.infra.logging import get_logger
from storefront.schemas.catalog import (
    Category,
    CategoryInput,
    Product,
    ProductInput,
    SizeRow,
)
from storefront.schemas.common import CATEGORIES, PRODUCTS, MutationResult
from storefront.services.backend_client import BackendClient, BackendError, NotFoundError
from storefront.services.inventory_service import InventoryService

logger = get_logger(__name__)

PRODUCT_COLUMNS = "*,category:categories(*)"

_products_adapter = TypeAdapter(list[Product])
_categories_adapter = TypeAdapter(list[Category])


def slugify(text: str) -> str:
    """URL slug: lowercase, spaces to dashes, other punctuation dropped."""
    slug = text.lower().strip()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    return re.sub(r"-+", "-", slug)


class CatalogService:
    """Products and categories."""

    def __init__(self, client: BackendClient, inventory: InventoryService) -> None:
        self._client = client
        self._inventory = inventory

    # =========================================================================
    # Products
    # =========================================================================

    async def list_products(
        self,
        category_slug: str | None = None,
        featured: bool = False,
        search: str | None = None,
        include_inactive: bool = False,
    ) -> list[Product]:
        """List products, newest first.

        Args:
            category_slug: Only products in this category; unknown slug yields []
            featured: Only featured products
            search: Case-insensitive substring match on product name
            include_inactive: Include products hidden from the shop
        """
        query = (
            self._client.table("products")
            .select(PRODUCT_COLUMNS)
            .order("created_at", descending=True)
        )

        if not include_inactive:
            query = query.eq("is_active", True)

        if category_slug:
            try:
                category = await self._client.select_one(
                    self._client.table("categories").select("id").eq("slug", category_slug)
                )
            except NotFoundError:
                logger.debug("Unknown category slug", category_slug=category_slug)
                return []
            query = query.eq("category_id", category["id"])

        if featured:
            query = query.eq("is_featured", True)

        if search and search.strip():
            query = query.contains_text("name", search.strip())

        rows = await self._client.select(query)
        return _products_adapter.validate_python(rows)

    async def get_product(self, slug: str) -> Product:
        """Fetch one product by slug.

        Raises:
            NotFoundError: If no product has this slug
        """
        row = await self._client.select_one(
            self._client.table("products").select(PRODUCT_COLUMNS).eq("slug", slug)
        )
        return Product.model_validate(row)

    async def save_product(
        self,
        data: ProductInput,
        sizes: Sequence[SizeRow],
        actor: Actor,
        product_id: str | None = None,
    ) -> MutationResult[Product]:
        """Create or update a product, then save its size rows.

        Args:
            data: Validated product form values
            sizes: Size inventory rows to upsert for the product
            actor: Acting staff member
            product_id: Existing product to update; None creates a new one
        """
        require_staff(actor)

        payload = data.model_dump(mode="json")
        if product_id is None:
            rows = await self._client.insert("products", payload)
            action = "created"
        else:
            rows = await self._client.update(
                self._client.table("products").eq("id", product_id),
                payload,
            )
            action = "updated"

        if not rows:
            raise BackendError(f"Product was not {action}", status_code=404 if product_id else None)
        product = Product.model_validate(rows[0])

        size_result = await self._inventory.bulk_save(product.id, sizes, actor)

        logger.info("Product saved", action=action, product_id=product.id, slug=product.slug)
        return MutationResult(
            data=product,
            invalidates=[PRODUCTS, *size_result.invalidates],
        )

    async def delete_product(self, product_id: str, actor: Actor) -> MutationResult[None]:
        require_staff(actor)
        await self._client.delete(self._client.table("products").eq("id", product_id))
        logger.info("Product deleted", product_id=product_id)
        return MutationResult(invalidates=[PRODUCTS])

    # =========================================================================
    # Categories
    # =========================================================================

    async def list_categories(self) -> list[Category]:
        rows = await self._client.select(self._client.table("categories").order("name"))
        return _categories_adapter.validate_python(rows)

    async def save_category(
        self,
        data: CategoryInput,
        actor: Actor,
        category_id: str | None = None,
    ) -> MutationResult[Category]:
        """Create or update a category. A blank slug is derived from the name."""
        require_staff(actor)

        payload = data.model_dump(mode="json")
        payload["slug"] = data.slug or slugify(data.name)

        if category_id is None:
            rows = await self._client.insert("categories", payload)
        else:
            rows = await self._client.update(
                self._client.table("categories").eq("id", category_id),
                payload,
            )
        if not rows:
            raise BackendError("Category was not saved", status_code=404 if category_id else None)

        category = Category.model_validate(rows[0])
        logger.info("Category saved", category_id=category.id, slug=category.slug)
        # Product listings embed the category
        return MutationResult(data=category, invalidates=[CATEGORIES, PRODUCTS])

    async def delete_category(self, category_id: str, actor: Actor) -> MutationResult[None]:
        require_staff(actor)
        await self._client.delete(self._client.table("categories").eq("id", category_id))
        logger.info("Category deleted", category_id=category_id)
        return MutationResult(invalidates=[CATEGORIES, PRODUCTS])
