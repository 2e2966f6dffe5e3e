"""Backend-facing services."""

from storefront.services.auth_service import AuthError, AuthService
from storefront.services.backend_client import BackendClient, BackendError, NotFoundError, Query
from storefront.services.catalog_service import CatalogService, slugify
from storefront.services.dashboard_service import DashboardService
from storefront.services.inventory_service import InventoryService
from storefront.services.order_service import (
    CheckoutError,
    ConcurrentStatusChangeError,
    EmptyCartError,
    OrderCreationError,
    OrderService,
)

__all__ = [
    "AuthError",
    "AuthService",
    "BackendClient",
    "BackendError",
    "CatalogService",
    "CheckoutError",
    "ConcurrentStatusChangeError",
    "DashboardService",
    "EmptyCartError",
    "InventoryService",
    "NotFoundError",
    "OrderCreationError",
    "OrderService",
    "Query",
    "slugify",
]
