"""Composition root.

Builds the service graph once at startup. Consumers receive the
`Storefront` container (or individual services from it) explicitly;
there are no module-level service singletons.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from storefront import __version__
from storefront.config import Settings, get_settings
from storefront.core.cart import CartStore
from storefront.infra.logging import get_logger, setup_logging
from storefront.infra.storage import CartStorage, FileCartStorage
from storefront.services.auth_service import AuthService
from storefront.services.backend_client import BackendClient
from storefront.services.catalog_service import CatalogService
from storefront.services.dashboard_service import DashboardService
from storefront.services.inventory_service import InventoryService
from storefront.services.order_service import OrderService

logger = get_logger(__name__)


@dataclass(frozen=True)
class Storefront:
    """All storefront services, wired together."""

    settings: Settings
    client: BackendClient
    auth: AuthService
    cart: CartStore
    catalog: CatalogService
    inventory: InventoryService
    orders: OrderService
    dashboard: DashboardService

    async def close(self) -> None:
        await self.client.close()


def create_storefront(
    settings: Settings | None = None,
    cart_storage: CartStorage | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Storefront:
    """Build the service graph.

    Args:
        settings: Settings to use (defaults to environment settings)
        cart_storage: Cart storage override (defaults to the configured file)
        transport: Optional httpx transport for the backend client

    Returns:
        Wired Storefront container
    """
    settings = settings or get_settings()

    client = BackendClient(
        rest_url=settings.rest_url,
        auth_url=settings.auth_url,
        api_key=settings.backend_anon_key,
        timeout=settings.backend_timeout,
        transport=transport,
    )
    cart = CartStore(cart_storage or FileCartStorage(settings.cart_storage_path))
    inventory = InventoryService(client)

    return Storefront(
        settings=settings,
        client=client,
        auth=AuthService(client),
        cart=cart,
        catalog=CatalogService(client, inventory),
        inventory=inventory,
        orders=OrderService(client, cart),
        dashboard=DashboardService(client),
    )


@asynccontextmanager
async def storefront_session(settings: Settings | None = None) -> AsyncGenerator[Storefront, None]:
    """Set up logging, build the storefront and close it on exit."""
    settings = settings or get_settings()
    setup_logging(settings)

    logger.info(
        "Storefront starting",
        version=__version__,
        environment=settings.environment,
        backend_url=settings.backend_url,
    )
    storefront = create_storefront(settings)
    try:
        yield storefront
    finally:
        await storefront.close()
        logger.info("Storefront closed")
