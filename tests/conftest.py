"""Shared fixtures."""

from collections.abc import Callable
from decimal import Decimal
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from storefront.core.cart import CartStore
from storefront.core.permissions import Actor, AppRole
from storefront.infra.storage import FileCartStorage
from storefront.schemas.cart import CartLineItem
from storefront.schemas.catalog import Product, ProductSize
from storefront.services.backend_client import BackendClient, Query

ProductFactory = Callable[..., Product]


@pytest.fixture
def make_product() -> ProductFactory:
    """Build products with sensible defaults."""

    def _make(
        id: str = "prod-1",
        name: str = "Oversized Tee",
        price: str | Decimal = "100",
        **overrides: Any,
    ) -> Product:
        data: dict[str, Any] = {
            "id": id,
            "name": name,
            "slug": name.lower().replace(" ", "-"),
            "price": Decimal(str(price)),
            "stock": 10,
        }
        data.update(overrides)
        return Product(**data)

    return _make


@pytest.fixture
def make_size() -> Callable[..., ProductSize]:
    def _make(size: str, stock: int = 0, is_enabled: bool = True, product_id: str = "prod-1") -> ProductSize:
        return ProductSize(product_id=product_id, size=size, stock=stock, is_enabled=is_enabled)

    return _make


class FlakyCartStorage:
    """In-memory cart storage whose saves can be made to fail."""

    def __init__(self) -> None:
        self.saved: list[CartLineItem] = []
        self.fail = False

    def load(self) -> list[CartLineItem]:
        return list(self.saved)

    def save(self, lines: list[CartLineItem]) -> None:
        if self.fail:
            raise OSError("No space left on device")
        self.saved = list(lines)


@pytest.fixture
def flaky_storage() -> FlakyCartStorage:
    return FlakyCartStorage()


@pytest.fixture
def cart_path(tmp_path: Path) -> Path:
    return tmp_path / "cart.json"


@pytest.fixture
def cart(cart_path: Path) -> CartStore:
    return CartStore(FileCartStorage(cart_path))


@pytest.fixture
def backend() -> AsyncMock:
    """Backend client double that still builds real queries."""
    client = AsyncMock(spec=BackendClient)
    client.table.side_effect = lambda name: Query(table=name)
    return client


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id="user-admin", roles=frozenset({AppRole.ADMIN}))


@pytest.fixture
def manager() -> Actor:
    return Actor(user_id="user-manager", roles=frozenset({AppRole.MANAGER}))


@pytest.fixture
def customer() -> Actor:
    return Actor(user_id="user-customer", roles=frozenset({AppRole.CUSTOMER}))
