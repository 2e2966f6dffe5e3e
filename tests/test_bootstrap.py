"""Tests for the composition root."""

from pathlib import Path

import httpx
import pytest

from storefront.bootstrap import create_storefront, storefront_session
from storefront.config import Settings
from storefront.infra.storage import FileCartStorage


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        backend_url="http://backend.test",
        backend_anon_key="anon",
        cart_storage_path=str(tmp_path / "cart.json"),
    )


class TestCreateStorefront:
    def test_services_share_client_and_cart(self, settings: Settings):
        storefront = create_storefront(settings)

        assert storefront.client.rest_url == "http://backend.test/rest/v1"
        assert storefront.client.api_key == "anon"
        assert storefront.orders._cart is storefront.cart
        assert storefront.catalog._inventory is storefront.inventory
        assert storefront.auth.actor.user_id is None

    def test_cart_storage_override(self, settings: Settings, tmp_path: Path, make_product):
        storage = FileCartStorage(tmp_path / "other.json")
        storage.save([])

        storefront = create_storefront(settings, cart_storage=storage)
        storefront.cart.add_item(make_product())

        assert len(storage.load()) == 1
        assert not (tmp_path / "cart.json").exists()

    @pytest.mark.asyncio
    async def test_transport_reaches_backend(self, settings: Settings):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"id": "c1", "name": "Tops", "slug": "tops"}])

        storefront = create_storefront(settings, transport=httpx.MockTransport(handler))

        categories = await storefront.catalog.list_categories()

        assert [category.slug for category in categories] == ["tops"]
        await storefront.close()


class TestStorefrontSession:
    @pytest.mark.asyncio
    async def test_closes_client(self, settings: Settings):
        async with storefront_session(settings) as storefront:
            await storefront.client._get_client()
            assert storefront.client._client is not None

        assert storefront.client._client is None
