from __future__ import annotations

import httpx
import pytest

from pasarantar_server.pasarantar_client import PasarAntarAPIError, PasarAntarClient

PRODUCT = {
    "id": "prod-ayam",
    "name": "Ayam Fillet Dada",
    "slug": "ayam-fillet-dada",
    "categoryId": "cat-ayam",
    "basePrice": 15300,
    "rating": 4.8,
    "reviewCount": 12,
    "isOnSale": True,
    "discountPercentage": 10,
    "variants": [
        {
            "id": "var-500",
            "productId": "prod-ayam",
            "unitId": "unit-gr",
            "weight": "500",
            "unitAbbreviation": "gr",
            "price": 15300,
            "originalPrice": 17000,
            "inStock": True,
            "minOrderQuantity": 1,
        }
    ],
}


def _client(handler) -> PasarAntarClient:
    return PasarAntarClient("http://api.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_products_passes_search() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": [PRODUCT]})

    async with _client(handler) as client:
        products = await client.get_products(search="ayam")

    assert seen[0].url.path == "/api/products"
    assert seen[0].url.params["search"] == "ayam"
    assert products[0].name == "Ayam Fillet Dada"
    assert products[0].variants[0].original_price == 17000
    assert products[0].is_on_sale is True


@pytest.mark.asyncio
async def test_get_product_by_slug() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/products/slug/ayam-fillet-dada"
        return httpx.Response(200, json={"success": True, "data": PRODUCT})

    async with _client(handler) as client:
        product = await client.get_product_by_slug("ayam-fillet-dada")

    assert product.id == "prod-ayam"


@pytest.mark.asyncio
async def test_get_product_not_found_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"success": False, "message": "Product not found"})

    async with _client(handler) as client:
        assert await client.get_product("missing") is None


@pytest.mark.asyncio
async def test_server_error_raises_with_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"success": False, "message": "Database down"})

    async with _client(handler) as client:
        with pytest.raises(PasarAntarAPIError) as exc_info:
            await client.get_categories()

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Database down"


@pytest.mark.asyncio
async def test_invalid_json_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    async with _client(handler) as client:
        with pytest.raises(PasarAntarAPIError):
            await client.get_categories()


@pytest.mark.asyncio
async def test_categories_and_reviews() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/categories":
            return httpx.Response(200, json={"success": True, "data": [{"id": "cat-ayam", "name": "Ayam"}]})
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": [{"id": "r1", "productId": "prod-ayam", "customerName": "Rina", "rating": 5, "comment": "Segar"}],
            },
        )

    async with _client(handler) as client:
        categories = await client.get_categories()
        reviews = await client.get_product_reviews("prod-ayam")

    assert categories[0].name == "Ayam"
    assert reviews[0].customer_name == "Rina"


@pytest.mark.asyncio
async def test_website_settings_and_order_lookup() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/website-settings":
            return httpx.Response(200, json={"success": True, "data": {"storeName": "PasarAntar"}})
        return httpx.Response(404, json={"success": False, "message": "Order not found"})

    async with _client(handler) as client:
        settings = await client.get_website_settings()
        order = await client.get_order("missing")

    assert settings["storeName"] == "PasarAntar"
    assert order is None
