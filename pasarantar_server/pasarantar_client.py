"""PasarAntar REST API client."""

import logging
from typing import Any, Optional

import httpx
from .auth import AuthManager
from .models import Category, CreateOrderRequest, Product, ProductReview

logger = logging.getLogger(__name__)


class PasarAntarAPIError(Exception):
    """Raised when the API cannot be reached or reports an HTTP error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PasarAntarClient:
    """Client for the PasarAntar storefront API."""

    DEFAULT_BASE_URL = "http://localhost:3000"

    def __init__(
        self,
        base_url: Optional[str] = None,
        auth_manager: Optional[AuthManager] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the PasarAntar client.

        Args:
            base_url: API root (default: http://localhost:3000)
            auth_manager: Source of the customer bearer token, if any
            timeout: Request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.auth_manager = auth_manager
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def __aenter__(self) -> "PasarAntarClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _auth_headers(self) -> dict[str, str]:
        if self.auth_manager is None:
            return {}
        token = self.auth_manager.get_token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(
        self,
        method: str,
        endpoint: str,
        headers: Optional[dict[str, str]] = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Send a request and decode the JSON envelope.

        Raises:
            PasarAntarAPIError: on transport errors, undecodable bodies and
                non-2xx responses (using the body's message when present)
        """
        request_headers = {**self._auth_headers(), **(headers or {})}
        try:
            response = await self.client.request(method, endpoint, headers=request_headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {endpoint} failed: {e}")
            raise PasarAntarAPIError(f"Gagal terhubung ke server: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"{method} {endpoint} returned invalid JSON (status={response.status_code})")
            raise PasarAntarAPIError("Respon server tidak valid", response.status_code) from e

        if not isinstance(data, dict):
            raise PasarAntarAPIError("Respon server tidak valid", response.status_code)

        if response.is_error:
            message = data.get("message") or "Something went wrong"
            logger.warning(f"{method} {endpoint}: status={response.status_code} message={message}")
            raise PasarAntarAPIError(message, response.status_code)

        return data

    async def get_products(self, search: Optional[str] = None) -> list[Product]:
        """
        List catalog products.

        Args:
            search: Optional text matched against name, description and category

        Returns:
            Products with their variants
        """
        params = {"search": search} if search else None
        data = await self._request("GET", "/api/products", params=params)
        payload = data.get("data") or []
        if isinstance(payload, dict):
            payload = payload.get("products", [])
        return [Product.model_validate(item) for item in payload]

    async def get_product(self, product_id: str) -> Optional[Product]:
        try:
            data = await self._request("GET", f"/api/products/{product_id}")
        except PasarAntarAPIError as e:
            if e.status_code == 404:
                return None
            raise
        return Product.model_validate(data["data"]) if data.get("data") else None

    async def get_product_by_slug(self, slug: str) -> Optional[Product]:
        try:
            data = await self._request("GET", f"/api/products/slug/{slug}")
        except PasarAntarAPIError as e:
            if e.status_code == 404:
                return None
            raise
        return Product.model_validate(data["data"]) if data.get("data") else None

    async def get_categories(self) -> list[Category]:
        data = await self._request("GET", "/api/categories")
        return [Category.model_validate(item) for item in data.get("data") or []]

    async def get_product_reviews(self, product_id: str) -> list[ProductReview]:
        data = await self._request("GET", f"/api/reviews/product/{product_id}")
        payload = data.get("data") or []
        if isinstance(payload, dict):
            payload = payload.get("reviews", [])
        return [ProductReview.model_validate(item) for item in payload]

    async def get_website_settings(self) -> dict[str, Any]:
        data = await self._request("GET", "/api/website-settings")
        return data.get("data") or {}

    async def create_order(
        self, order: CreateOrderRequest, idempotency_key: Optional[str] = None
    ) -> dict[str, Any]:
        """
        Create an order.

        Args:
            order: Order payload
            idempotency_key: Token letting the server collapse retried submissions

        Returns:
            The response envelope, ``{"success": ..., "message": ..., "data": ...}``.
            API-reported failures with a 4xx/5xx status are returned as
            ``{"success": False, "message": ...}`` rather than raised.
        """
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        logger.info(f"Creating order with {len(order.items)} item(s)")
        try:
            return await self._request("POST", "/api/orders", headers=headers, json=order.to_payload())
        except PasarAntarAPIError as e:
            if e.status_code is None:
                raise
            return {"success": False, "message": e.message}

    async def get_order(self, order_id: str) -> Optional[dict[str, Any]]:
        try:
            data = await self._request("GET", f"/api/orders/{order_id}")
        except PasarAntarAPIError as e:
            if e.status_code == 404:
                return None
            raise
        return data.get("data")

    async def aclose(self) -> None:
        await self.client.aclose()
