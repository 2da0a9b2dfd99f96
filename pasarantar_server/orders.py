"""Order submission: turns the cart into a remote order."""

import logging
import uuid
from typing import Optional

import httpx

from .auth import AuthManager
from .cart import CartStore
from .models import CartItem, CreateOrderRequest, CustomerInfo, OrderItemRequest, OrderResult
from .pasarantar_client import PasarAntarAPIError, PasarAntarClient

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Pesanan berhasil dibuat!"
FAILURE_MESSAGE = "Gagal membuat pesanan"
ERROR_MESSAGE = "Terjadi kesalahan saat membuat pesanan"


def build_order_request(
    items: list[CartItem], info: CustomerInfo, customer_id: Optional[str] = None
) -> CreateOrderRequest:
    """Map cart lines and checkout info to the order-creation payload."""
    return CreateOrderRequest(
        customer_name=info.name,
        customer_whatsapp=info.whatsapp,
        customer_address=info.address,
        customer_coordinates=info.coordinates.as_wire() if info.coordinates else None,
        shipping_method=info.shipping_method,
        delivery_day=info.delivery_day,
        payment_method=info.payment_method,
        customer_id=info.customer_id or customer_id,
        items=[
            OrderItemRequest(
                product_id=item.product.id,
                product_variant_id=item.variant.id,
                quantity=item.quantity,
                notes=item.note,
            )
            for item in items
        ],
        notes=info.notes,
    )


class OrderSubmissionService:
    """Submits the current cart and reconciles the cart with the result."""

    def __init__(
        self,
        cart_store: CartStore,
        api_client: PasarAntarClient,
        auth_manager: Optional[AuthManager] = None,
    ) -> None:
        self.cart_store = cart_store
        self.api_client = api_client
        self.auth_manager = auth_manager

    def _logged_in_customer_id(self) -> Optional[str]:
        if self.auth_manager is None:
            return None
        return self.auth_manager.get_customer_id()

    async def submit(self, info: CustomerInfo) -> OrderResult:
        """
        Create a remote order from the cart as it is right now.

        Edits made while the request is in flight are not part of the
        order. The cart is cleared only after the API confirms creation;
        on any failure it is left as it was.

        Returns:
            OrderResult with the order number on success, or a
            human-readable message on failure
        """
        items = list(self.cart_store.items)
        request = build_order_request(items, info, self._logged_in_customer_id())
        idempotency_key = str(uuid.uuid4())

        try:
            response = await self.api_client.create_order(request, idempotency_key=idempotency_key)
        except (PasarAntarAPIError, httpx.HTTPError) as e:
            logger.error(f"Error creating order: {e}")
            return OrderResult(
                success=False,
                message=str(e) or ERROR_MESSAGE,
                idempotency_key=idempotency_key,
            )

        if response.get("success"):
            data = response.get("data")
            order_number = data.get("orderNumber") if isinstance(data, dict) else None
            logger.info(f"Order {order_number} created")
            self.cart_store.clear()
            return OrderResult(
                success=True,
                message=SUCCESS_MESSAGE,
                order_number=order_number,
                idempotency_key=idempotency_key,
            )

        message = response.get("message") or FAILURE_MESSAGE
        logger.warning(f"Order rejected: {message}")
        return OrderResult(success=False, message=message, idempotency_key=idempotency_key)
