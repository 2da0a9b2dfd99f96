"""Checkout form: collects customer info and submits the order."""

import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from .auth import AuthManager
from .cart import CartStore
from .formatters import normalize_whatsapp
from .models import Coordinates, CustomerInfo, OrderResult
from .orders import OrderSubmissionService
from .storage import LocalStorage

logger = logging.getLogger(__name__)

CHECKOUT_INFO_KEY = "pasarantar-checkout-info"
WHATSAPP_PATTERN = re.compile(r"^08[0-9]{9,12}$")

EMPTY_CART_MESSAGE = "Keranjang belanja kosong"
INVALID_FORM_MESSAGE = "Mohon lengkapi data pelanggan"


class CheckoutForm:
    """Checkout form state, validation and submission."""

    def __init__(
        self,
        cart_store: CartStore,
        order_service: OrderSubmissionService,
        storage: Optional[LocalStorage] = None,
        auth_manager: Optional[AuthManager] = None,
    ) -> None:
        self.cart_store = cart_store
        self.order_service = order_service
        self.storage = storage
        self.auth_manager = auth_manager

        self.info = self._load_info()
        self.errors: dict[str, str] = {}
        self.error_message: Optional[str] = None
        self.is_processing = False
        self.is_success = False
        self.order_number: Optional[str] = None

        self._prefill_from_customer()

    def _load_info(self) -> CustomerInfo:
        if self.storage is None:
            return CustomerInfo()
        raw = self.storage.get_item(CHECKOUT_INFO_KEY)
        if not raw:
            return CustomerInfo()
        try:
            return CustomerInfo.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Error loading checkout info from storage: {e}")
            return CustomerInfo()

    def _save_info(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.set_item(CHECKOUT_INFO_KEY, self.info.model_dump_json(by_alias=True))
        except Exception as e:
            logger.error(f"Error saving checkout info to storage: {e}")

    def _prefill_from_customer(self) -> None:
        """Fill an empty form from the logged-in customer's profile."""
        if self.auth_manager is None:
            return
        customer = self.auth_manager.get_customer()
        if not customer:
            return
        if self.info.name or self.info.whatsapp or self.info.address:
            return
        self.info = self.info.model_copy(
            update={
                "name": customer.get("name") or "",
                "whatsapp": customer.get("whatsapp") or "",
                "address": customer.get("address") or "",
            }
        )

    def update(self, **fields: Any) -> CustomerInfo:
        """Merge field values into the form and persist them."""
        data = self.info.model_dump()
        data.update(fields)
        self.info = CustomerInfo.model_validate(data)
        for name in fields:
            self.errors.pop(name, None)
        self._save_info()
        return self.info

    def set_coordinates(self, latitude: float, longitude: float) -> None:
        self.update(coordinates=Coordinates(latitude=latitude, longitude=longitude))

    def validate(self) -> dict[str, str]:
        """Validate required contact fields. Returns field -> message."""
        errors: dict[str, str] = {}

        if not self.info.name.strip():
            errors["name"] = "Nama lengkap harus diisi"

        if not self.info.whatsapp.strip():
            errors["whatsapp"] = "Nomor WhatsApp harus diisi"
        elif not WHATSAPP_PATTERN.match(normalize_whatsapp(self.info.whatsapp)):
            errors["whatsapp"] = "Format nomor WhatsApp tidak valid (contoh: 08123456789)"

        if not self.info.address.strip():
            errors["address"] = "Alamat lengkap harus diisi"

        self.errors = errors
        return errors

    async def submit(self) -> OrderResult:
        """
        Validate and submit the order.

        On failure the cart and the entered info are kept so the customer
        can fix the problem and resubmit.
        """
        self.error_message = None

        if self.cart_store.is_empty:
            self.error_message = EMPTY_CART_MESSAGE
            return OrderResult(success=False, message=EMPTY_CART_MESSAGE)

        if self.validate():
            self.error_message = INVALID_FORM_MESSAGE
            return OrderResult(success=False, message=INVALID_FORM_MESSAGE)

        self.is_processing = True
        try:
            result = await self.order_service.submit(self.info)
        finally:
            self.is_processing = False

        if result.success:
            self.order_number = result.order_number
            self.is_success = True
            if self.storage is not None:
                self.storage.remove_item(CHECKOUT_INFO_KEY)
        else:
            self.error_message = result.message
        return result

    def reset(self) -> None:
        """Clear the form after a finished order."""
        self.info = CustomerInfo()
        self.errors = {}
        self.error_message = None
        self.is_success = False
        self.order_number = None
        if self.storage is not None:
            self.storage.remove_item(CHECKOUT_INFO_KEY)
