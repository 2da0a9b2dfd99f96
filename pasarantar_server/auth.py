"""Logged-in customer lookup."""

import json
from typing import Any, Optional
import logging

from .models import CustomerSession
from .storage import LocalStorage

logger = logging.getLogger(__name__)

CUSTOMER_USER_KEY = "customer-user"
CUSTOMER_TOKEN_KEY = "customer-token"


class AuthManager:
    """Reads and stores the logged-in customer record."""

    def __init__(self, storage: LocalStorage) -> None:
        """
        Initialize the authentication manager.

        Args:
            storage: Storage holding the customer record and token
        """
        self.storage = storage
        self.session: CustomerSession = self._load_session()

    def _load_session(self) -> CustomerSession:
        token = self.storage.get_item(CUSTOMER_TOKEN_KEY)
        customer = None
        raw = self.storage.get_item(CUSTOMER_USER_KEY)
        if raw:
            try:
                customer = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.error(f"Error reading stored customer: {e}")
            if not isinstance(customer, dict):
                customer = None
        return CustomerSession(
            token=token,
            customer=customer,
            is_authenticated=bool(token and customer),
        )

    def reload(self) -> CustomerSession:
        """Re-read the session, picking up logins made elsewhere."""
        self.session = self._load_session()
        return self.session

    def save_session(self, token: str, customer: dict[str, Any]) -> None:
        """
        Save a customer session.

        Args:
            token: Bearer token issued by the API
            customer: Customer record, must contain ``id``
        """
        self.storage.set_item(CUSTOMER_TOKEN_KEY, token)
        self.storage.set_item(CUSTOMER_USER_KEY, json.dumps(customer))
        self.session = CustomerSession(token=token, customer=customer, is_authenticated=True)

    def clear_session(self) -> None:
        self.storage.remove_item(CUSTOMER_TOKEN_KEY)
        self.storage.remove_item(CUSTOMER_USER_KEY)
        self.session = CustomerSession()

    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    def get_token(self) -> Optional[str]:
        return self.session.token

    def get_customer(self) -> Optional[dict[str, Any]]:
        return self.session.customer

    def get_customer_id(self) -> Optional[str]:
        """ID of the logged-in customer, or None when nobody is logged in."""
        customer = self.session.customer
        if not customer:
            return None
        customer_id = customer.get("id")
        return str(customer_id) if customer_id else None
