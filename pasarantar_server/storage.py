"""Durable key-value storage and cart persistence."""

import json
import os
from pathlib import Path
from typing import Optional
import logging

from pydantic import ValidationError

from .models import Cart

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "pasarantar-cart"


class LocalStorage:
    """
    JSON-file backed string key-value store.

    Mirrors browser local storage: synchronous get/set of string values.
    Every write rewrites the whole file, so two processes sharing the file
    overwrite each other (last write wins).
    """

    def __init__(self, storage_file: Optional[str] = None) -> None:
        """
        Initialize storage.

        Args:
            storage_file: Path to the storage file (default: ~/.pasarantar_storage.json)
        """
        if storage_file is None:
            storage_file = str(Path.home() / ".pasarantar_storage.json")
        self.storage_file = storage_file

    def _read_all(self) -> dict[str, str]:
        if not os.path.exists(self.storage_file):
            return {}
        try:
            with open(self.storage_file, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read storage file {self.storage_file}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed storage file {self.storage_file}")
            return {}
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            with open(self.storage_file, "w") as f:
                json.dump(data, f, indent=2)
            os.chmod(self.storage_file, 0o600)
        except OSError as e:
            logger.error(f"Could not write storage file {self.storage_file}: {e}")

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


class MemoryStorage(LocalStorage):
    """Process-local storage with the same interface, used when nothing should touch disk."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def _read_all(self) -> dict[str, str]:
        return dict(self._data)

    def _write_all(self, data: dict[str, str]) -> None:
        self._data = dict(data)


class CartStorage:
    """Persists the cart as a single JSON blob."""

    def __init__(self, storage: LocalStorage, key: str = CART_STORAGE_KEY) -> None:
        self.storage = storage
        self.key = key

    def load(self) -> Cart:
        """Load the saved cart, or an empty cart if nothing usable is stored."""
        raw = self.storage.get_item(self.key)
        if not raw:
            return Cart()
        try:
            saved = Cart.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Error loading cart from storage: {e}")
            return Cart()
        # Stored totals are not trusted
        return Cart.from_items(saved.items)

    def save(self, cart: Cart) -> None:
        try:
            self.storage.set_item(self.key, cart.model_dump_json(by_alias=True))
        except Exception as e:
            logger.error(f"Error saving cart to storage: {e}")
