"""Shared fixtures: catalog data, fake timers and a fake order API."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Callable

import httpx
import pytest

from pasarantar_server.cart import CartStore
from pasarantar_server.models import Product, ProductVariant
from pasarantar_server.pasarantar_client import PasarAntarClient
from pasarantar_server.storage import CartStorage, MemoryStorage
from pasarantar_server.toast import ToastNotifier


@dataclass
class FakeTimer:
    delay: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """Records scheduled callbacks; tests fire them explicitly."""

    timers: list[FakeTimer] = field(default_factory=list)

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def fire_all(self, include_cancelled: bool = False) -> None:
        for timer in list(self.timers):
            if include_cancelled or not timer.cancelled:
                timer.callback()

    @property
    def pending(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled]


def make_variant(variant_id: str, product_id: str, price: int, weight: str = "500", **extra) -> ProductVariant:
    return ProductVariant(
        id=variant_id,
        product_id=product_id,
        unit_id="unit-gr",
        weight=weight,
        unit_abbreviation=extra.pop("unit_abbreviation", "gr"),
        price=price,
        **extra,
    )


@pytest.fixture
def chicken() -> Product:
    return Product(
        id="prod-ayam",
        name="Ayam Fillet Dada",
        slug="ayam-fillet-dada",
        category_id="cat-ayam",
        base_price=15300,
        variants=[
            make_variant("var-500", "prod-ayam", 15300),
            make_variant("var-1000", "prod-ayam", 29000, weight="1", unit_abbreviation="kg"),
        ],
    )


@pytest.fixture
def fish() -> Product:
    return Product(
        id="prod-ikan",
        name="Ikan Dori Fillet",
        slug="ikan-dori-fillet",
        category_id="cat-ikan",
        base_price=22000,
        variants=[make_variant("var-dori-500", "prod-ikan", 22000, original_price=25000)],
    )


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def notifier(scheduler: ManualScheduler) -> ToastNotifier:
    return ToastNotifier(duration=4.0, scheduler=scheduler)


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(memory_storage: MemoryStorage, notifier: ToastNotifier) -> CartStore:
    return CartStore(storage=CartStorage(memory_storage), notifier=notifier)


@dataclass
class FakeOrderAPI:
    """httpx transport handler standing in for the PasarAntar backend."""

    status_code: int = 200
    body: dict = field(
        default_factory=lambda: {
            "success": True,
            "message": "Order created successfully",
            "data": {"orderNumber": "PA20261017001"},
        }
    )
    error: Exception | None = None
    requests: list[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def order_api() -> FakeOrderAPI:
    return FakeOrderAPI()


@pytest.fixture
def api_client(order_api: FakeOrderAPI) -> PasarAntarClient:
    return PasarAntarClient("http://api.test", transport=httpx.MockTransport(order_api))
