from __future__ import annotations

import json

from pasarantar_server.auth import AuthManager
from pasarantar_server.cart import CartStore
from pasarantar_server.models import Cart
from pasarantar_server.storage import CART_STORAGE_KEY, CartStorage, LocalStorage, MemoryStorage


def test_cart_round_trip_through_file(tmp_path, chicken, fish) -> None:
    storage = LocalStorage(str(tmp_path / "storage.json"))
    store = CartStore(storage=CartStorage(storage))
    store.add_item(chicken, chicken.variants[0], quantity=3)
    store.add_item(fish, fish.variants[0])
    store.update_note(fish.id, "var-dori-500", "buang kepala")

    reloaded = CartStore(storage=CartStorage(LocalStorage(str(tmp_path / "storage.json"))))

    assert reloaded.cart == store.cart
    assert reloaded.total == 15300 * 3 + 22000
    assert reloaded.item_count == 4


def test_stored_blob_uses_wire_names(memory_storage, chicken) -> None:
    store = CartStore(storage=CartStorage(memory_storage))
    store.add_item(chicken, chicken.variants[0])

    blob = json.loads(memory_storage.get_item(CART_STORAGE_KEY))

    assert blob["itemCount"] == 1
    assert blob["items"][0]["variant"]["productId"] == "prod-ayam"


def test_missing_cart_loads_empty(memory_storage) -> None:
    assert CartStorage(memory_storage).load() == Cart()


def test_corrupt_cart_loads_empty(memory_storage) -> None:
    memory_storage.set_item(CART_STORAGE_KEY, "{not json")
    assert CartStorage(memory_storage).load() == Cart()


def test_invalid_cart_shape_loads_empty(memory_storage) -> None:
    memory_storage.set_item(CART_STORAGE_KEY, json.dumps({"items": [{"quantity": "lots"}]}))
    assert CartStorage(memory_storage).load() == Cart()


def test_stored_totals_are_recomputed(memory_storage, chicken) -> None:
    store = CartStore(storage=CartStorage(memory_storage))
    store.add_item(chicken, chicken.variants[0], quantity=2)
    blob = json.loads(memory_storage.get_item(CART_STORAGE_KEY))
    blob["total"] = 1
    blob["itemCount"] = 999
    memory_storage.set_item(CART_STORAGE_KEY, json.dumps(blob))

    cart = CartStorage(memory_storage).load()

    assert cart.total == 30600
    assert cart.item_count == 2


def test_corrupt_storage_file_is_not_fatal(tmp_path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("garbage")

    storage = LocalStorage(str(path))

    assert storage.get_item(CART_STORAGE_KEY) is None


def test_write_failure_is_swallowed(tmp_path, chicken) -> None:
    storage = LocalStorage(str(tmp_path / "missing-dir" / "storage.json"))
    store = CartStore(storage=CartStorage(storage))

    store.add_item(chicken, chicken.variants[0])

    assert store.item_count == 1


def test_last_write_wins_between_instances(tmp_path, chicken, fish) -> None:
    path = str(tmp_path / "storage.json")
    tab_a = CartStore(storage=CartStorage(LocalStorage(path)))
    tab_b = CartStore(storage=CartStorage(LocalStorage(path)))

    tab_a.add_item(chicken, chicken.variants[0])
    tab_b.add_item(fish, fish.variants[0])

    reloaded = CartStorage(LocalStorage(path)).load()
    assert [item.product.id for item in reloaded.items] == ["prod-ikan"]


def test_remove_item_from_storage() -> None:
    storage = MemoryStorage()
    storage.set_item("a", "1")
    storage.remove_item("a")
    storage.remove_item("a")

    assert storage.get_item("a") is None


def test_auth_manager_reads_customer_id() -> None:
    storage = MemoryStorage()
    AuthManager(storage).save_session("tok", {"id": "cust-1", "name": "Budi"})

    auth = AuthManager(storage)

    assert auth.is_authenticated()
    assert auth.get_customer_id() == "cust-1"
    assert auth.get_token() == "tok"


def test_auth_manager_without_customer() -> None:
    auth = AuthManager(MemoryStorage())

    assert not auth.is_authenticated()
    assert auth.get_customer_id() is None


def test_auth_manager_ignores_corrupt_customer() -> None:
    storage = MemoryStorage()
    storage.set_item("customer-user", "{broken")

    assert AuthManager(storage).get_customer_id() is None


def test_auth_manager_clear_session() -> None:
    storage = MemoryStorage()
    auth = AuthManager(storage)
    auth.save_session("tok", {"id": "cust-1"})

    auth.clear_session()

    assert auth.get_customer_id() is None
    assert storage.get_item("customer-token") is None
