"""Client-side shopping cart store."""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .formatters import format_weight_with_unit, product_image_url
from .models import MAX_LINE_QUANTITY, MIN_LINE_QUANTITY, Cart, CartItem, Product, ProductVariant
from .storage import CartStorage
from .toast import ToastNotifier

logger = logging.getLogger(__name__)

TOAST_IMAGE_SIZE = 100


def clamp_quantity(quantity: Union[int, float]) -> int:
    """Clamp a requested quantity into the allowed line range."""
    if math.isnan(quantity):
        return MIN_LINE_QUANTITY
    if math.isinf(quantity):
        return MAX_LINE_QUANTITY if quantity > 0 else MIN_LINE_QUANTITY
    return max(MIN_LINE_QUANTITY, min(MAX_LINE_QUANTITY, math.floor(quantity)))


@dataclass(frozen=True)
class AddItem:
    product: Product
    variant: ProductVariant
    quantity: int = 1


@dataclass(frozen=True)
class RemoveItem:
    product_id: str
    variant_id: str


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: str
    variant_id: str
    quantity: int


@dataclass(frozen=True)
class UpdateNote:
    product_id: str
    variant_id: str
    note: str


@dataclass(frozen=True)
class ClearCart:
    pass


CartAction = Union[AddItem, RemoveItem, UpdateQuantity, UpdateNote, ClearCart]
CartListener = Callable[[Cart], None]


def cart_reducer(cart: Cart, action: CartAction) -> Cart:
    """
    Apply an action to a cart and return the new cart.

    The input cart is never modified. Totals on the result are recomputed
    from its items.
    """
    if isinstance(action, AddItem):
        quantity = clamp_quantity(action.quantity)
        key = (action.product.id, action.variant.id)
        items = []
        found = False
        for item in cart.items:
            if item.key == key:
                item = item.model_copy(
                    update={"quantity": min(MAX_LINE_QUANTITY, item.quantity + quantity)}
                )
                found = True
            items.append(item)
        if not found:
            items.append(
                CartItem(product=action.product, variant=action.variant, quantity=quantity)
            )
        return Cart.from_items(items)

    if isinstance(action, RemoveItem):
        key = (action.product_id, action.variant_id)
        return Cart.from_items([item for item in cart.items if item.key != key])

    if isinstance(action, UpdateQuantity):
        quantity = clamp_quantity(action.quantity)
        key = (action.product_id, action.variant_id)
        return Cart.from_items(
            [
                item.model_copy(update={"quantity": quantity}) if item.key == key else item
                for item in cart.items
            ]
        )

    if isinstance(action, UpdateNote):
        key = (action.product_id, action.variant_id)
        return Cart.from_items(
            [
                item.model_copy(update={"note": action.note}) if item.key == key else item
                for item in cart.items
            ]
        )

    if isinstance(action, ClearCart):
        return Cart()

    raise TypeError(f"Unknown cart action: {action!r}")


class CartStore:
    """
    Owner of the in-progress cart.

    Every mutation reduces, recomputes totals and persists before
    returning, so readers only ever see consistent snapshots.
    """

    def __init__(
        self,
        storage: Optional[CartStorage] = None,
        notifier: Optional[ToastNotifier] = None,
    ) -> None:
        """
        Initialize the cart store.

        Args:
            storage: Cart persistence; the saved cart is loaded once here
            notifier: Toast shown when items are added
        """
        self.storage = storage
        self.notifier = notifier
        self._cart = storage.load() if storage is not None else Cart()
        self._listeners: list[CartListener] = []

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def items(self) -> list[CartItem]:
        return list(self._cart.items)

    @property
    def total(self) -> int:
        return self._cart.total

    @property
    def item_count(self) -> int:
        return self._cart.item_count

    @property
    def is_empty(self) -> bool:
        return self._cart.is_empty

    def get_item(self, product_id: str, variant_id: str) -> Optional[CartItem]:
        for item in self._cart.items:
            if item.key == (product_id, variant_id):
                return item
        return None

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a listener called after every mutation."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: CartAction) -> Cart:
        self._cart = cart_reducer(self._cart, action)
        if self.storage is not None:
            self.storage.save(self._cart)
        for listener in list(self._listeners):
            listener(self._cart)
        return self._cart

    def add_item(self, product: Product, variant: ProductVariant, quantity: int = 1) -> None:
        """Add a variant to the cart, merging with an existing line."""
        self.dispatch(AddItem(product=product, variant=variant, quantity=quantity))
        logger.info(f"Added {product.name} ({variant.id}) x{quantity} to cart")

        if self.notifier is not None:
            self.notifier.show(
                product.name,
                product_image_url(None, product.id, size=TOAST_IMAGE_SIZE),
                format_weight_with_unit(variant),
            )

    def remove_item(self, product_id: str, variant_id: str) -> None:
        self.dispatch(RemoveItem(product_id=product_id, variant_id=variant_id))

    def update_quantity(self, product_id: str, variant_id: str, quantity: int) -> None:
        """Set a line's quantity. Values outside 1..99 are clamped, never removed."""
        self.dispatch(UpdateQuantity(product_id=product_id, variant_id=variant_id, quantity=quantity))

    def decrement(self, product_id: str, variant_id: str) -> None:
        """Lower a line's quantity by one, removing the line below 1."""
        item = self.get_item(product_id, variant_id)
        if item is None:
            return
        if item.quantity - 1 <= 0:
            self.remove_item(product_id, variant_id)
        else:
            self.update_quantity(product_id, variant_id, item.quantity - 1)

    def update_note(self, product_id: str, variant_id: str, note: str) -> None:
        self.dispatch(UpdateNote(product_id=product_id, variant_id=variant_id, note=note))

    def clear(self) -> None:
        self.dispatch(ClearCart())
