"""Data models for PasarAntar entities."""

from typing import Any, Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_LINE_QUANTITY = 99
MIN_LINE_QUANTITY = 1


class ApiModel(BaseModel):
    """Base model accepting both camelCase wire names and snake_case attributes."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Category(ApiModel):
    """Represents a product category."""

    id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    is_active: bool = Field(default=True, alias="isActive")


class ProductVariant(ApiModel):
    """A purchasable weight/size configuration of a product."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Variant ID")
    product_id: str = Field(alias="productId", description="Owning product ID")
    unit_id: Optional[str] = Field(None, alias="unitId")
    weight: str = Field(description="Display weight, e.g. '500'")
    unit_abbreviation: Optional[str] = Field(None, alias="unitAbbreviation")
    unit_name: Optional[str] = Field(None, alias="unitName")
    price: int = Field(ge=0, description="Price in Rupiah")
    original_price: Optional[int] = Field(
        None, alias="originalPrice", description="Price before discount, only when on sale"
    )
    in_stock: bool = Field(default=True, alias="inStock")
    min_order_quantity: int = Field(default=1, alias="minOrderQuantity")

    @model_validator(mode="after")
    def _check_sale_price(self) -> "ProductVariant":
        if self.original_price is not None and self.price > self.original_price:
            raise ValueError(
                f"price {self.price} exceeds original price {self.original_price}"
            )
        return self


class Product(ApiModel):
    """Represents a product from the PasarAntar catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Product ID")
    name: str = Field(description="Product name")
    slug: str = ""
    category_id: Optional[str] = Field(None, alias="categoryId")
    description: str = ""
    image_url: Optional[str] = Field(None, alias="imageUrl")
    rating: float = 0
    review_count: int = Field(default=0, alias="reviewCount")
    is_on_sale: bool = Field(default=False, alias="isOnSale")
    discount_percentage: Optional[float] = Field(None, alias="discountPercentage")
    base_price: int = Field(default=0, alias="basePrice")
    category: Optional[Category] = None
    variants: list[ProductVariant] = Field(default_factory=list)

    def get_variant(self, variant_id: str) -> Optional[ProductVariant]:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None


class ProductReview(ApiModel):
    """A customer review of a product."""

    id: str
    product_id: str = Field(alias="productId")
    customer_name: str = Field(alias="customerName")
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    date: Optional[str] = None
    verified: bool = False


class CartItem(ApiModel):
    """One (product, variant) line in the cart."""

    model_config = ConfigDict(frozen=True)

    product: Product
    variant: ProductVariant
    quantity: int = Field(ge=MIN_LINE_QUANTITY, le=MAX_LINE_QUANTITY)
    note: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.product.id, self.variant.id)

    @property
    def subtotal(self) -> int:
        return self.variant.price * self.quantity


class Cart(ApiModel):
    """Immutable cart snapshot. Totals are always derived from ``items``."""

    model_config = ConfigDict(frozen=True)

    items: tuple[CartItem, ...] = ()
    total: int = 0
    item_count: int = Field(default=0, alias="itemCount")

    @classmethod
    def from_items(cls, items: Iterable[CartItem]) -> "Cart":
        """Build a cart, recomputing total and item count."""
        items = tuple(items)
        return cls(
            items=items,
            total=sum(item.variant.price * item.quantity for item in items),
            item_count=sum(item.quantity for item in items),
        )

    @property
    def is_empty(self) -> bool:
        return not self.items


class ToastState(BaseModel):
    """The single "item added" notification."""

    show: bool = False
    product_name: str = ""
    product_image: str = ""
    variant_info: str = ""


class Coordinates(BaseModel):
    """Delivery geocoordinates."""

    latitude: float
    longitude: float

    def as_wire(self) -> str:
        return f"{self.latitude},{self.longitude}"


ShippingMethod = Literal["express", "pickup"]
DeliveryDay = Literal["selasa", "kamis", "sabtu"]
PaymentMethod = Literal["transfer", "cod"]


class CustomerInfo(ApiModel):
    """Checkout information entered by the customer."""

    name: str = ""
    whatsapp: str = ""
    address: str = ""
    coordinates: Optional[Coordinates] = None
    shipping_method: ShippingMethod = Field(default="express", alias="shippingMethod")
    delivery_day: Optional[DeliveryDay] = Field(None, alias="deliveryDay")
    payment_method: PaymentMethod = Field(default="transfer", alias="paymentMethod")
    customer_id: Optional[str] = Field(None, alias="customerId")
    notes: Optional[str] = None


class OrderItemRequest(ApiModel):
    """An order line as sent to the order-creation endpoint."""

    product_id: str = Field(alias="productId")
    product_variant_id: str = Field(alias="productVariantId")
    quantity: int
    notes: Optional[str] = None


class CreateOrderRequest(ApiModel):
    """Payload of ``POST /api/orders``."""

    customer_name: str = Field(alias="customerName")
    customer_whatsapp: str = Field(alias="customerWhatsapp")
    customer_address: str = Field(alias="customerAddress")
    customer_coordinates: Optional[str] = Field(None, alias="customerCoordinates")
    shipping_method: ShippingMethod = Field(alias="shippingMethod")
    delivery_day: Optional[DeliveryDay] = Field(None, alias="deliveryDay")
    payment_method: PaymentMethod = Field(alias="paymentMethod")
    customer_id: Optional[str] = Field(None, alias="customerId")
    items: list[OrderItemRequest] = Field(default_factory=list)
    notes: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class OrderResult(BaseModel):
    """Outcome of an order submission attempt."""

    success: bool
    message: str
    order_number: Optional[str] = None
    idempotency_key: Optional[str] = None


class CustomerSession(BaseModel):
    """Locally stored logged-in customer."""

    token: Optional[str] = None
    customer: Optional[dict[str, Any]] = None
    is_authenticated: bool = False
