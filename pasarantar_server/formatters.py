"""Display formatting for prices, weights and product images."""

import re
from typing import Iterable, Optional

from .models import ProductVariant

DEFAULT_SERVER_URL = "http://localhost:3000"


def format_price(amount: int) -> str:
    """
    Format a Rupiah amount the way the storefront shows it.

    Args:
        amount: Price in Rupiah (no decimal subdivision)

    Returns:
        Display string such as "Rp 15.300"
    """
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(int(amount)):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"


def format_weight_with_unit(variant: Optional[ProductVariant]) -> str:
    """Format variant weight with unit abbreviation (e.g. "1kg", "500gr")."""
    if variant is None:
        return "N/A"
    if variant.unit_abbreviation:
        return f"{variant.weight}{variant.unit_abbreviation}"
    return variant.weight


def format_weight_for_price(variant: Optional[ProductVariant]) -> str:
    """Weight label used after a price, e.g. "/500gr"."""
    if variant is None:
        return ""
    return f"/{format_weight_with_unit(variant)}"


def format_price_range(variants: Iterable[ProductVariant]) -> str:
    """Cheapest-to-dearest price range across variants."""
    prices = [variant.price for variant in variants]
    if not prices:
        return format_price(0)

    low, high = min(prices), max(prices)
    if low == high:
        return format_price(low)
    return f"{format_price(low)} - {format_price(high)}"


def product_image_url(
    image_url: Optional[str],
    product_id: str,
    size: int = 600,
    server_url: str = DEFAULT_SERVER_URL,
) -> str:
    """
    Resolve the URL of a product image.

    Missing images (and unsaved ``blob:`` previews) fall back to a
    placeholder seeded by product ID. Relative paths are served by the API.
    """
    if not image_url or image_url.startswith("blob:"):
        return f"https://picsum.photos/seed/{product_id}/{size}/{size}.jpg"
    if image_url.startswith("http"):
        return image_url
    return f"{server_url.rstrip('/')}{image_url}"


def normalize_whatsapp(number: str) -> str:
    """Strip everything but digits from a phone number."""
    return re.sub(r"\D", "", number or "")
