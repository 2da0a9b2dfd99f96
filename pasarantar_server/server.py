"""MCP Server for the PasarAntar storefront."""

import asyncio
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.types import Resource, Tool, TextContent
from pydantic import AnyUrl, ValidationError

from .auth import AuthManager
from .cart import CartStore
from .checkout import CheckoutForm
from .config import Settings
from .formatters import format_price, format_price_range, format_weight_with_unit, product_image_url
from .orders import OrderSubmissionService
from .pasarantar_client import PasarAntarAPIError, PasarAntarClient
from .storage import CartStorage, LocalStorage
from .toast import ToastNotifier

logger = logging.getLogger("pasarantar-mcp-server")

# Initialize server
app = Server("pasarantar-mcp-server")


class Storefront:
    """Wires the cart, toast, API client and checkout together."""

    def __init__(
        self,
        client: PasarAntarClient,
        storage: LocalStorage,
        notifier: Optional[ToastNotifier] = None,
        image_server_url: Optional[str] = None,
        auth_manager: Optional[AuthManager] = None,
    ) -> None:
        self.client = client
        self.storage = storage
        self.auth_manager = auth_manager or AuthManager(storage)
        self.image_server_url = image_server_url
        self.notifier = notifier or ToastNotifier()
        self.cart_store = CartStore(
            storage=CartStorage(storage),
            notifier=self.notifier,
        )
        self.order_service = OrderSubmissionService(self.cart_store, client, self.auth_manager)
        self.checkout = CheckoutForm(self.cart_store, self.order_service, storage, self.auth_manager)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Storefront":
        storage = LocalStorage(settings.storage_file)
        auth_manager = AuthManager(storage)
        client = PasarAntarClient(settings.api_url, auth_manager=auth_manager)
        return cls(
            client,
            storage,
            notifier=ToastNotifier(duration=settings.toast_seconds),
            image_server_url=settings.server_url,
            auth_manager=auth_manager,
        )

    async def close(self) -> None:
        self.notifier.hide()
        await self.client.aclose()


# Global state
storefront: Storefront


def render_cart(store: CartStore) -> str:
    cart = store.cart
    if cart.is_empty:
        return "Your cart is empty"

    lines = [f"Shopping Cart ({cart.item_count} items):\n"]
    for item in cart.items:
        lines.append(
            f"  - {item.product.name} {format_weight_with_unit(item.variant)} "
            f"x{item.quantity} @ {format_price(item.variant.price)} = {format_price(item.subtotal)}"
        )
        lines.append(f"    product_id: {item.product.id}, variant_id: {item.variant.id}")
        if item.note:
            lines.append(f"    Note: {item.note}")
    lines.append(f"\nTotal: {format_price(cart.total)}")
    return "\n".join(lines)


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=AnyUrl("pasarantar://cart"),
            name="Shopping Cart",
            mimeType="application/json",
            description="Current shopping cart contents",
        )
    ]


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    if str(uri) == "pasarantar://cart":
        return storefront.cart_store.cart.model_dump_json(indent=2)

    raise ValueError(f"Unknown resource: {uri}")


def _product_variant_args(required: bool = True) -> dict[str, Any]:
    return {
        "product_id": {"type": "string", "description": "Product ID"},
        "variant_id": {
            "type": "string",
            "description": "Variant ID" if required else "Variant ID (default: first in-stock variant)",
        },
    }


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="pasarantar_search_products",
            description="Search PasarAntar products (chicken, fish, beef, marinated)",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search term (e.g., 'ayam', 'ikan'); empty lists all products",
                    },
                },
            },
        ),
        Tool(
            name="pasarantar_get_product",
            description="Get product details and variants by ID or slug",
            inputSchema={
                "type": "object",
                "properties": {
                    "product_id": {"type": "string", "description": "Product ID"},
                    "slug": {"type": "string", "description": "Product slug"},
                },
            },
        ),
        Tool(
            name="pasarantar_list_categories",
            description="List product categories",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="pasarantar_get_reviews",
            description="Get customer reviews for a product",
            inputSchema={
                "type": "object",
                "properties": {"product_id": {"type": "string", "description": "Product ID"}},
                "required": ["product_id"],
            },
        ),
        Tool(
            name="pasarantar_add_to_cart",
            description="Add a product variant to the cart",
            inputSchema={
                "type": "object",
                "properties": {
                    **_product_variant_args(required=False),
                    "quantity": {
                        "type": "integer",
                        "description": "Quantity to add (default: 1, max 99 per item)",
                        "default": 1,
                    },
                },
                "required": ["product_id"],
            },
        ),
        Tool(
            name="pasarantar_get_cart",
            description="Get current shopping cart contents",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="pasarantar_update_quantity",
            description="Set the quantity of a cart item (clamped to 1-99)",
            inputSchema={
                "type": "object",
                "properties": {
                    **_product_variant_args(),
                    "quantity": {"type": "integer", "description": "New quantity"},
                },
                "required": ["product_id", "variant_id", "quantity"],
            },
        ),
        Tool(
            name="pasarantar_update_note",
            description="Attach a note to a cart item (e.g. 'potong 8')",
            inputSchema={
                "type": "object",
                "properties": {
                    **_product_variant_args(),
                    "note": {"type": "string", "description": "Free-text note"},
                },
                "required": ["product_id", "variant_id", "note"],
            },
        ),
        Tool(
            name="pasarantar_remove_from_cart",
            description="Remove an item from the cart",
            inputSchema={
                "type": "object",
                "properties": _product_variant_args(),
                "required": ["product_id", "variant_id"],
            },
        ),
        Tool(
            name="pasarantar_clear_cart",
            description="Remove all items from the cart",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="pasarantar_checkout",
            description="Place an order for the current cart",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Customer full name"},
                    "whatsapp": {"type": "string", "description": "WhatsApp number, e.g. 08123456789"},
                    "address": {"type": "string", "description": "Full delivery address"},
                    "latitude": {"type": "number"},
                    "longitude": {"type": "number"},
                    "shipping_method": {"type": "string", "enum": ["express", "pickup"]},
                    "delivery_day": {"type": "string", "enum": ["selasa", "kamis", "sabtu"]},
                    "payment_method": {"type": "string", "enum": ["transfer", "cod"]},
                    "notes": {"type": "string", "description": "Order notes"},
                },
            },
        ),
        Tool(
            name="pasarantar_get_toast",
            description="Get the current 'added to cart' notification",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


CHECKOUT_FIELDS = ("name", "whatsapp", "address", "shipping_method", "delivery_day", "payment_method", "notes")


async def handle_tool(front: Storefront, name: str, arguments: dict[str, Any]) -> str:
    """Run a tool against a storefront and return its text result."""
    store = front.cart_store

    if name == "pasarantar_search_products":
        query = arguments.get("query")
        products = await front.client.get_products(search=query)
        if not products:
            return f"No products found for: {query}"

        result_lines = [f"Found {len(products)} product(s):\n"]
        for i, product in enumerate(products, 1):
            result_lines.append(f"\n{i}. {product.name}")
            result_lines.append(f"   ID: {product.id}")
            result_lines.append(f"   Price: {format_price_range(product.variants)}")
            if product.is_on_sale and product.discount_percentage:
                result_lines.append(f"   Discount: {product.discount_percentage:g}%")
        return "\n".join(result_lines)

    elif name == "pasarantar_get_product":
        if arguments.get("slug"):
            product = await front.client.get_product_by_slug(arguments["slug"])
        elif arguments.get("product_id"):
            product = await front.client.get_product(arguments["product_id"])
        else:
            return "Error: product_id or slug required"
        if product is None:
            return "Product not found"

        image_kwargs = {"server_url": front.image_server_url} if front.image_server_url else {}
        result_lines = [
            product.name,
            product.description,
            f"Rating: {product.rating} ({product.review_count} reviews)",
            f"Image: {product_image_url(product.image_url, product.id, **image_kwargs)}",
            "\nVariants:",
        ]
        for variant in product.variants:
            stock = "" if variant.in_stock else " (out of stock)"
            line = f"  - {variant.id}: {format_weight_with_unit(variant)} {format_price(variant.price)}{stock}"
            if variant.original_price:
                line += f" (was {format_price(variant.original_price)})"
            result_lines.append(line)
        return "\n".join(result_lines)

    elif name == "pasarantar_list_categories":
        categories = await front.client.get_categories()
        if not categories:
            return "No categories found"
        return "\n".join(f"- {category.name} ({category.id})" for category in categories)

    elif name == "pasarantar_get_reviews":
        reviews = await front.client.get_product_reviews(arguments["product_id"])
        if not reviews:
            return "No reviews yet"
        return "\n".join(f"- {review.customer_name}: {review.rating}/5 {review.comment}" for review in reviews)

    elif name == "pasarantar_add_to_cart":
        product = await front.client.get_product(arguments["product_id"])
        if product is None:
            return f"Error: product {arguments['product_id']} not found"

        variant_id = arguments.get("variant_id")
        if variant_id:
            variant = product.get_variant(variant_id)
        else:
            variant = next((v for v in product.variants if v.in_stock), None)
        if variant is None:
            return f"Error: no matching variant for {product.name}"
        if not variant.in_stock:
            return f"❌ {product.name} {format_weight_with_unit(variant)} is out of stock"

        store.add_item(product, variant, int(arguments.get("quantity", 1)))
        item = store.get_item(product.id, variant.id)
        return (
            f"✅ Added {product.name} {format_weight_with_unit(variant)} to cart "
            f"(quantity now {item.quantity if item else 0})\n"
            f"Cart total: {format_price(store.total)}"
        )

    elif name == "pasarantar_get_cart":
        return render_cart(store)

    elif name == "pasarantar_update_quantity":
        store.update_quantity(arguments["product_id"], arguments["variant_id"], arguments["quantity"])
        return render_cart(store)

    elif name == "pasarantar_update_note":
        store.update_note(arguments["product_id"], arguments["variant_id"], arguments["note"])
        return render_cart(store)

    elif name == "pasarantar_remove_from_cart":
        store.remove_item(arguments["product_id"], arguments["variant_id"])
        return render_cart(store)

    elif name == "pasarantar_clear_cart":
        store.clear()
        return "✅ Cart cleared"

    elif name == "pasarantar_checkout":
        fields = {key: arguments[key] for key in CHECKOUT_FIELDS if arguments.get(key) is not None}
        try:
            if fields:
                front.checkout.update(**fields)
        except ValidationError as e:
            return f"Error: invalid checkout data: {e}"
        if arguments.get("latitude") is not None and arguments.get("longitude") is not None:
            front.checkout.set_coordinates(arguments["latitude"], arguments["longitude"])

        result = await front.checkout.submit()
        if result.success:
            front.checkout.reset()
            return f"✅ {result.message}\nOrder number: {result.order_number}"

        lines = [f"❌ {result.message}"]
        for field, message in front.checkout.errors.items():
            lines.append(f"  - {field}: {message}")
        return "\n".join(lines)

    elif name == "pasarantar_get_toast":
        toast = front.notifier.state
        if not toast.show:
            return "No notification"
        return f"🛒 {toast.product_name} ({toast.variant_info}) added to cart"

    return f"Unknown tool: {name}"


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    try:
        text = await handle_tool(storefront, name, arguments or {})
        return [TextContent(type="text", text=text)]
    except PasarAntarAPIError as e:
        logger.error(f"API error in tool {name}: {e}")
        return [TextContent(type="text", text=f"Error: {e.message}")]
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return [
            TextContent(
                type="text",
                text=f"Error: {str(e)}",
            )
        ]


async def main() -> None:
    """Main entry point."""
    global storefront

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level.upper())
    logger.info(f"API URL: {settings.api_url}")
    logger.info(f"Storage file: {settings.storage_file}")

    storefront = Storefront.from_settings(settings)
    if storefront.auth_manager.is_authenticated():
        logger.info(f"Logged-in customer: {storefront.auth_manager.get_customer_id()}")

    logger.info("Starting PasarAntar MCP Server...")

    # Import and run the server
    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        await storefront.close()


if __name__ == "__main__":
    asyncio.run(main())
