from decimal import Decimal
from typing import Any, Dict

from storefront.domain.catalog import CatalogGateway
from storefront.domain.errors import InsufficientStockError, ProductNotFoundError
from storefront.domain.money import line_subtotal, order_total
from storefront.services.cart_store import RedisCartStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Cart use cases behind the HTTP routes.
    commands (add, set, remove, clear) change the redis hash,
    query (get) joins it with current catalog data for display.

    Stock is only pre-checked here for a better UX, the real check
    happens at checkout.
    """

    def __init__(self, cart_store: RedisCartStore, catalog: CatalogGateway):
        self.cart_store = cart_store
        self.catalog = catalog

    # query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        entries = self.cart_store.get_all(user_id)
        products = self.catalog.get_many(entries.keys()) if entries else {}

        items = []
        for product_id, quantity in sorted(entries.items()):
            product = products.get(product_id)
            if not product:
                # deleted from the catalog, checkout will reject it
                logger.info(f"Cart of user {user_id} references missing product {product_id}")
                continue
            items.append(
                {
                    "product_id": product.id,
                    "product_name": product.name,
                    "price": product.price,
                    "quantity": quantity,
                    "subtotal": line_subtotal(product.price, quantity),
                }
            )

        return {
            "user_id": user_id,
            "items": items,
            "total": order_total((i["price"], i["quantity"]) for i in items) if items else Decimal("0.00"),
        }

    # commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        self._check_stock(product_id, quantity)
        self.cart_store.set_quantity(user_id, product_id, quantity)
        return self.get_cart(user_id)

    def update_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 0:
            raise ValueError("Quantity cannot be negative")

        if quantity == 0:
            self.cart_store.remove(user_id, product_id)
        else:
            self._check_stock(product_id, quantity)
            self.cart_store.set_quantity(user_id, product_id, quantity)
        return self.get_cart(user_id)

    def remove_item(self, user_id: int, product_id: int) -> Dict[str, Any]:
        self.cart_store.remove(user_id, product_id)
        return self.get_cart(user_id)

    def clear(self, user_id: int) -> Dict[str, Any]:
        self.cart_store.clear(user_id)
        return self.get_cart(user_id)

    def _check_stock(self, product_id: int, quantity: int):
        product = self.catalog.get_many([product_id]).get(product_id)
        if not product:
            raise ProductNotFoundError(product_id)
        if product.stock < quantity:
            raise InsufficientStockError(product_id, product.name)
