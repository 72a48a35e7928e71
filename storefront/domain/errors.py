"""
Business-level exceptions of the fulfillment core.
Raised by services, converted to HTTP responses in the routers.
"""


class StorefrontError(Exception):
    """Base exception for all business logic errors."""
    def __init__(self, message: str = "Storefront error"):
        self.message = message
        super().__init__(self.message)


class EmptyCartError(StorefrontError):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("Cart is empty")


class ProductNotFoundError(StorefrontError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} does not exist")


class InsufficientStockError(StorefrontError):
    def __init__(self, product_id: int, product_name: str = ""):
        self.product_id = product_id
        name = product_name or f"product {product_id}"
        super().__init__(f"Insufficient stock for {name}")


class InvalidShippingAddressError(StorefrontError):
    pass


class CatalogUnavailableError(StorefrontError):
    """Raised when the catalog service cannot be reached after retries."""
    pass


class OrderPersistenceFailedError(StorefrontError):
    def __init__(self):
        super().__init__("Order could not be saved")


class OrderNotFoundError(StorefrontError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class NotOwnerError(OrderNotFoundError):
    """Same message as OrderNotFoundError, a foreign order reads as a missing one."""
    pass


class InvalidTransitionError(StorefrontError):
    def __init__(self, current, event):
        self.current = current
        self.event = event
        super().__init__(f"Cannot {event.value.lower()} an order in status {current.value}")


class ConcurrentModificationError(StorefrontError):
    """A status change kept losing the version race."""
    def __init__(self, order_id: int, event: str):
        self.order_id = order_id
        self.event = event
        super().__init__(f"Order {order_id} is being changed concurrently, {event.lower()} aborted")
