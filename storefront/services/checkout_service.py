# storefront/services/checkout_service.py
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.catalog import CatalogGateway, ProductSnapshot
from storefront.domain.errors import (
    EmptyCartError,
    InsufficientStockError,
    InvalidShippingAddressError,
    OrderPersistenceFailedError,
    ProductNotFoundError,
)
from storefront.domain.money import order_total, to_money
from storefront.domain.order_status import OrderStatus
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_store import RedisCartStore
from storefront.services.compensation import CompensationScheduler, StockCompensator
from storefront.services.notification_service import NotificationService
from storefront.utils.settings import SHIPPING_ADDRESS_MAX_LENGTH
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """
    Cart -> order.

    1. read the cart
    2. batch read products (price + stock)
    3. decrement stock line by line, all or nothing
    4. persist order + items in one transaction
    5. clear the cart (failure here does not undo the order)

    Stock is only ever changed through the catalog's atomic primitives,
    the service holds no lock and no state between calls.
    """

    def __init__(
        self,
        cart_store: RedisCartStore,
        catalog: CatalogGateway,
        order_repo: OrderRepo,
        notification_service: NotificationService | None = None,
        scheduler: CompensationScheduler | None = None,
    ):
        self.cart_store = cart_store
        self.catalog = catalog
        self.repo = order_repo
        self.notification_service = notification_service or NotificationService()
        self.scheduler = scheduler or CompensationScheduler()
        self.compensator = StockCompensator(catalog, self.scheduler)

    def place_order(self, user_id: int, shipping_address: str) -> OrderModel:
        address = self._validate_address(shipping_address)

        # 1. cart snapshot, everything below works on this copy
        cart = self.cart_store.get_all(user_id)
        if not cart:
            raise EmptyCartError(user_id)

        logger.info(f"Checkout for user {user_id}: {len(cart)} lines")

        # 2. products, nothing is mutated yet
        products = self.catalog.get_many(cart.keys())
        for product_id in sorted(cart):
            if product_id not in products:
                logger.info(f"Checkout for user {user_id} rejected: product {product_id} missing")
                raise ProductNotFoundError(product_id)

        # 3. stock
        self._reserve_stock(cart, products)

        # 4. order snapshot
        order = self._build_order(user_id, address, cart, products)
        # create_order only raises when nothing was committed
        try:
            created = self.repo.create_order(order)
        except Exception as e:
            logger.error(f"Persisting order for user {user_id} failed: {e}")
            self._rollback(cart.items())
            raise OrderPersistenceFailedError() from e

        logger.info(f"Order {created.id} created for user {user_id}, total {created.total_amount}")

        # 5. cart cleanup, order already stands
        self._clear_cart(user_id, cart)

        self.notification_service.send_order_placed(user_id, created.id)
        return created

    def _reserve_stock(self, cart: dict[int, int], products: dict[int, ProductSnapshot]):
        applied: list[tuple[int, int]] = []

        # fixed order, contention on the same products is resolved the same way
        for product_id in sorted(cart):
            quantity = cart[product_id]
            try:
                ok = self.catalog.try_decrement_stock(product_id, quantity)
            except Exception as e:
                logger.error(f"Stock decrement for product {product_id} failed: {e}")
                self._rollback(applied)
                raise

            if not ok:
                self._rollback(applied)
                raise InsufficientStockError(product_id, products[product_id].name)

            applied.append((product_id, quantity))

    def _rollback(self, applied):
        applied = list(applied)
        if not applied:
            return
        logger.warning(f"Rolling back stock decrements: {applied}")
        self.compensator.restore(applied)

    @staticmethod
    def _build_order(
        user_id: int,
        address: str,
        cart: dict[int, int],
        products: dict[int, ProductSnapshot],
    ) -> OrderModel:
        items = [
            OrderItemModel(
                product_id=product_id,
                product_name=products[product_id].name,
                quantity=quantity,
                price=to_money(products[product_id].price),
            )
            for product_id, quantity in sorted(cart.items())
        ]

        return OrderModel(
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            shipping_address=address,
            total_amount=order_total((item.price, item.quantity) for item in items),
            version=1,
            items=items,
        )

    def _clear_cart(self, user_id: int, cart: dict[int, int]):
        try:
            self.cart_store.clear(user_id)
        except Exception as e:
            logger.warning(f"Cart of user {user_id} not cleared after checkout: {e}")
            try:
                self.scheduler.schedule_cart_cleanup(user_id, cart)
            except Exception as schedule_error:
                logger.error(f"Could not schedule cart cleanup for user {user_id}: {schedule_error}")

    @staticmethod
    def _validate_address(shipping_address: str) -> str:
        address = (shipping_address or "").strip()
        if not address:
            raise InvalidShippingAddressError("Shipping address is required")
        if len(address) > SHIPPING_ADDRESS_MAX_LENGTH:
            raise InvalidShippingAddressError(
                f"Shipping address is longer than {SHIPPING_ADDRESS_MAX_LENGTH} characters"
            )
        return address
