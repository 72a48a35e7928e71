# storefront/services/order_service.py
from datetime import datetime, timezone

from storefront.data.models.order import OrderModel
from storefront.domain.catalog import CatalogGateway
from storefront.domain.errors import ConcurrentModificationError, NotOwnerError, OrderNotFoundError
from storefront.domain.order_status import OrderEvent, OrderStatus, transition
from storefront.repos.order_repo import OrderRepo
from storefront.services.compensation import CompensationScheduler, StockCompensator
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# a transition that loses the version race re-reads and re-validates
MAX_TRANSITION_ATTEMPTS = 3


class OrderService:
    """
    Orders after checkout: queries, cancellation with stock compensation,
    and the fulfillment side transitions (processing, shipped, delivered).
    """

    def __init__(
        self,
        order_repo: OrderRepo,
        catalog: CatalogGateway,
        notification_service: NotificationService | None = None,
        scheduler: CompensationScheduler | None = None,
    ):
        self.repo = order_repo
        self.catalog = catalog
        self.notification_service = notification_service or NotificationService()
        self.compensator = StockCompensator(catalog, scheduler or CompensationScheduler())

    # queries

    def get_order(self, order_id: int, user_id: int) -> OrderModel:
        return self._get_owned(order_id, user_id)

    def list_orders(self, user_id: int) -> list[OrderModel]:
        return self.repo.list_orders_for_user(user_id)

    # commands

    def cancel(self, order_id: int, by_user_id: int) -> OrderModel:
        """
        Pending/processing -> cancelled, then every line's quantity goes back
        to stock. The status change is committed first with a version check,
        so a second cancel (or a concurrent one) is rejected and stock is
        restored exactly once.
        """
        self._get_owned(order_id, by_user_id)

        order = self._apply(order_id, OrderEvent.CANCEL)
        logger.info(f"Order {order_id} cancelled by user {by_user_id}")

        failed = self.compensator.restore((item.product_id, item.quantity) for item in order.items)
        if failed:
            logger.warning(f"Order {order_id}: stock not restored inline for products {failed}")

        self.notification_service.send_order_cancelled(order.user_id, order.id)
        return order

    def mark_processing(self, order_id: int) -> OrderModel:
        return self._apply(order_id, OrderEvent.PROCESS)

    def mark_shipped(self, order_id: int) -> OrderModel:
        return self._apply(order_id, OrderEvent.SHIP, shipped_at=datetime.now(timezone.utc))

    def mark_delivered(self, order_id: int) -> OrderModel:
        return self._apply(order_id, OrderEvent.DELIVER, delivered_at=datetime.now(timezone.utc))

    def _get_owned(self, order_id: int, user_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFoundError(order_id)

        if order.user_id != user_id:
            raise NotOwnerError(order_id)

        return order

    def _apply(self, order_id: int, event: OrderEvent, **fields) -> OrderModel:
        for _ in range(MAX_TRANSITION_ATTEMPTS):
            order = self.repo.get_order(order_id)
            if not order:
                raise OrderNotFoundError(order_id)

            # raises InvalidTransitionError, nothing written yet
            old_status = OrderStatus(order.status)
            new_status = transition(old_status, event)

            # Optimistic locking
            rowcount = self.repo.update_order_version(
                order_id=order.id,
                old_version=order.version,
                new_data={
                    "status": new_status.value,
                    "version": order.version + 1,
                    **fields,
                },
            )

            if rowcount == 1:
                self.repo.commit()
                logger.info(f"Order {order_id}: {old_status.value} -> {new_status.value}")
                return self.repo.refresh(order)

            self.repo.rollback()
            logger.info(f"Order {order_id} changed concurrently, retrying {event.value}")

        logger.warning(f"Order {order_id}: {event.value} gave up after {MAX_TRANSITION_ATTEMPTS} attempts")
        raise ConcurrentModificationError(order_id, event.value)
