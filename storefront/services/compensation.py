"""
Giving stock back.

Used by the checkout rollback and by order cancellation. Every line is
restored on its own: one failing product never blocks its siblings.
A product deleted from the catalog is skipped, anything else is handed
to a deferred retry.
"""
from typing import Iterable

from storefront.domain.catalog import CatalogGateway
from storefront.domain.errors import ProductNotFoundError
from storefront.tasks.compensation import discard_cart_entries_task, restore_stock_task
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CompensationScheduler:
    """Pushes compensation work that could not be done inline to celery."""

    @staticmethod
    def schedule_stock_restore(product_id: int, quantity: int):
        restore_stock_task.delay(product_id, quantity)

    @staticmethod
    def schedule_cart_cleanup(user_id: int, entries: dict[int, int]):
        # json keys are strings anyway, send them as such
        discard_cart_entries_task.delay(user_id, {str(pid): qty for pid, qty in entries.items()})


class StockCompensator:
    def __init__(self, catalog: CatalogGateway, scheduler: CompensationScheduler | None = None):
        self.catalog = catalog
        self.scheduler = scheduler or CompensationScheduler()

    def restore(self, lines: Iterable[tuple[int, int]]) -> list[int]:
        """
        Increment stock back for every (product_id, quantity).
        Returns ids that could not be restored inline.
        """
        failed: list[int] = []

        for product_id, quantity in lines:
            try:
                self.catalog.increment_stock(product_id, quantity)
                logger.info(f"Restored {quantity} of product {product_id}")
            except ProductNotFoundError:
                logger.warning(f"Product {product_id} no longer exists, {quantity} units not restored")
                failed.append(product_id)
            except Exception as e:
                logger.error(f"Restoring {quantity} of product {product_id} failed: {e}")
                failed.append(product_id)
                self._defer(product_id, quantity)

        if failed:
            logger.warning(f"Stock restore incomplete for products {failed}")
        return failed

    def _defer(self, product_id: int, quantity: int):
        try:
            self.scheduler.schedule_stock_restore(product_id, quantity)
        except Exception as e:
            logger.error(f"Could not schedule stock restore for product {product_id} ({quantity}): {e}")
