# storefront/tasks/compensation.py
from redis.exceptions import RedisError

from storefront.celery_worker import celery_app
from storefront.domain.errors import CatalogUnavailableError, ProductNotFoundError
from storefront.services.cart_store import RedisCartStore
from storefront.services.product_client import ProductClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(
    name="storefront.tasks.compensation.restore_stock_task",
    autoretry_for=(CatalogUnavailableError,),
    retry_backoff=True,
    retry_backoff_max=600,
    max_retries=10,
)
def restore_stock_task(product_id: int, quantity: int):
    logger.info(f"Deferred stock restore: {quantity} of product {product_id}")
    try:
        ProductClient().increment_stock(product_id, quantity)
    except ProductNotFoundError:
        logger.warning(f"Product {product_id} no longer exists, giving up restoring {quantity} units")
        return {"product_id": product_id, "quantity": quantity, "status": "skipped"}

    return {"product_id": product_id, "quantity": quantity, "status": "restored"}


@celery_app.task(
    name="storefront.tasks.compensation.discard_cart_entries_task",
    autoretry_for=(RedisError,),
    retry_backoff=True,
    max_retries=5,
)
def discard_cart_entries_task(user_id: int, entries: dict):
    """Late cart cleanup after a checkout whose cart clear failed."""
    snapshot = {int(pid): int(qty) for pid, qty in entries.items()}
    removed = RedisCartStore().discard_entries(user_id, snapshot)
    logger.info(f"Deferred cart cleanup for user {user_id}: removed {removed} entries")
    return {"user_id": user_id, "removed": removed}
