# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_PLACED = "placed"
ORDER_CANCELLED = "cancelled"


class NotificationService:
    """
    Order notifications, sent asynchronously through celery.
    Best effort: a broker outage never fails the order operation itself.
    """

    def send_order_placed(self, user_id: int, order_id: int):
        self._send(user_id, order_id, ORDER_PLACED)

    def send_order_cancelled(self, user_id: int, order_id: int):
        self._send(user_id, order_id, ORDER_CANCELLED)

    @staticmethod
    def _send(user_id: int, order_id: int, event: str):
        try:
            send_order_notification_task.delay(user_id, order_id, event)
        except Exception as e:
            logger.warning(f"Notification '{event}' for order {order_id} not queued: {e}")


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, event: str):
    """
    In a real deployment this would hand over to an email/SMS/push provider.
    For now it only logs.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} {event}")

    return {"user_id": user_id, "order_id": order_id, "event": event, "status": "sent"}
