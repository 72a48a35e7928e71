# storefront/api/deps.py
from fastapi import Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_service import CartService
from storefront.services.cart_store import RedisCartStore
from storefront.services.checkout_service import CheckoutService
from storefront.services.compensation import CompensationScheduler
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.product_client import ProductClient


def get_cart_store() -> RedisCartStore:
    return RedisCartStore()


def get_catalog() -> ProductClient:
    return ProductClient()


def get_notification_service() -> NotificationService:
    return NotificationService()


def get_scheduler() -> CompensationScheduler:
    return CompensationScheduler()


def get_cart_service(
    cart_store: RedisCartStore = Depends(get_cart_store),
    catalog: ProductClient = Depends(get_catalog),
) -> CartService:
    return CartService(cart_store=cart_store, catalog=catalog)


def get_checkout_service(
    db: Session = Depends(get_db),
    cart_store: RedisCartStore = Depends(get_cart_store),
    catalog: ProductClient = Depends(get_catalog),
    notification_service: NotificationService = Depends(get_notification_service),
    scheduler: CompensationScheduler = Depends(get_scheduler),
) -> CheckoutService:
    return CheckoutService(
        cart_store=cart_store,
        catalog=catalog,
        order_repo=OrderRepo(db),
        notification_service=notification_service,
        scheduler=scheduler,
    )


def get_order_service(
    db: Session = Depends(get_db),
    catalog: ProductClient = Depends(get_catalog),
    notification_service: NotificationService = Depends(get_notification_service),
    scheduler: CompensationScheduler = Depends(get_scheduler),
) -> OrderService:
    return OrderService(
        order_repo=OrderRepo(db),
        catalog=catalog,
        notification_service=notification_service,
        scheduler=scheduler,
    )
