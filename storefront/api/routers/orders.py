# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from storefront.api.deps import get_checkout_service, get_order_service
from storefront.domain.errors import (
    CatalogUnavailableError,
    ConcurrentModificationError,
    EmptyCartError,
    InsufficientStockError,
    InvalidShippingAddressError,
    InvalidTransitionError,
    OrderNotFoundError,
    OrderPersistenceFailedError,
    ProductNotFoundError,
)
from storefront.domain.schemas import OrderCreate, OrderOut
from storefront.services.checkout_service import CheckoutService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/", response_model=OrderOut, status_code=201)
def place_order(
    payload: OrderCreate,
    user_id: int = Query(...),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Checkout of the caller's cart. Stock is reserved all or nothing,
    the cart is cleared only once the order is saved.
    """
    try:
        return svc.place_order(user_id, payload.shipping_address)
    except (EmptyCartError, InvalidShippingAddressError, ProductNotFoundError) as e:
        raise HTTPException(status_code=400, detail=e.message)
    except InsufficientStockError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except OrderPersistenceFailedError as e:
        raise HTTPException(status_code=500, detail=e.message)


@router.get("/", response_model=List[OrderOut])
def list_orders(
    user_id: int = Query(...),
    svc: OrderService = Depends(get_order_service),
):
    return svc.list_orders(user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_order_service),
):
    try:
        return svc.get_order(order_id, user_id)
    except OrderNotFoundError as e:
        # NotOwnerError included, a foreign order looks like a missing one
        raise HTTPException(status_code=404, detail=e.message)


@router.put("/{order_id}/cancel", status_code=204)
def cancel_order(
    order_id: int,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_order_service),
):
    try:
        svc.cancel(order_id, user_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except (InvalidTransitionError, ConcurrentModificationError) as e:
        raise HTTPException(status_code=409, detail=e.message)
    return Response(status_code=204)
