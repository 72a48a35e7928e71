# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.api.deps import get_cart_service
from storefront.domain.errors import CatalogUnavailableError, InsufficientStockError, ProductNotFoundError
from storefront.domain.schemas import CartOut, ItemIn, QuantityIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("/", response_model=CartOut)
def get_cart(
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.get_cart(user_id)
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message)


@router.post("/", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.add_item(user_id, payload.product_id, payload.quantity)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message)


@router.put("/{product_id}", response_model=CartOut)
def update_item(
    product_id: int,
    payload: QuantityIn,
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.update_item(user_id, product_id, payload.quantity)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{product_id}", response_model=CartOut)
def remove_item(
    product_id: int,
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.remove_item(user_id, product_id)
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message)


@router.delete("/", response_model=CartOut)
def clear_cart(
    user_id: int = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    return svc.clear(user_id)
