# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime

from storefront.utils.settings import SHIPPING_ADDRESS_MAX_LENGTH


class ItemIn(BaseModel):
    """Add a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product id")
    quantity: int = Field(..., gt=0, description="Quantity (> 0)")


class QuantityIn(BaseModel):
    """Set the quantity of a cart line, 0 removes it."""

    # negative values are rejected by the cart service
    quantity: int = Field(..., description="New quantity (0 removes the line)")


class CartItemOut(BaseModel):
    product_id: int
    product_name: str
    price: Decimal
    quantity: int
    subtotal: Decimal


class CartOut(BaseModel):
    user_id: int
    items: List[CartItemOut]
    total: Decimal


class OrderCreate(BaseModel):
    """Checkout of the caller's current cart."""

    shipping_address: str = Field(..., min_length=1, max_length=SHIPPING_ADDRESS_MAX_LENGTH)


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    price: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: str
    total_amount: Decimal
    shipping_address: str
    created_at: datetime
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)
