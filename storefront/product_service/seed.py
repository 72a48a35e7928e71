# storefront/product_service/seed.py
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.product_service.models import ProductModel

PRODUCTS = [
    {"id": 1, "name": "Keyboard", "price": Decimal("199.99"), "stock": 25},
    {"id": 2, "name": "Mouse", "price": Decimal("49.50"), "stock": 100},
    {"id": 3, "name": "Monitor", "price": Decimal("899.00"), "stock": 5},
]


def seed(db: Session):
    # not forcing: only seed if empty
    if db.query(ProductModel).first():
        return
    for data in PRODUCTS:
        db.add(ProductModel(**data))
    db.commit()
