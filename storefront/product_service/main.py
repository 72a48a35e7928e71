# storefront/product_service/main.py
"""
Product service (dev catalog).

Owns the products table. Stock changes are single UPDATE statements so
concurrent checkouts serialize on the row:

    UPDATE products SET stock = stock - :n WHERE id = :id AND stock >= :n
"""
from contextlib import asynccontextmanager
from decimal import Decimal

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.product_service.database import Base, engine, get_db, SessionLocal
from storefront.product_service.models import ProductModel
from storefront.product_service.seed import seed
from storefront.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    price: Decimal
    stock: int
    image_url: str

    model_config = ConfigDict(from_attributes=True)


class StockChangeIn(BaseModel):
    amount: int = Field(..., gt=0)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()
    yield


app = FastAPI(title="Product Service (dev)", lifespan=lifespan)


def _parse_ids(raw: str) -> list[int]:
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=422, detail="ids must be a comma separated list of integers")


def _get_or_404(db: Session, product_id: int) -> ProductModel:
    product = db.get(ProductModel, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@app.get("/products", response_model=list[ProductOut])
def get_products(ids: str = Query(...), db: Session = Depends(get_db)):
    wanted = _parse_ids(ids)
    if not wanted:
        return []
    return db.execute(
        select(ProductModel).where(ProductModel.id.in_(wanted)).order_by(ProductModel.id)
    ).scalars().all()


@app.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _get_or_404(db, product_id)


@app.post("/products/{product_id}/stock/decrement", response_model=ProductOut)
def decrement_stock(product_id: int, payload: StockChangeIn, db: Session = Depends(get_db)):
    result = db.execute(
        update(ProductModel)
        .where(ProductModel.id == product_id, ProductModel.stock >= payload.amount)
        .values(stock=ProductModel.stock - payload.amount)
        .execution_options(synchronize_session=False)
    )
    db.commit()

    if result.rowcount == 0:
        # either missing or not enough, tell which
        _get_or_404(db, product_id)
        logger.info(f"Product {product_id}: insufficient stock for {payload.amount}")
        raise HTTPException(status_code=409, detail="Insufficient stock")

    logger.info(f"Product {product_id}: stock -{payload.amount}")
    return _get_or_404(db, product_id)


@app.post("/products/{product_id}/stock/increment", response_model=ProductOut)
def increment_stock(product_id: int, payload: StockChangeIn, db: Session = Depends(get_db)):
    result = db.execute(
        update(ProductModel)
        .where(ProductModel.id == product_id)
        .values(stock=ProductModel.stock + payload.amount)
        .execution_options(synchronize_session=False)
    )
    db.commit()

    if result.rowcount == 0:
        raise HTTPException(status_code=404, detail="Product not found")

    logger.info(f"Product {product_id}: stock +{payload.amount}")
    return _get_or_404(db, product_id)
