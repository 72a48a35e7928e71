# storefront/api/routers/health.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from storefront.api.deps import get_cart_store
from storefront.data.database import get_db
from storefront.services.cart_store import RedisCartStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db), cart_store: RedisCartStore = Depends(get_cart_store)):
    checks = {}

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.error(f"Health check: database down: {e}")
        checks["database"] = "error"

    try:
        cart_store.ping()
        checks["redis"] = "ok"
    except Exception as e:
        logger.error(f"Health check: redis down: {e}")
        checks["redis"] = "error"

    healthy = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"status": "ok" if healthy else "degraded", "checks": checks},
    )
