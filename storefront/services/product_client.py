# storefront/services/product_client.py
from decimal import Decimal
from typing import Iterable

import requests
from requests import RequestException

from storefront.domain.catalog import ProductSnapshot
from storefront.domain.errors import CatalogUnavailableError, ProductNotFoundError
from storefront.utils.retry import http_retry, http_mutation_retry
from storefront.utils.settings import PRODUCT_SERVICE_URL, PRODUCT_SERVICE_TIMEOUT
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _snapshot(data: dict) -> ProductSnapshot:
    return ProductSnapshot(
        id=int(data["id"]),
        name=data.get("name", ""),
        price=Decimal(str(data["price"])),
        stock=int(data["stock"]),
    )


class ProductClient:
    """
    HTTP catalog gateway for product-service.
    Stock changes are done by product-service in a single conditional
    UPDATE, this client only asks for them.
    """

    def __init__(self, base_url: str | None = None, timeout: float = PRODUCT_SERVICE_TIMEOUT, session: requests.Session | None = None):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    # queries

    def get_product(self, product_id: int) -> ProductSnapshot:
        resp = self._call(self._get, f"/products/{product_id}")
        if resp.status_code == 404:
            raise ProductNotFoundError(product_id)
        resp.raise_for_status()
        return _snapshot(resp.json())

    def get_many(self, product_ids: Iterable[int]) -> dict[int, ProductSnapshot]:
        ids = sorted({int(pid) for pid in product_ids})
        if not ids:
            return {}

        resp = self._call(self._get, "/products", params={"ids": ",".join(str(i) for i in ids)})
        resp.raise_for_status()
        products = [_snapshot(item) for item in resp.json()]
        return {p.id: p for p in products if p.id in ids}

    # commands

    def try_decrement_stock(self, product_id: int, amount: int) -> bool:
        resp = self._call(self._post, f"/products/{product_id}/stock/decrement", json={"amount": amount})
        if resp.status_code == 404:
            raise ProductNotFoundError(product_id)
        if resp.status_code == 409:
            logger.info(f"Insufficient stock for product {product_id} (requested {amount})")
            return False
        resp.raise_for_status()
        return True

    def increment_stock(self, product_id: int, amount: int) -> None:
        resp = self._call(self._post, f"/products/{product_id}/stock/increment", json={"amount": amount})
        if resp.status_code == 404:
            raise ProductNotFoundError(product_id)
        resp.raise_for_status()

    # transport

    @http_retry()
    def _get(self, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"ProductClient GET {url}")
        return self.http.get(url, timeout=self.timeout, **kwargs)

    @http_mutation_retry()
    def _post(self, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"ProductClient POST {url}")
        return self.http.post(url, timeout=self.timeout, **kwargs)

    @staticmethod
    def _call(method, path: str, **kwargs) -> requests.Response:
        try:
            resp = method(path, **kwargs)
        except RequestException as e:
            logger.error(f"product-service unreachable ({path}): {e}")
            raise CatalogUnavailableError("Product service is unavailable") from e

        if resp.status_code >= 500:
            logger.error(f"product-service error {resp.status_code} ({path})")
            raise CatalogUnavailableError("Product service is unavailable")
        return resp
