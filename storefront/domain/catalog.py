# storefront/domain/catalog.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Protocol


@dataclass(frozen=True)
class ProductSnapshot:
    """What the checkout needs from a catalog product at one point in time."""

    id: int
    name: str
    price: Decimal
    stock: int


class CatalogGateway(Protocol):
    """
    Catalog as seen by the fulfillment core.
    Stock changes are single atomic operations on the catalog side,
    callers never compute new stock themselves.
    """

    def get_many(self, product_ids: Iterable[int]) -> dict[int, ProductSnapshot]:
        ...

    def try_decrement_stock(self, product_id: int, amount: int) -> bool:
        ...

    def increment_stock(self, product_id: int, amount: int) -> None:
        ...
