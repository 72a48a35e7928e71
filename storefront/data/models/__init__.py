# import every model so SQLAlchemy registers it in Base.metadata

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel

__all__ = ["OrderModel", "OrderItemModel"]
