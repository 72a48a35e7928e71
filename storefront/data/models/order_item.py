from sqlalchemy import Column, Integer, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    # reference only, the catalog product may be edited or deleted later
    product_id = Column(Integer, nullable=False)
    product_name = Column(String(100), nullable=False, default="")

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(18, 2), nullable=False)  # unit price at order time

    order = relationship("OrderModel", back_populates="items")
