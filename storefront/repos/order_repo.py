# storefront/repos/order_repo.py
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        """
        Order and its items go in with one commit, or not at all.
        Raises only when the commit did not happen.
        """
        try:
            self.db.add(order)
            self.db.flush()
            order_id = order.id
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        # committed, a failed reload must not make the caller undo the order
        try:
            self.db.refresh(order)
        except SQLAlchemyError as e:
            logger.warning(f"Order {order_id} saved but reload failed: {e}")
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def list_orders_for_user(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.items))
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )

    def update_order_version(self, order_id: int, old_version: int, new_data: dict) -> int:
        # update ... set version = old + 1 where id = :id and version = :old
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.version == old_version)
            .values(**new_data)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def refresh(self, order: OrderModel) -> OrderModel:
        self.db.refresh(order)
        return order
