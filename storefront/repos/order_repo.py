# storefront/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        #bez commita - checkout commituje cala transakcje naraz
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_by_cart_for_update(self, cart_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.cart_id == cart_id).with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def list_orders_by_account(self, account_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.account_id == account_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

