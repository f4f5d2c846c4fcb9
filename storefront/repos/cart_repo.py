# storefront/repos/cart_repo.py
from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel, CART_OPEN
from storefront.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, cart_id: int) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_cart_for_update(self, cart_id: int) -> CartModel | None:
        #SELECT ... FOR UPDATE, blokada wiersza do konca transakcji
        return self.db.execute(
            select(CartModel).where(CartModel.id == cart_id).with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_open_cart_by_account(self, account_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(
                CartModel.account_id == account_id,
                CartModel.status == CART_OPEN,
            )
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def get_cart_items(self, cart_id: int) -> list[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
            ).scalars()
        )

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> None:
        self.db.add(item)
        self.db.flush()

    def delete_cart_item(self, cart_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        )
        return result.rowcount

    def update_cart_version(self, cart_id: int, old_version: int, new_data: dict) -> int:
        """
        Optimistic locking: UPDATE ... WHERE id = ? AND version = ? AND status = 'open'
        zwraca rowcount, 0 = ktos nas wyprzedzil albo koszyk juz zamkniety
        """
        result = self.db.execute(
            update(CartModel)
            .where(
                CartModel.id == cart_id,
                CartModel.version == old_version,
                CartModel.status == CART_OPEN,
            )
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
