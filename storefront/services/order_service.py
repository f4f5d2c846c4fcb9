# storefront/services/order_service.py
from typing import Dict, Any, List

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.errors import AuthorizationError, NotFoundError
from storefront.repos.order_repo import OrderRepo


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "cart_id": order.cart_id,
        "account_id": order.account_id,
        "status": order.status,
        "total": order.total,
        "created_at": order.created_at,
        "confirmed_at": order.confirmed_at,
        "items": [
            {
                "product_id": i.product_id,
                "quantity": i.quantity,
                "unit_price": i.unit_price,
            }
            for i in order.items
        ],
    }


class OrderService:
    """
    OrderStore - tylko odczyt.
    Zamowienia tworzy wylacznie CheckoutService.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def list_orders(self, account_id: int) -> List[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_orders_by_account(account_id)]

    def get_order(self, order_id: int, account_id: int | None = None) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError(f"Order {order_id} not found")

        if account_id is not None and order.account_id != account_id:
            raise AuthorizationError("You do not own this order")

        return order_to_dict(order)
