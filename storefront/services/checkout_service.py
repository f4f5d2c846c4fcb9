# storefront/services/checkout_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CART_OPEN, CART_CHECKED_OUT
from storefront.data.models.order import (
    OrderModel,
    OrderItemModel,
    ORDER_PENDING,
    ORDER_CONFIRMED,
)
from storefront.domain.errors import (
    AuthorizationError,
    EmptyCartError,
    InternalError,
    InvalidStateError,
    NotFoundError,
    OutOfStockError,
    StorefrontError,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.catalog_reader import CatalogReader
from storefront.services.order_service import order_to_dict
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """
    CheckoutEngine - przejscie koszyk -> zamowienie w dwoch fazach.

    Faza 1 (checkout): jedna transakcja - blokada koszyka i produktow,
    sprawdzenie stanow, zamrozenie cen, status checked_out, zamowienie pending.
    Cokolwiek sie nie uda -> rollback, koszyk zostaje open i bez zamowienia.

    Faza 2 (confirm_order): pending -> confirmed.
    """

    def __init__(self, db: Session, catalog: CatalogReader | None = None):
        self.db = db
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.catalog = catalog or CatalogReader(db)

    def checkout(self, cart_id: int, account_id: int | None = None) -> Dict[str, Any]:
        try:
            order = self._checkout(cart_id, account_id)
            self.db.commit()
        except StorefrontError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            #unikalny orders.cart_id - drugi checkout tego samego koszyka
            self.db.rollback()
            logger.warning(f"Concurrent checkout of cart {cart_id} lost: {e.orig}")
            raise InvalidStateError("Cart has already been checked out") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Checkout of cart {cart_id} failed, rolled back")
            raise InternalError() from e

        self.db.refresh(order)
        logger.info(f"Order {order.id} created from cart {cart_id}, total {order.total}")
        return order_to_dict(order)

    def _checkout(self, cart_id: int, account_id: int | None) -> OrderModel:
        cart = self.carts.get_cart_for_update(cart_id)

        if not cart:
            raise NotFoundError(f"Cart {cart_id} not found")

        if account_id is not None and cart.account_id != account_id:
            raise AuthorizationError("You do not own this cart")

        if cart.status != CART_OPEN:
            logger.warning(f"Checkout rejected, cart {cart_id} is {cart.status}")
            raise InvalidStateError("Cart has already been checked out")

        items = self.carts.get_cart_items(cart_id)
        if not items:
            raise EmptyCartError()

        #aktualna cena i stan z katalogu, wiersze produktow zablokowane
        products = self.catalog.get_products_for_update([i.product_id for i in items])

        shortages = []
        for item in items:
            product = products.get(item.product_id)
            available = product.stock if product else 0
            if item.quantity > available:
                shortages.append(
                    {
                        "product_id": item.product_id,
                        "requested": item.quantity,
                        "available": available,
                    }
                )

        #all-or-nothing, zadnej czesciowej realizacji
        if shortages:
            logger.warning(f"Checkout of cart {cart_id} rejected, insufficient stock: {shortages}")
            raise OutOfStockError("Insufficient stock for one or more items", errors=shortages)

        # Optimistic locking: status flip tylko jesli nadal open i ta sama wersja
        rowcount = self.carts.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={"status": CART_CHECKED_OUT, "version": cart.version + 1},
        )
        if rowcount == 0:
            logger.warning(f"Cart {cart_id} changed during checkout")
            raise InvalidStateError("Cart has already been checked out")

        total = Decimal("0.00")
        order_items = []
        for item in items:
            product = products[item.product_id]
            item.unit_price_snapshot = product.unit_price
            product.stock -= item.quantity
            total += product.unit_price * item.quantity
            order_items.append(
                OrderItemModel(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=product.unit_price,
                )
            )

        return self.orders.add_order(
            OrderModel(
                cart_id=cart.id,
                account_id=cart.account_id,
                status=ORDER_PENDING,
                total=total,
                items=order_items,
            )
        )

    def confirm_order(self, cart_id: int, account_id: int | None = None) -> Dict[str, Any]:
        try:
            order = self.orders.get_order_by_cart_for_update(cart_id)

            if not order:
                raise InvalidStateError(f"No order exists for cart {cart_id}")

            if account_id is not None and order.account_id != account_id:
                raise AuthorizationError("You do not own this order")

            #ponowne potwierdzenie odrzucane, nie no-op
            if order.status != ORDER_PENDING:
                logger.warning(f"Confirm rejected, order {order.id} is {order.status}")
                raise InvalidStateError(f"Order {order.id} is not pending")

            order.status = ORDER_CONFIRMED
            order.confirmed_at = datetime.now(timezone.utc)
            self.db.commit()
        except StorefrontError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Confirming order for cart {cart_id} failed")
            raise InternalError() from e

        self.db.refresh(order)
        logger.info(f"Order {order.id} for cart {cart_id} confirmed")
        return order_to_dict(order)
