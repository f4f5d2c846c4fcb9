from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from storefront.data.models.cart import CartModel, CART_OPEN
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import (
    AuthorizationError,
    InternalError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from storefront.domain.schemas import MAX_LINE_QUANTITY
from storefront.repos.cart_repo import CartRepo
from storefront.services.catalog_reader import CatalogReader
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def cart_to_dict(cart: CartModel, items: list[CartItemModel]) -> Dict[str, Any]:
    return {
        "id": cart.id,
        "account_id": cart.account_id,
        "status": cart.status,
        "items": [
            {
                "product_id": i.product_id,
                "quantity": i.quantity,
                "unit_price_snapshot": i.unit_price_snapshot,
            }
            for i in items
        ],
    }


class CartService:
    """
    CartStore - koszyk i jego linie
    commands (create, update, remove) modyfikuja stan
    query (get, detail) tylko odczyt

    account_id w komendach jest opcjonalny: jesli podany, wlasnosc koszyka
    sprawdzana jest ponownie na tym samym zablokowanym wierszu co modyfikacja
    """

    def __init__(self, db: Session, catalog: CatalogReader | None = None):
        self.repo = CartRepo(db)
        self.catalog = catalog or CatalogReader(db)

    #query - odczyt
    def get_cart(self, account_id: int) -> Dict[str, Any]:
        cart = self.repo.get_open_cart_by_account(account_id)
        if not cart:
            raise NotFoundError("No open cart for this account")
        return cart_to_dict(cart, self.repo.get_cart_items(cart.id))

    def get_cart_by_id(self, cart_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart(cart_id)
        if not cart:
            raise NotFoundError(f"Cart {cart_id} not found")
        return cart_to_dict(cart, self.repo.get_cart_items(cart.id))

    def get_cart_detail(self, cart_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart(cart_id)
        if not cart:
            raise NotFoundError(f"Cart {cart_id} not found")

        #cena do wyswietlenia - zawsze aktualna z katalogu, nie snapshot
        lines = []
        total = Decimal("0.00")
        for item in self.repo.get_cart_items(cart_id):
            product = item.product
            line_total = product.unit_price * item.quantity
            total += line_total
            lines.append(
                {
                    "product_id": item.product_id,
                    "name": product.name,
                    "quantity": item.quantity,
                    "unit_price": product.unit_price,
                    "line_total": line_total,
                }
            )

        return {
            "id": cart.id,
            "account_id": cart.account_id,
            "status": cart.status,
            "items": lines,
            "total": total,
        }

    #commands
    def create_cart(self, account_id: int) -> Dict[str, Any]:
        #jeden otwarty koszyk na konto - jesli jest, zwracamy go
        existing = self.repo.get_open_cart_by_account(account_id)
        if existing:
            logger.info(f"Account {account_id} already has open cart {existing.id}")
            return cart_to_dict(existing, self.repo.get_cart_items(existing.id))

        try:
            created = self.repo.create_cart(
                CartModel(account_id=account_id, status=CART_OPEN, version=1)
            )
        except IntegrityError:
            #rownolegle create - indeks unikalny przepuscil tylko jeden
            self.repo.rollback()
            existing = self.repo.get_open_cart_by_account(account_id)
            if not existing:
                raise
            return cart_to_dict(existing, self.repo.get_cart_items(existing.id))

        logger.info(f"Created cart {created.id} for account {account_id}")
        return cart_to_dict(created, [])

    def update_cart(
        self,
        cart_id: int,
        product_id: int,
        quantity: int,
        account_id: int | None = None,
    ) -> Dict[str, Any]:
        try:
            cart = self._lock_open_cart(cart_id, account_id)

            # ProductNotFoundError jesli nie ma w katalogu
            self.catalog.get_product_by_id(product_id)

            existing_item = self.repo.get_cart_item(cart_id, product_id)

            if quantity <= 0:
                logger.info(f"Removing product {product_id} from cart {cart_id} (quantity {quantity})")
                self.repo.delete_cart_item(cart_id, product_id)
            elif existing_item:
                self._check_line_quantity(existing_item.quantity + quantity)
                logger.info(
                    f"Product {product_id} already in cart {cart_id}, quantity "
                    f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
                )
                existing_item.quantity += quantity
                self.repo.add_cart_item(existing_item)
            else:
                self._check_line_quantity(quantity)
                logger.info(f"Adding product {product_id} x{quantity} to cart {cart_id}")
                self.repo.add_cart_item(
                    CartItemModel(cart_id=cart_id, product_id=product_id, quantity=quantity)
                )

            self._bump_version(cart)
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.exception(f"Cart {cart_id} update failed")
            raise InternalError() from e
        except Exception:
            self.repo.rollback()
            raise

        return self.get_cart_by_id(cart_id)

    def remove_item(
        self,
        cart_id: int,
        product_id: int,
        account_id: int | None = None,
    ) -> Dict[str, Any]:
        try:
            cart = self._lock_open_cart(cart_id, account_id)

            #brak linii = no-op, nadal sukces
            removed = self.repo.delete_cart_item(cart_id, product_id)
            if removed:
                self._bump_version(cart)
                logger.info(f"Removed product {product_id} from cart {cart_id}")
            else:
                logger.info(f"Product {product_id} not in cart {cart_id}, nothing to remove")
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.exception(f"Cart {cart_id} remove failed")
            raise InternalError() from e
        except Exception:
            self.repo.rollback()
            raise

        return self.get_cart_by_id(cart_id)

    def _lock_open_cart(self, cart_id: int, account_id: int | None) -> CartModel:
        cart = self.repo.get_cart_for_update(cart_id)

        if not cart:
            raise NotFoundError(f"Cart {cart_id} not found")

        if account_id is not None and cart.account_id != account_id:
            raise AuthorizationError("You do not own this cart")

        if cart.status != CART_OPEN:
            logger.warning(f"Cart {cart_id} is {cart.status}, rejecting modification")
            raise InvalidStateError("Cart can no longer be modified")

        return cart

    def _check_line_quantity(self, quantity: int) -> None:
        #duze int z API nie moze dojsc do kolumny Integer
        if quantity > MAX_LINE_QUANTITY:
            raise ValidationError(
                errors=[{"field": "quantity", "message": f"Line quantity cannot exceed {MAX_LINE_QUANTITY}"}]
            )

    def _bump_version(self, cart: CartModel) -> None:
        # Optimistic locking warunek na wersje
        # np w bazie update set version 2 where id 1 and version 1
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={"version": cart.version + 1},
        )
        if rowcount == 0:
            raise InvalidStateError("Cart was modified by another operation")
