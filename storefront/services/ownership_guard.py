# storefront/services/ownership_guard.py
"""
Autoryzacja wlasnosci zasobu.

Guard = (tozsamosc, id zasobu) -> allow albo wyjatek.
  - AccountOwner: bezposrednio, identity.account_id == id konta
  - CartOwner / OrderOwner: posrednio, koszyk/zamowienie -> account_id -> porownanie

OwnershipGuard sklada sekwencje guardow, skladana per route przy rejestracji.
Decyzje nie sa cache'owane miedzy requestami.
"""
from abc import ABC, abstractmethod
from typing import Sequence

from sqlalchemy.orm import Session

from storefront.domain.errors import AuthenticationError, AuthorizationError, NotFoundError
from storefront.domain.schemas import SessionContext
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class Guard(ABC):
    resource = "resource"

    def evaluate(self, identity: SessionContext | None, resource_id: int, db: Session) -> None:
        if identity is None:
            raise AuthenticationError()

        owner_id = self.resolve_owner(resource_id, db)
        if owner_id != identity.account_id:
            logger.warning(
                f"Account {identity.account_id} denied access to {self.resource} {resource_id}"
            )
            raise AuthorizationError(f"You do not own this {self.resource}")

    @abstractmethod
    def resolve_owner(self, resource_id: int, db: Session) -> int:
        ...


class AccountOwner(Guard):
    resource = "account"

    def resolve_owner(self, resource_id: int, db: Session) -> int:
        return resource_id


class CartOwner(Guard):
    resource = "cart"

    def resolve_owner(self, resource_id: int, db: Session) -> int:
        cart = CartRepo(db).get_cart(resource_id)
        if not cart:
            raise NotFoundError(f"Cart {resource_id} not found")
        return cart.account_id


class OrderOwner(Guard):
    resource = "order"

    def resolve_owner(self, resource_id: int, db: Session) -> int:
        order = OrderRepo(db).get_order(resource_id)
        if not order:
            raise NotFoundError(f"Order {resource_id} not found")
        return order.account_id


class OwnershipGuard:
    def __init__(self, *guards: Guard):
        self.guards: Sequence[Guard] = guards

    def check(self, identity: SessionContext | None, resource_id: int, db: Session) -> SessionContext:
        if identity is None:
            raise AuthenticationError()
        for guard in self.guards:
            guard.evaluate(identity, resource_id, db)
        return identity
