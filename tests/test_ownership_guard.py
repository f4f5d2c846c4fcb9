from datetime import datetime, timezone

import pytest

from storefront.domain.errors import AuthenticationError, AuthorizationError, NotFoundError
from storefront.domain.schemas import SessionContext
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from storefront.services.ownership_guard import AccountOwner, CartOwner, OrderOwner, OwnershipGuard


def context_for(account) -> SessionContext:
    return SessionContext(
        token="t",
        account_id=account.id,
        username=account.username,
        expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def alice(make_account):
    return make_account("alice")


@pytest.fixture
def bob(make_account):
    return make_account("bob")


def test_direct_account_match(db, alice, bob):
    guard = OwnershipGuard(AccountOwner())

    assert guard.check(context_for(alice), alice.id, db).account_id == alice.id
    with pytest.raises(AuthorizationError):
        guard.check(context_for(alice), bob.id, db)


def test_missing_identity(db, alice):
    with pytest.raises(AuthenticationError):
        OwnershipGuard(AccountOwner()).check(None, alice.id, db)


def test_cart_owner_resolves_through_cart(db, alice, bob):
    cart = CartService(db).create_cart(alice.id)
    guard = OwnershipGuard(CartOwner())

    guard.check(context_for(alice), cart["id"], db)
    with pytest.raises(AuthorizationError):
        guard.check(context_for(bob), cart["id"], db)


def test_cart_owner_unknown_cart(db, alice):
    with pytest.raises(NotFoundError):
        OwnershipGuard(CartOwner()).check(context_for(alice), 999, db)


def test_order_owner(db, alice, bob, products):
    carts = CartService(db)
    cart = carts.create_cart(alice.id)
    carts.update_cart(cart["id"], 5, 1)
    order = CheckoutService(db).checkout(cart["id"])
    guard = OwnershipGuard(OrderOwner())

    guard.check(context_for(alice), order["id"], db)
    with pytest.raises(AuthorizationError):
        guard.check(context_for(bob), order["id"], db)


def test_guards_run_in_sequence(db, alice, bob):
    cart = CartService(db).create_cart(alice.id)
    #id koszyka nie jest id konta - AccountOwner odrzuca przed CartOwner
    guard = OwnershipGuard(AccountOwner(), CartOwner())

    with pytest.raises(AuthorizationError):
        guard.check(context_for(alice), cart["id"] + 1000, db)
