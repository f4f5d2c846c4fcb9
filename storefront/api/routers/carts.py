#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_session_context, owner_of
from storefront.data.database import get_db
from storefront.domain.schemas import (
    CartDetailOut,
    CartOut,
    CartUpdateIn,
    OrderOut,
    SessionContext,
)
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from storefront.services.ownership_guard import CartOwner

router = APIRouter(prefix="/cart", tags=["cart"])

cart_owner = owner_of(CartOwner(), param="cart_id")


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=CartOut)
def get_cart(
    context: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return get_service(db).get_cart(context.account_id)


@router.post("", response_model=CartOut, status_code=201)
def create_cart(
    context: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return get_service(db).create_cart(context.account_id)


@router.get("/{cart_id}", response_model=CartDetailOut)
def get_cart_detail(
    cart_id: int,
    context: SessionContext = Depends(cart_owner),
    db: Session = Depends(get_db),
):
    return get_service(db).get_cart_detail(cart_id)


@router.post("/{cart_id}", response_model=CartOut)
def update_cart(
    cart_id: int,
    payload: CartUpdateIn,
    context: SessionContext = Depends(cart_owner),
    db: Session = Depends(get_db),
):
    return get_service(db).update_cart(
        cart_id=cart_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
        account_id=context.account_id,
    )


@router.delete("/{cart_id}", response_model=CartOut)
def remove_item(
    cart_id: int,
    product_id: int = Query(..., gt=0),
    context: SessionContext = Depends(cart_owner),
    db: Session = Depends(get_db),
):
    return get_service(db).remove_item(cart_id, product_id, account_id=context.account_id)


@router.post("/{cart_id}/checkout", response_model=OrderOut, status_code=201)
def checkout(
    cart_id: int,
    context: SessionContext = Depends(cart_owner),
    db: Session = Depends(get_db),
):
    return CheckoutService(db).checkout(cart_id, account_id=context.account_id)


@router.post("/{cart_id}/confirm-order", response_model=OrderOut)
def confirm_order(
    cart_id: int,
    context: SessionContext = Depends(cart_owner),
    db: Session = Depends(get_db),
):
    return CheckoutService(db).confirm_order(cart_id, account_id=context.account_id)
