# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_session_context, owner_of
from storefront.data.database import get_db
from storefront.domain.schemas import OrderOut, SessionContext
from storefront.services.order_service import OrderService
from storefront.services.ownership_guard import OrderOwner

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.get("", response_model=List[OrderOut])
def order_history(
    context: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """
    Historia zamowien zalogowanego konta, najnowsze pierwsze.
    """
    return get_service(db).list_orders(context.account_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    context: SessionContext = Depends(owner_of(OrderOwner(), param="order_id")),
    db: Session = Depends(get_db),
):
    """
    Szczegoly zamowienia razem z pozycjami.
    """
    return get_service(db).get_order(order_id, account_id=context.account_id)
