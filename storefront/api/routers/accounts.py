from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from storefront.api.deps import owner_of
from storefront.data.database import get_db
from storefront.domain.schemas import AccountRead, AccountUpdate, SessionContext
from storefront.services.account_service import AccountService
from storefront.services.ownership_guard import AccountOwner

router = APIRouter(prefix="/accounts", tags=["accounts"])

account_owner = owner_of(AccountOwner(), param="account_id")


@router.get("/{account_id}", response_model=AccountRead)
def get_account(
    account_id: int,
    context: SessionContext = Depends(account_owner),
    db: Session = Depends(get_db),
):
    return AccountService(db).get_account(account_id)


@router.put("/{account_id}", response_model=AccountRead)
def update_account(
    account_id: int,
    payload: AccountUpdate,
    context: SessionContext = Depends(account_owner),
    db: Session = Depends(get_db),
):
    return AccountService(db).update_account(account_id, payload)
