from sqlalchemy import select, func
from sqlalchemy.orm import Session
from storefront.data.models.account import AccountModel


class AccountRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_account(self, account_id: int) -> AccountModel | None:
        return self.db.get(AccountModel, account_id)

    def get_by_username(self, username: str) -> AccountModel | None:
        return self.db.execute(
            select(AccountModel).where(AccountModel.username == username)
        ).scalar_one_or_none()

    def get_by_email(self, email: str) -> AccountModel | None:
        return self.db.execute(
            select(AccountModel).where(func.lower(AccountModel.email) == email.strip().lower())
        ).scalar_one_or_none()

    def create_account(self, account: AccountModel) -> AccountModel:
        self.db.add(account)
        self.db.commit()
        self.db.refresh(account)
        return account

    def save(self, account: AccountModel) -> AccountModel:
        self.db.commit()
        self.db.refresh(account)
        return account

    def rollback(self) -> None:
        self.db.rollback()
