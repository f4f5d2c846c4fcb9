from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from storefront.data.models.account import AccountModel
from storefront.domain.errors import InternalError, NotFoundError, ValidationError
from storefront.domain.schemas import AccountCreate, AccountRead, AccountUpdate
from storefront.repos.account_repo import AccountRepo
from storefront.utils.hashing import get_password_hash
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class AccountService:
    def __init__(self, db: Session):
        self.repo = AccountRepo(db)

    def register(self, payload: AccountCreate) -> AccountRead:
        username = payload.username.strip()
        email = payload.email.strip().lower() if payload.email else None

        if self.repo.get_by_username(username):
            raise ValidationError(
                errors=[{"field": "username", "message": "Username is already taken"}]
            )
        if email and self.repo.get_by_email(email):
            raise ValidationError(
                errors=[{"field": "email", "message": "Email is already registered"}]
            )

        account = AccountModel(
            username=username,
            password_hash=get_password_hash(payload.password),
            full_name=payload.full_name,
            date_of_birth=payload.date_of_birth,
            address=payload.address,
            email=email,
        )
        try:
            created = self.repo.create_account(account)
        except IntegrityError as e:
            self.repo.rollback()
            raise ValidationError(
                errors=[{"field": "username", "message": "Username is already taken"}]
            ) from e
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.exception("Account registration failed")
            raise InternalError() from e

        logger.info(f"Registered account {created.id}")
        return AccountRead.model_validate(created)

    def get_account(self, account_id: int) -> AccountRead:
        account = self.repo.get_account(account_id)
        if not account:
            raise NotFoundError(f"Account {account_id} not found")
        return AccountRead.model_validate(account)

    def update_account(self, account_id: int, payload: AccountUpdate) -> AccountRead:
        account = self.repo.get_account(account_id)
        if not account:
            raise NotFoundError(f"Account {account_id} not found")

        other = self.repo.get_by_email(payload.email)
        if other and other.id != account_id:
            raise ValidationError(
                errors=[{"field": "email", "message": "Email is already registered"}]
            )

        #username i id sie nie zmieniaja
        account.full_name = payload.full_name
        account.date_of_birth = payload.date_of_birth
        account.address = payload.address
        account.email = payload.email
        try:
            updated = self.repo.save(account)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.exception(f"Updating account {account_id} failed")
            raise InternalError() from e

        logger.info(f"Account {account_id} updated")
        return AccountRead.model_validate(updated)
