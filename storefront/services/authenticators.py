# storefront/services/authenticators.py
"""
Strategie logowania. Kazda zwraca AccountIdentity albo rzuca AuthenticationError,
SessionAuthority zna tylko interfejs Authenticator.
"""
from abc import ABC, abstractmethod
from typing import Any

from requests import RequestException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.account import AccountModel
from storefront.domain.errors import AuthenticationError
from storefront.domain.schemas import AccountIdentity
from storefront.repos.account_repo import AccountRepo
from storefront.services.google_client import GoogleOAuthClient
from storefront.utils.hashing import verify_password
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class Authenticator(ABC):
    method: str

    @abstractmethod
    def authenticate(self, credential: Any) -> AccountIdentity:
        ...


class PasswordAuthenticator(Authenticator):
    """credential = {"username": ..., "password": ...}"""

    method = "password"

    def __init__(self, db: Session):
        self.repo = AccountRepo(db)

    def authenticate(self, credential: dict) -> AccountIdentity:
        username = credential.get("username")
        password = credential.get("password")

        account = self.repo.get_by_username(username) if username else None

        #ten sam komunikat dla zlego loginu i hasla
        if not account or not verify_password(password or "", account.password_hash):
            logger.warning(f"Password login failed for username {username!r}")
            raise AuthenticationError("Incorrect username or password")

        return AccountIdentity(id=account.id, username=account.username)


class GoogleAuthenticator(Authenticator):
    """
    credential = kod autoryzacyjny z callbacku OAuth.
    Konto szukane po zweryfikowanym emailu, jak nie ma - zakladane przy pierwszym logowaniu.
    """

    method = "google"

    def __init__(self, db: Session, client: GoogleOAuthClient | None = None):
        self.repo = AccountRepo(db)
        self.client = client or GoogleOAuthClient()

    def authenticate(self, credential: str) -> AccountIdentity:
        if not credential:
            raise AuthenticationError("Missing authorization code")

        try:
            access_token = self.client.exchange_code(credential)
            profile = self.client.fetch_userinfo(access_token)
        except (RequestException, KeyError, ValueError) as e:
            #blad sieci albo odpowiedz bez access_token / nie-JSON
            logger.warning(f"Google login failed: {e}")
            raise AuthenticationError("Google login failed") from e

        email = (profile.get("email") or "").strip().lower()
        if not email or not profile.get("email_verified"):
            raise AuthenticationError("Google account email is not verified")

        account = self.repo.get_by_email(email)
        if not account:
            account = self._provision(email, profile.get("name"))

        return AccountIdentity(id=account.id, username=account.username)

    def _provision(self, email: str, full_name: str | None) -> AccountModel:
        try:
            account = self.repo.create_account(
                AccountModel(username=email, email=email, full_name=full_name, password_hash=None)
            )
        except IntegrityError:
            #rownolegly pierwszy login tym samym kontem
            self.repo.rollback()
            account = self.repo.get_by_email(email)
            if not account:
                raise AuthenticationError("Could not provision account")
            return account

        logger.info(f"Provisioned account {account.id} from Google login")
        return account
