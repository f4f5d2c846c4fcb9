# storefront/services/session_authority.py
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable

from storefront.domain.errors import AuthenticationError, ValidationError
from storefront.domain.schemas import AccountIdentity, SessionContext
from storefront.services.authenticators import Authenticator
from storefront.services.session_store import SessionStore
from storefront.utils.settings import SESSION_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionAuthority:
    """
    Cykl zycia sesji:
      login   -> nowy token + rekord w store (TTL)
      resolve -> token -> SessionContext albo AuthenticationError
      extend  -> przesuwa expires_at o pelne okno, bez ponownego logowania
      logout  -> usuwa rekord po stronie serwera

    expires_at trzymany tez w rekordzie - redis TTL to tylko sprzatanie.
    """

    def __init__(
        self,
        store: SessionStore,
        authenticators: Iterable[Authenticator] = (),
        ttl_seconds: int = SESSION_TTL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.authenticators = {a.method: a for a in authenticators}
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def login(self, method: str, credential: Any) -> SessionContext:
        authenticator = self.authenticators.get(method)
        if authenticator is None:
            raise ValidationError(f"Unsupported login method: {method}")

        identity = authenticator.authenticate(credential)
        context = self.open_session(identity)
        logger.info(f"Account {identity.id} logged in via {method}")
        return context

    def open_session(self, identity: AccountIdentity) -> SessionContext:
        token = secrets.token_urlsafe(32)
        context = SessionContext(
            token=token,
            account_id=identity.id,
            username=identity.username,
            expires_at=self.clock() + timedelta(seconds=self.ttl_seconds),
        )
        self.store.set(token, self._record(context), self.ttl_seconds)
        return context

    def resolve(self, token: str | None) -> SessionContext:
        if not token:
            raise AuthenticationError()

        record = self.store.get(token)
        if not record:
            raise AuthenticationError("Session expired or invalid")

        expires_at = datetime.fromisoformat(record["expires_at"])
        if expires_at <= self.clock():
            self.store.destroy(token)
            raise AuthenticationError("Session expired or invalid")

        return SessionContext(
            token=token,
            account_id=record["account_id"],
            username=record["username"],
            expires_at=expires_at,
        )

    def extend(self, context: SessionContext) -> SessionContext:
        extended = context.model_copy(
            update={"expires_at": self.clock() + timedelta(seconds=self.ttl_seconds)}
        )
        if not self.store.touch(context.token, self._record(extended), self.ttl_seconds):
            #wylogowana albo wygasla miedzy resolve a extend
            raise AuthenticationError("Session expired or invalid")

        logger.info(f"Session of account {context.account_id} extended until {extended.expires_at}")
        return extended

    def logout(self, context: SessionContext) -> None:
        self.store.destroy(context.token)
        logger.info(f"Account {context.account_id} logged out")

    @staticmethod
    def _record(context: SessionContext) -> dict:
        return {
            "account_id": context.account_id,
            "username": context.username,
            "expires_at": context.expires_at.isoformat(),
        }
