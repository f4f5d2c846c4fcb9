# storefront/api/deps.py
from datetime import datetime
from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import ValidationError
from storefront.domain.schemas import SessionContext
from storefront.services.authenticators import GoogleAuthenticator, PasswordAuthenticator
from storefront.services.google_client import GoogleOAuthClient
from storefront.services.ownership_guard import Guard, OwnershipGuard
from storefront.services.session_authority import SessionAuthority, utcnow
from storefront.services.session_store import SessionStore
from storefront.utils.settings import SESSION_COOKIE_NAME

_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    #jeden klient redisa (pula polaczen) na proces
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store


def get_google_client() -> GoogleOAuthClient:
    return GoogleOAuthClient()


def get_clock() -> Callable[[], datetime]:
    return utcnow


def get_session_authority(
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    google_client: GoogleOAuthClient = Depends(get_google_client),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> SessionAuthority:
    return SessionAuthority(
        store=store,
        authenticators=[
            PasswordAuthenticator(db),
            GoogleAuthenticator(db, google_client),
        ],
        clock=clock,
    )


def get_session_context(
    request: Request,
    authority: SessionAuthority = Depends(get_session_authority),
) -> SessionContext:
    return authority.resolve(request.cookies.get(SESSION_COOKIE_NAME))


def owner_of(*guards: Guard, param: str):
    """
    Fabryka dependency: sesja + sekwencja guardow dla parametru sciezki `param`.
    Skladana przy rejestracji route, np. Depends(owner_of(CartOwner(), param="cart_id")).
    """
    ownership = OwnershipGuard(*guards)

    def _checker(
        request: Request,
        context: SessionContext = Depends(get_session_context),
        db: Session = Depends(get_db),
    ) -> SessionContext:
        try:
            resource_id = int(request.path_params[param])
        except (KeyError, ValueError):
            raise ValidationError(errors=[{"field": param, "message": "must be an integer"}])
        return ownership.check(context, resource_id, db)

    return _checker
