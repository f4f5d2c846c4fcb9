# storefront/api/routers/auth.py
import secrets

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from storefront.api.deps import (
    get_google_client,
    get_session_authority,
    get_session_context,
)
from storefront.data.database import get_db
from storefront.domain.errors import AuthenticationError
from storefront.domain.schemas import AccountCreate, LoginIn, SessionContext, UserOut
from storefront.services.account_service import AccountService
from storefront.services.google_client import GoogleOAuthClient
from storefront.services.session_authority import SessionAuthority
from storefront.utils.settings import (
    FRONTEND_URL,
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_SECURE,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])

OAUTH_STATE_COOKIE = "oauth-state"


def _set_session_cookie(response: Response, context: SessionContext, max_age: int) -> None:
    # samesite none wymaga secure - tylko na produkcji
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=context.token,
        max_age=max_age,
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="none" if SESSION_COOKIE_SECURE else "lax",
    )


@router.post("/login")
def login(
    payload: LoginIn,
    authority: SessionAuthority = Depends(get_session_authority),
):
    try:
        context = authority.login("password", payload.model_dump())
    except AuthenticationError as e:
        #front oczekuje 400 przy zlych danych logowania
        return JSONResponse(status_code=400, content={"message": e.message})

    response = JSONResponse(content={"message": "Login successful"})
    _set_session_cookie(response, context, authority.ttl_seconds)
    return response


@router.get("/auth/google")
def google_login(client: GoogleOAuthClient = Depends(get_google_client)):
    state = secrets.token_urlsafe(16)
    response = RedirectResponse(client.authorization_url(state))
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=600,
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/auth/google/callback")
def google_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    authority: SessionAuthority = Depends(get_session_authority),
):
    failure = RedirectResponse(f"{FRONTEND_URL}/login")
    failure.delete_cookie(OAUTH_STATE_COOKIE)

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("Google callback rejected, missing code or state mismatch")
        return failure

    try:
        context = authority.login("google", code)
    except AuthenticationError:
        return failure

    response = RedirectResponse(f"{FRONTEND_URL}/catalog")
    response.delete_cookie(OAUTH_STATE_COOKIE)
    _set_session_cookie(response, context, authority.ttl_seconds)
    return response


@router.post("/register")
def register(payload: AccountCreate, db: Session = Depends(get_db)):
    account = AccountService(db).register(payload)
    return {"message": "register success", "newAccount": account.model_dump(mode="json")}


@router.get("/logout")
def logout(
    context: SessionContext = Depends(get_session_context),
    authority: SessionAuthority = Depends(get_session_authority),
):
    authority.logout(context)
    response = JSONResponse(content={"message": "logout success"})
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


@router.get("/user", response_model=UserOut)
def current_user(context: SessionContext = Depends(get_session_context)):
    return UserOut(username=context.username, id=context.account_id)


@router.post("/extend-session")
def extend_session(
    context: SessionContext = Depends(get_session_context),
    authority: SessionAuthority = Depends(get_session_authority),
):
    extended = authority.extend(context)
    response = JSONResponse(
        content={"success": True, "expires_at": extended.expires_at.isoformat()}
    )
    _set_session_cookie(response, extended, authority.ttl_seconds)
    return response
