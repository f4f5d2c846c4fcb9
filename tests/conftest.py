import os

#przed importem storefront - settings i engine czytaja env przy imporcie
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storefront.api import deps
from storefront.data.database import get_db, init_db
from storefront.data.models.account import AccountModel
from storefront.data.models.product import ProductModel
from storefront.main import app
from storefront.services.google_client import GoogleOAuthClient
from storefront.services.session_store import SessionStore
from storefront.utils.hashing import get_password_hash


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def engine(tmp_path):
    #plik zamiast :memory: - osobne polaczenia dla osobnych sesji
    eng = create_engine(
        f"sqlite:///{tmp_path / 'storefront.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def products(db):
    items = [
        ProductModel(id=5, name="Mug", unit_price=Decimal("9.99"), stock=10, category_id=1),
        ProductModel(id=6, name="Poster", unit_price=Decimal("15.00"), stock=1, category_id=2),
        ProductModel(id=7, name="Sticker", unit_price=Decimal("1.50"), stock=100, category_id=1),
    ]
    db.add_all(items)
    db.commit()
    return {p.id: p for p in items}


@pytest.fixture
def make_account(db):
    def _make(username: str, password: str = "secret-pass", email: str | None = None) -> AccountModel:
        account = AccountModel(
            username=username,
            password_hash=get_password_hash(password),
            email=email,
        )
        db.add(account)
        db.commit()
        db.refresh(account)
        return account

    return _make


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session_store():
    return SessionStore(client=fakeredis.FakeRedis(decode_responses=True))


@pytest.fixture
def google_client():
    client = MagicMock(spec=GoogleOAuthClient)
    client.authorization_url.return_value = "https://accounts.google.test/auth?state=x"
    return client


@pytest.fixture
def api(session_factory, session_store, clock, google_client):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_session_store] = lambda: session_store
    app.dependency_overrides[deps.get_clock] = lambda: clock
    app.dependency_overrides[deps.get_google_client] = lambda: google_client
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def make_client(api):
    def _make() -> TestClient:
        return TestClient(api)

    return _make


@pytest.fixture
def login(make_client, make_account):
    """Konto + zalogowany klient (kazdy klient ma wlasne cookies)."""

    def _login(username: str, password: str = "secret-pass"):
        account = make_account(username, password)
        client = make_client()
        resp = client.post("/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.text
        return client, account

    return _login
