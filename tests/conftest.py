import os
from typing import Generator
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")

from storefront import auth, crud
from storefront.db import Base, enable_sqlite_foreign_keys
from storefront.mail import OutboxMailer
from storefront.main import app, get_db, get_gateway, get_mailer
from storefront.payments import FakeGateway
from storefront.permissions import CallerContext, permission_set
from storefront.transport import CredentialTransport


class RecordingTransport(CredentialTransport):
    def __init__(self):
        self.issued = []
        self.cleared = 0

    def set_credential(self, token, http_only=True, max_age=auth.COOKIE_MAX_AGE):
        self.issued.append({"token": token, "http_only": http_only, "max_age": max_age})

    def clear_credential(self):
        self.cleared += 1


@pytest.fixture(scope="function")
def db_session() -> Generator:
    # Use in-memory SQLite with a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_foreign_keys(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def mailer():
    return OutboxMailer()


@pytest.fixture
def make_user(db_session):
    def _make(email="alice@example.com", password="secret", permissions=("USER",), name="Alice"):
        return crud.create_user(
            db_session,
            name=name,
            email=email,
            password_hash=auth.hash_password(password),
            permissions=list(permissions),
        )
    return _make


@pytest.fixture
def make_item(db_session):
    def _make(owner, title="Shirt", price=1000, **fields):
        return crud.create_item(db_session, owner.id, title=title, price=price, **fields)
    return _make


@pytest.fixture
def as_caller():
    def _caller(user) -> CallerContext:
        return CallerContext(user_id=user.id, permissions=permission_set(user.permissions))
    return _caller


@pytest.fixture(scope="function")
def client(db_session, gateway, mailer):
    # Override dependencies to use the same session and fake collaborators
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_mailer] = lambda: mailer
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
