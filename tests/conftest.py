from __future__ import annotations

import datetime as dt
import os

os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.db import session as db_session_module  # noqa: E402
from app.db.base_class import Base  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.models import models  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
settings.DATABASE_URL = TEST_DATABASE_URL  # type: ignore[attr-defined]
settings.ENV = "test"  # type: ignore[attr-defined]
settings.STRIPE_WEBHOOK_SECRET = "whsec_test"  # type: ignore[attr-defined]
db_session_module.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Ensure each test sees a fresh database schema."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db_session():
    """Provide a database session bound to the test engine."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db_session):
    """Factory creating users with a given plan profile."""
    counter = {"n": 0}

    def _make(
        plan: str | None = None,
        subscription_status: str | None = None,
        current_period_end: dt.datetime | None = None,
        **extra,
    ) -> models.User:
        counter["n"] += 1
        user = models.User(
            email=f"user{counter['n']}@example.com",
            name=f"User {counter['n']}",
            plan=plan,
            subscription_status=subscription_status,
            current_period_end=current_period_end,
            **extra,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_pro_user(make_user):
    """Pro user whose subscription runs for another month."""

    def _make(**extra) -> models.User:
        return make_user(
            plan="pro",
            subscription_status="active",
            current_period_end=dt.datetime.now(dt.timezone.utc) + dt.timedelta(days=30),
            **extra,
        )

    return _make


def auth_headers_for(user_id: int) -> dict[str, str]:
    token = create_access_token(str(user_id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return auth_headers_for


# FastAPI TestClient fixture
from app.api.main import app  # noqa: E402


@pytest.fixture
def client():  # noqa: D401 - simple factory fixture
    """Provide a FastAPI TestClient bound to the application."""
    return TestClient(app)
