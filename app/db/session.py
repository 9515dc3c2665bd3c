"""Database engine setup.

For test runs (ENV=test) an in-memory SQLite database is used unless
DATABASE_URL points elsewhere; tests rebind `SessionLocal` to their own engine.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings

raw_url = settings.DATABASE_URL or "sqlite:///:memory:"

if raw_url.startswith("sqlite"):
    # SQLite connections are shared across the threadpool FastAPI runs sync routes in
    sqlite_kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in raw_url:
        sqlite_kwargs["poolclass"] = StaticPool
    engine = create_engine(raw_url, future=True, **sqlite_kwargs)
else:
    engine = create_engine(
        raw_url,
        future=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,
    )
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


