"""SQLAlchemy engine and session helpers."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# ``Base`` is the parent class for every SQLAlchemy model defined in assetdesk/models.
Base = declarative_base()


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``.

    SQLite connections are shared with FastAPI's worker threads, so
    ``check_same_thread`` is switched off. A pure in-memory SQLite URL also
    pins a single connection, otherwise every checkout would see a fresh,
    empty database.
    """

    if not url.startswith("sqlite"):
        return create_engine(url)
    connect_args = {"check_same_thread": False}
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(url, connect_args=connect_args)


def build_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
