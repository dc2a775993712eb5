"""
SQLAlchemy declarative base and the async engine / session factory.

Index and constraint names follow a fixed convention so the Alembic revision
in migrations/versions/ and Base.metadata.create_all() produce the same schema.
"""
from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from chessreg.config import settings

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def engine_options(url: str) -> Dict[str, Any]:
    """SQLite (tests, local runs) has no server to ping; Postgres does."""
    if url.startswith("sqlite"):
        return {"echo": False}
    return {"echo": False, "pool_pre_ping": True, "pool_size": 5, "max_overflow": 5}


engine = create_async_engine(settings.async_database_url, **engine_options(settings.async_database_url))

AsyncSessionFactory: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
