"""
Shared pytest fixtures for the chessreg tests.

Sets required environment variables BEFORE any chessreg module is imported so
that pydantic-settings and SQLAlchemy engine initialisation use safe test values.
"""
from __future__ import annotations

import os
from datetime import date, datetime, timedelta
from typing import AsyncGenerator

# ── Set env vars before any chessreg import ───────────────────────────────────
os.environ.setdefault("BOT_TOKEN", "test-token-for-pytest")
os.environ.setdefault("ADMIN_PASSWORD", "s3cret-pass")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

# ── Third-party ───────────────────────────────────────────────────────────────
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# ── chessreg imports (safe after env vars are set) ────────────────────────────
from chessreg.models.base import Base
from chessreg.models.models import AgeCategory, Gender, PaymentStatus
from chessreg.services.roster_service import PlayerRecord


# ── DB fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a fresh AsyncSession backed by an isolated in-memory SQLite database.
    Schema is created fresh for every test function; engine is always disposed
    on teardown, even if the test raises an exception.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()


@pytest.fixture
async def bare_session() -> AsyncGenerator[AsyncSession, None]:
    """Like async_session, but the registrations table was never created."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()


# ── Form / record helpers ─────────────────────────────────────────────────────

@pytest.fixture
def valid_form():
    """Factory for a raw registration mapping that passes validation."""

    def _make(**overrides) -> dict:
        form = {
            "full_name":          "Kavin Sivakumar",
            "name_with_initials": "S. Kavin",
            "fide_id":            "",
            "date_of_birth":      "2014-04-21",
            "gender":             Gender.MALE,
            "contact_number":     "0771234567",
            "agree_to_terms":     True,
            "honeypot":           "",
        }
        form.update(overrides)
        return form

    return _make


_BASE_TIME = datetime(2025, 8, 1, 9, 0, 0)


@pytest.fixture
def make_record():
    """
    Factory for PlayerRecord snapshots (no DB required).

    `n` drives every default so records built with different n are distinct
    and created_at increases with n.
    """

    def _make(n: int = 0, **overrides) -> PlayerRecord:
        values = {
            "id":                 f"00000000-0000-0000-0000-{n:012d}",
            "created_at":         _BASE_TIME + timedelta(minutes=n),
            "full_name":          f"Player {n:03d}",
            "name_with_initials": f"P. {n:03d}",
            "fide_id":            None,
            "date_of_birth":      date(2012, 1, 1),
            "gender":             Gender.MALE,
            "contact_number":     "0771234567",
            "age_category":       AgeCategory.U14,
            "payment_status":     PaymentStatus.UNPAID,
            "reference_number":   f"NCC-{n:06d}",
        }
        values.update(overrides)
        return PlayerRecord(**values)

    return _make
