"""
Player store — all database operations on the `registrations` table.

The rest of the code depends only on three operations: insert one row,
select all rows newest first, and update one row's payment status by id.
SQLAlchemy errors never leak out of this module; they are translated into
PersistenceError / RosterTableMissing after rolling the session back.

All functions receive an AsyncSession parameter and are intentionally
pure async functions (no class coupling) for easy unit testing.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, NoReturn, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chessreg.errors import PersistenceError, RosterTableMissing
from chessreg.models.models import Player, PaymentStatus

logger = logging.getLogger(__name__)

_MISSING_TABLE_MARKERS = ("42P01", "no such table", "UndefinedTable")


def is_missing_table_error(exc: BaseException) -> bool:
    """True for 'relation does not exist' (Postgres 42P01 / SQLite 'no such table')."""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "sqlstate", None) == "42P01" or getattr(orig, "pgcode", None) == "42P01":
        return True
    text = f"{type(orig).__name__ if orig else ''} {exc}"
    if "relation" in text and "does not exist" in text:
        return True
    return any(marker in text for marker in _MISSING_TABLE_MARKERS)


async def _fail(session: AsyncSession, exc: SQLAlchemyError, action: str) -> NoReturn:
    await session.rollback()
    if is_missing_table_error(exc):
        logger.error("Registrations table is missing (%s): %s", action, exc)
        raise RosterTableMissing("Registrations table not found") from exc
    logger.error("Database error while trying to %s: %s", action, exc)
    raise PersistenceError(f"Could not {action}") from exc


# ── Insert ────────────────────────────────────────────────────────────────────

async def insert_player(
    session: AsyncSession,
    full_name: str,
    name_with_initials: str,
    fide_id: Optional[str],
    date_of_birth: date,
    gender: str,
    contact_number: str,
    age_category: str,
    reference_number: str,
    created_at: Optional[datetime] = None,
) -> Player:
    """Insert and commit a new registration. payment_status always starts as unpaid."""
    p = Player(
        full_name=full_name,
        name_with_initials=name_with_initials,
        fide_id=fide_id,
        date_of_birth=date_of_birth,
        gender=gender,
        contact_number=contact_number,
        age_category=age_category,
        payment_status=PaymentStatus.UNPAID,
        reference_number=reference_number,
        created_at=created_at or datetime.now(),
    )
    try:
        session.add(p)
        await session.commit()
    except SQLAlchemyError as exc:
        await _fail(session, exc, "save the registration")
    return p


# ── Select ────────────────────────────────────────────────────────────────────

async def list_players(session: AsyncSession) -> List[Player]:
    """Whole roster, newest registration first."""
    try:
        result = await session.execute(
            select(Player).order_by(Player.created_at.desc())
        )
    except SQLAlchemyError as exc:
        await _fail(session, exc, "load registrations")
    return list(result.scalars().all())


async def get_player(session: AsyncSession, player_id: str) -> Optional[Player]:
    try:
        result = await session.execute(select(Player).where(Player.id == player_id))
    except SQLAlchemyError as exc:
        await _fail(session, exc, "load the registration")
    return result.scalar_one_or_none()


# ── Update ────────────────────────────────────────────────────────────────────

async def update_payment_status(
    session: AsyncSession,
    player_id: str,
    status: str,
) -> None:
    """
    Set payment_status on exactly one row and commit.

    Raises PersistenceError if the status is unknown, the row is gone or the
    store rejects the write. Last write wins; there is no version check.
    """
    if status not in PaymentStatus.ALL:
        raise PersistenceError(f"Unknown payment status: {status}")
    try:
        result = await session.execute(
            update(Player)
            .where(Player.id == player_id)
            .values(payment_status=status)
        )
        if result.rowcount != 1:
            await session.rollback()
            raise PersistenceError(f"Registration {player_id} not found")
        await session.commit()
    except SQLAlchemyError as exc:
        await _fail(session, exc, "update the payment status")
    logger.info("Payment status of %s set to %s", player_id, status)
