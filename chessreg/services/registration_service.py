"""
Registration pipeline: validate → derive age category → reference number → insert.

Flow
----
1. validate_registration()  — pydantic model, fails closed (validators.py)
2. derive_age_category()    — calendar-year bands U6 … U16, then Open
3. make_reference_number()  — "NCC-" + last six digits of epoch milliseconds
4. insert_player()          — payment_status forced to "unpaid"

Nothing is retried. A store failure surfaces as PersistenceError and the
caller keeps the entered answers so the user can try again.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from chessreg.config import settings
from chessreg.models.models import AgeCategory, Player
from chessreg.services.player_service import insert_player
from chessreg.validators import validate_registration

logger = logging.getLogger(__name__)


def derive_age_category(date_of_birth: date, today: Optional[date] = None) -> str:
    """
    Age category from birth year only: age = current year − birth year.

    A calendar-year approximation, not the exact age in days: a player born
    in December counts as a year older all January.
    """
    today = today or date.today()
    age = today.year - date_of_birth.year
    for bound, category in AgeCategory.BANDS:
        if age < bound:
            return category
    return AgeCategory.OPEN


def make_reference_number(now: Optional[datetime] = None, prefix: Optional[str] = None) -> str:
    """
    Human-quotable payment reference, e.g. "NCC-482913".

    Built from the last six digits of the epoch-millisecond timestamp, so two
    submissions close together can collide. Do not treat it as unique.
    """
    now = now or datetime.now()
    millis = int(now.timestamp() * 1000)
    return f"{prefix or settings.REFERENCE_PREFIX}-{str(millis)[-6:]}"


async def submit_registration(
    session: AsyncSession,
    raw: Mapping[str, Any],
    *,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Player:
    """
    Validate, derive and persist one registration.

    Raises
    ------
    BotDetected          : honeypot filled (generic message only)
    FormValidationError  : one or more fields rejected
    PersistenceError     : the store rejected the insert or was unreachable
    """
    now = now or datetime.now()
    today = today or now.date()

    data = validate_registration(raw, today=today)
    age_category = derive_age_category(data.date_of_birth, today)
    reference = make_reference_number(now)

    player = await insert_player(
        session,
        full_name=data.full_name,
        name_with_initials=data.name_with_initials,
        fide_id=data.fide_id,
        date_of_birth=data.date_of_birth,
        gender=data.gender,
        contact_number=data.contact_number,
        age_category=age_category,
        reference_number=reference,
        created_at=now,
    )
    logger.info("Registered %s (%s) as %s", reference, age_category, player.id)
    return player
