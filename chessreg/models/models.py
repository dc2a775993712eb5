"""
ORM model and value constants for the tournament registration roster.

Domain overview
---------------
Player  — one row of the `registrations` table, created once by the
          registration flow. Only `payment_status` changes afterwards,
          and only from the admin roster panel. Rows are never deleted.
"""
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from chessreg.config import settings
from chessreg.models.base import Base

# ─────────────────────────── Constants ────────────────────────────────────────

class Gender:
    MALE        = "Male"
    FEMALE      = "Female"
    UNSPECIFIED = "Prefer not to say"

    ALL = (MALE, FEMALE, UNSPECIFIED)

    EMOJI = {
        MALE:        "👨",
        FEMALE:      "👩",
        UNSPECIFIED: "🙂",
    }


class AgeCategory:
    U6   = "U6"
    U8   = "U8"
    U10  = "U10"
    U12  = "U12"
    U14  = "U14"
    U16  = "U16"
    OPEN = "Open"

    # (upper age bound, category); the first bound the age is below wins
    BANDS: tuple[tuple[int, str], ...] = (
        (6,  U6),
        (8,  U8),
        (10, U10),
        (12, U12),
        (14, U14),
        (16, U16),
    )

    ALL = (U6, U8, U10, U12, U14, U16, OPEN)

    LABELS = {
        U6:   "Under 6",
        U8:   "Under 8",
        U10:  "Under 10",
        U12:  "Under 12",
        U14:  "Under 14",
        U16:  "Under 16",
        OPEN: "Open",
    }


class PaymentStatus:
    UNPAID    = "unpaid"
    PAID_TO_A = "paid_to_party_a"
    PAID_TO_B = "paid_to_party_b"

    ALL = (UNPAID, PAID_TO_A, PAID_TO_B)

    EMOJI = {
        UNPAID:    "⚪️",
        PAID_TO_A: "🟢",
        PAID_TO_B: "🔵",
    }

    @classmethod
    def label(cls, status: str) -> str:
        """Human label naming the payee the money went to."""
        if status == cls.PAID_TO_A:
            return f"Paid to {settings.PAYEE_A_NAME}"
        if status == cls.PAID_TO_B:
            return f"Paid to {settings.PAYEE_B_NAME}"
        if status == cls.UNPAID:
            return "Unpaid"
        return status

    @staticmethod
    def title(status: str) -> str:
        """'paid_to_party_a' → 'Paid To Party A' (export column format)."""
        return status.replace("_", " ").title()


# ─────────────────────────── Models ───────────────────────────────────────────

def _new_id() -> str:
    return str(uuid.uuid4())


class Player(Base):
    """A registered tournament player."""
    __tablename__ = "registrations"

    id:                 Mapped[str]           = mapped_column(String(36), primary_key=True, default=_new_id)
    created_at:         Mapped[datetime]      = mapped_column(DateTime, default=func.now(), index=True)
    full_name:          Mapped[str]           = mapped_column(String(255))
    name_with_initials: Mapped[str]           = mapped_column(String(255))
    fide_id:            Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    date_of_birth:      Mapped[date]          = mapped_column(Date)
    gender:             Mapped[str]           = mapped_column(String(20))    # Gender.*
    contact_number:     Mapped[str]           = mapped_column(String(20))
    age_category:       Mapped[str]           = mapped_column(String(10))    # AgeCategory.*
    payment_status:     Mapped[str]           = mapped_column(String(30), default=PaymentStatus.UNPAID)
    reference_number:   Mapped[str]           = mapped_column(String(32), index=True)

    @property
    def status_emoji(self) -> str:
        return PaymentStatus.EMOJI.get(self.payment_status, "❓")

    @property
    def is_paid(self) -> bool:
        return self.payment_status != PaymentStatus.UNPAID
