"""
Message text builders shared by the registration and admin handlers.

All user-typed values go through md() before being placed in a Markdown
message so names like "de_Silva" do not break the parser.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, Optional

from chessreg.config import settings
from chessreg.models.models import AgeCategory, Gender, PaymentStatus
from chessreg.services.roster_service import (
    ASC, FIELD_LABELS, PlayerRecord, RosterPage, RosterView,
)

_MD_SPECIAL = re.compile(r"([_*`\[])")


def md(value: Any) -> str:
    """Escape legacy-Markdown control characters in user-supplied text."""
    if value is None:
        return "—"
    return _MD_SPECIAL.sub(r"\\\1", str(value))


def fmt_date(value: Optional[date]) -> str:
    return value.strftime("%d/%m/%Y") if value else "—"


# ── Registration ──────────────────────────────────────────────────────────────

def payment_instructions() -> str:
    return (
        "💳 *Payment Information*\n"
        "Please make the payment to one of the following accounts:\n"
        f"• {md(settings.PAYEE_B_BANK)}: `{settings.PAYEE_B_ACCOUNT}` — {md(settings.PAYEE_B_NAME)}\n"
        f"• {md(settings.PAYEE_A_BANK)}: `{settings.PAYEE_A_ACCOUNT}` — {md(settings.PAYEE_A_NAME)}"
    )


def registration_summary(data: Dict[str, Any], age_category: str) -> str:
    dob = data.get("date_of_birth")
    if isinstance(dob, str):
        dob = date.fromisoformat(dob)
    return (
        f"👤 Full name: {md(data.get('full_name'))}\n"
        f"🔤 Name with initials: {md(data.get('name_with_initials'))}\n"
        f"♟ FIDE ID: {md(data.get('fide_id') or 'none')}\n"
        f"🎂 Date of birth: {fmt_date(dob)}\n"
        f"🚻 Gender: {md(data.get('gender'))}\n"
        f"📞 Contact: `{data.get('contact_number', '')}`\n"
        f"🏅 Age category: *{AgeCategory.LABELS.get(age_category, age_category)}*"
    )


def field_error_lines(errors: Dict[str, str]) -> str:
    labels = dict(FIELD_LABELS, contact_number="Contact Number", agree_to_terms="Terms")
    return "\n".join(
        f"⚠️ {labels.get(name, 'Form')}: {md(msg)}" for name, msg in errors.items()
    )


# ── Admin roster ──────────────────────────────────────────────────────────────

def roster_text(page: RosterPage, view: RosterView) -> str:
    s = page.stats
    lines = [
        "📋 *Player Registrations*\n",
        f"👥 Registered: *{s.total_registered}*",
        f"💳 Paid: *{s.total_paid}* ({s.paid_pct_of_total}% of total)",
        f"🟢 Paid to {md(settings.PAYEE_A_NAME)}: *{s.paid_to_a}* ({s.a_pct_of_paid}% of paid)",
        f"🔵 Paid to {md(settings.PAYEE_B_NAME)}: *{s.paid_to_b}* ({s.b_pct_of_paid}% of paid)",
        "",
    ]

    arrow = "▲" if view.sort_direction == ASC else "▼"
    lines.append(f"↕️ Sort: {FIELD_LABELS.get(view.sort_field, view.sort_field)} {arrow}")
    if view.filters:
        active = ", ".join(
            f"{FIELD_LABELS.get(k, k)} ∋ “{md(v)}”" for k, v in sorted(view.filters.items())
        )
        lines.append(f"🔎 Filters: {active}")
    lines.append(f"📄 Page {page.page}/{page.total_pages} · {len(page.visible)} shown\n")

    if not page.rows:
        lines.append("_No registrations match._")
    for i, r in enumerate(page.rows, start=page.first_index):
        lines.append(
            f"`{i:>2}.` {PaymentStatus.EMOJI.get(r.payment_status, '❓')} "
            f"{md(r.full_name)} · {r.age_category} · `{r.reference_number}`"
        )
    return "\n".join(lines)


def player_detail_text(r: PlayerRecord) -> str:
    registered = r.created_at.strftime("%Y-%m-%d %H:%M") if r.created_at else "—"
    return (
        f"👤 *{md(r.full_name)}*\n\n"
        f"🔤 Name with initials: {md(r.name_with_initials)}\n"
        f"♟ FIDE ID: {md(r.fide_id or '—')}\n"
        f"🎂 Date of birth: {fmt_date(r.date_of_birth)}\n"
        f"{Gender.EMOJI.get(r.gender, '🚻')} Gender: {md(r.gender)}\n"
        f"📞 Contact: `{r.contact_number}`\n"
        f"🏅 Age category: {r.age_category}\n"
        f"🧾 Reference: `{r.reference_number}`\n"
        f"🕒 Registered: {registered}\n\n"
        f"📌 Payment: {PaymentStatus.EMOJI.get(r.payment_status, '❓')} "
        f"{md(PaymentStatus.label(r.payment_status))}"
    )
