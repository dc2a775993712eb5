"""
Excel export of the admin roster.

Writes the currently filtered + sorted view (never just one page) into a
single-sheet .xlsx workbook with openpyxl.

Sheet layout
------------
Row 1:    Column headers (bold, white on blue, frozen)
Row 2…:   One row per registration
"""
from __future__ import annotations

import io
from datetime import date
from typing import Iterable, List, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from chessreg.models.models import PaymentStatus
from chessreg.services.roster_service import PlayerRecord

SHEET_TITLE = "Player Registrations"

EXPORT_HEADERS: List[str] = [
    "Full Name",
    "Name with Initials",
    "FIDE ID",
    "Date of Birth",
    "Gender",
    "Contact Number",
    "Age Category",
    "Payment Status",
    "Reference Number",
    "Registration Date",
]

_HEADER_FILL = PatternFill("solid", fgColor="2D4F93")
_HEADER_FONT = Font(bold=True, color="FFFFFF")


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"chess_registrations_{today.isoformat()}.xlsx"


def export_row(r: PlayerRecord) -> list:
    return [
        r.full_name,
        r.name_with_initials,
        r.fide_id or "",
        r.date_of_birth.isoformat() if r.date_of_birth else "",
        r.gender,
        r.contact_number,
        r.age_category,
        PaymentStatus.title(r.payment_status),
        r.reference_number,
        r.created_at.strftime("%Y-%m-%d %H:%M:%S") if r.created_at else "",
    ]


def build_workbook(records: Iterable[PlayerRecord]) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
    ws.freeze_panes = "A2"

    for r in records:
        ws.append(export_row(r))

    # Rough auto-width: longest cell per column, capped
    for idx, column in enumerate(ws.columns, start=1):
        longest = max((len(str(c.value)) for c in column if c.value is not None), default=8)
        ws.column_dimensions[get_column_letter(idx)].width = min(longest + 2, 50)
    return wb


def build_export(
    records: Iterable[PlayerRecord],
    today: Optional[date] = None,
) -> Tuple[str, bytes]:
    """Return (filename, xlsx bytes) ready to be sent as a document."""
    buf = io.BytesIO()
    build_workbook(records).save(buf)
    return export_filename(today), buf.getvalue()
