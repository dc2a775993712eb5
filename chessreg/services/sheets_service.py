"""
Google Sheets mirror of the roster export.

Pushes the same rows as the .xlsx export to a worksheet using
gspread-asyncio 2.0.0 (wraps gspread 6.x) for non-blocking I/O.
Optional: does nothing unless GOOGLE_CREDENTIALS_JSON and
GOOGLE_SPREADSHEET_ID are configured.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

import gspread_asyncio
from google.oauth2.service_account import Credentials
from gspread.exceptions import WorksheetNotFound

from chessreg.config import settings
from chessreg.services.export_service import EXPORT_HEADERS, SHEET_TITLE, export_row
from chessreg.services.roster_service import PlayerRecord

logger = logging.getLogger(__name__)

SCOPES = [
    "https://spreadsheets.google.com/feeds",
    "https://www.googleapis.com/auth/drive",
]

# Header row colours (RGB 0-1 float for Sheets API)
HEADER_BG = {"red": 0.176, "green": 0.310, "blue": 0.576}
HEADER_FG = {"red": 1.0,   "green": 1.0,   "blue": 1.0}


def _make_credentials() -> Credentials:
    return Credentials.from_service_account_info(settings.google_credentials, scopes=SCOPES)


async def export_to_sheets(records: Iterable[PlayerRecord]) -> Optional[str]:
    """
    Replace the "Player Registrations" worksheet with the given rows.
    Returns the spreadsheet URL on success, None if Sheets is not configured.
    """
    if not settings.sheets_enabled:
        logger.warning("Google Sheets export requested but not configured.")
        return None

    agcm = gspread_asyncio.AsyncioGspreadClientManager(_make_credentials)
    agc  = await agcm.authorize()
    spreadsheet = await agc.open_by_key(settings.GOOGLE_SPREADSHEET_ID)

    try:
        worksheet = await spreadsheet.worksheet(SHEET_TITLE)
        await worksheet.clear()
    except WorksheetNotFound:
        worksheet = await spreadsheet.add_worksheet(
            title=SHEET_TITLE, rows=1000, cols=len(EXPORT_HEADERS)
        )

    rows = [EXPORT_HEADERS] + [export_row(r) for r in records]
    rows.append([])
    rows.append([f"Exported: {datetime.now().strftime('%Y-%m-%d %H:%M')}"])

    # gspread 6.x argument order: update(values, range_name)
    await worksheet.update(rows, "A1")

    # Header formatting is cosmetic; a failure here must not fail the export
    try:
        await spreadsheet.batch_update({"requests": [_header_format(worksheet.ws.id)]})
    except Exception as fmt_err:
        logger.warning("Could not apply formatting: %s", fmt_err)

    return f"https://docs.google.com/spreadsheets/d/{settings.GOOGLE_SPREADSHEET_ID}"


def _header_format(sheet_id: int) -> dict:
    """Build a Sheets API repeatCell request for the header row."""
    return {
        "repeatCell": {
            "range": {
                "sheetId":          sheet_id,
                "startRowIndex":    0,
                "endRowIndex":      1,
                "startColumnIndex": 0,
                "endColumnIndex":   len(EXPORT_HEADERS),
            },
            "cell": {
                "userEnteredFormat": {
                    "backgroundColor": HEADER_BG,
                    "textFormat": {"foregroundColor": HEADER_FG, "bold": True},
                }
            },
            "fields": "userEnteredFormat(backgroundColor,textFormat)",
        }
    }
