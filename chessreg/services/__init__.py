from chessreg.services.player_service import (
    insert_player, list_players, get_player, update_payment_status,
    is_missing_table_error,
)
from chessreg.services.registration_service import (
    submit_registration, derive_age_category, make_reference_number,
)
from chessreg.services.roster_service import (
    PAGE_SIZE, ASC, DESC, SORTABLE_FIELDS, FIELD_LABELS,
    PlayerRecord, Roster, RosterView, RosterPage, RosterStats,
    filter_records, sort_records, paginate, compute_stats, unique_values,
    build_roster_page,
)
from chessreg.services.export_service import build_export, export_filename, EXPORT_HEADERS
from chessreg.services.sheets_service import export_to_sheets
from chessreg.services.qr_service import generate_qr_png, ticket_payload

__all__ = [
    # store
    "insert_player", "list_players", "get_player", "update_payment_status",
    "is_missing_table_error",
    # registration pipeline
    "submit_registration", "derive_age_category", "make_reference_number",
    # roster engine
    "PAGE_SIZE", "ASC", "DESC", "SORTABLE_FIELDS", "FIELD_LABELS",
    "PlayerRecord", "Roster", "RosterView", "RosterPage", "RosterStats",
    "filter_records", "sort_records", "paginate", "compute_stats", "unique_values",
    "build_roster_page",
    # export
    "build_export", "export_filename", "EXPORT_HEADERS",
    "export_to_sheets",
    # QR
    "generate_qr_png", "ticket_payload",
]
