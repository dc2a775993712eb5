"""
Keyboards for the admin roster panel: paging, sort, filters, player detail.
"""
from typing import List

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from chessreg.keyboards.callbacks import MainMenuCb, PlayerCb, RosterCb
from chessreg.models.models import PaymentStatus
from chessreg.services.roster_service import (
    ASC, FIELD_LABELS, SORTABLE_FIELDS, RosterPage, RosterView,
)

# Free-text filters vs. pick-from-existing-values filters
TEXT_FILTER_FIELDS   = ("full_name", "reference_number")
PICKER_FILTER_FIELDS = ("gender", "age_category", "payment_status")


def _back_to_roster() -> InlineKeyboardButton:
    return InlineKeyboardButton(text="🔙 Back to roster", callback_data=RosterCb(action="show").pack())


def password_cancel_kb() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(InlineKeyboardButton(text="❌ Cancel", callback_data=MainMenuCb(action="main").pack()))
    return builder.as_markup()


def roster_kb(page: RosterPage, sheets_enabled: bool = False) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()

    # One button per visible row → player detail
    for i, r in enumerate(page.rows, start=page.first_index):
        builder.row(
            InlineKeyboardButton(
                text=f"{i}. {PaymentStatus.EMOJI.get(r.payment_status, '❓')} {r.full_name}",
                callback_data=PlayerCb(action="view", pid=r.id).pack(),
            )
        )

    if page.total_pages > 1:
        builder.row(
            InlineKeyboardButton(
                text="◀️",
                callback_data=RosterCb(action="page", page=page.page - 1).pack(),
            ),
            InlineKeyboardButton(text=f"{page.page}/{page.total_pages}", callback_data="noop"),
            InlineKeyboardButton(
                text="▶️",
                callback_data=RosterCb(action="page", page=page.page + 1).pack(),
            ),
        )

    builder.row(
        InlineKeyboardButton(text="↕️ Sort",    callback_data=RosterCb(action="sort_menu").pack()),
        InlineKeyboardButton(text="🔎 Filter",  callback_data=RosterCb(action="filter_menu").pack()),
    )
    export_row = [InlineKeyboardButton(text="📥 Export Excel", callback_data=RosterCb(action="export").pack())]
    if sheets_enabled:
        export_row.append(
            InlineKeyboardButton(text="📊 Google Sheets", callback_data=RosterCb(action="sheets").pack())
        )
    builder.row(*export_row)
    builder.row(
        InlineKeyboardButton(text="🔄 Refresh", callback_data=RosterCb(action="refresh").pack()),
        InlineKeyboardButton(text="🚪 Logout",  callback_data=RosterCb(action="logout").pack()),
    )
    return builder.as_markup()


def sort_menu_kb(view: RosterView) -> InlineKeyboardMarkup:
    """One button per sortable column; the active one shows its direction."""
    builder = InlineKeyboardBuilder()
    buttons = []
    for name in SORTABLE_FIELDS:
        if name == view.sort_field:
            marker = "▲" if view.sort_direction == ASC else "▼"
        else:
            marker = "↕️"
        buttons.append(
            InlineKeyboardButton(
                text=f"{FIELD_LABELS.get(name, name)} {marker}",
                callback_data=RosterCb(action="sort", field=name).pack(),
            )
        )
    # 2 per row
    for i in range(0, len(buttons), 2):
        builder.row(*buttons[i:i + 2])
    builder.row(_back_to_roster())
    return builder.as_markup()


def filter_menu_kb(view: RosterView) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    for name in TEXT_FILTER_FIELDS:
        current = view.filters.get(name)
        builder.row(
            InlineKeyboardButton(
                text=f"✏️ {FIELD_LABELS[name]}" + (f": {current}" if current else ""),
                callback_data=RosterCb(action="filter_text", field=name).pack(),
            )
        )
    for name in PICKER_FILTER_FIELDS:
        current = view.filters.get(name)
        builder.row(
            InlineKeyboardButton(
                text=f"🔽 {FIELD_LABELS[name]}" + (f": {current}" if current else ""),
                callback_data=RosterCb(action="filter_pick", field=name).pack(),
            )
        )
    if view.filters:
        builder.row(
            InlineKeyboardButton(text="🧹 Clear all filters", callback_data=RosterCb(action="filter_clear").pack())
        )
    builder.row(_back_to_roster())
    return builder.as_markup()


def filter_values_kb(field_name: str, values: List[str]) -> InlineKeyboardMarkup:
    """Distinct values present in the roster, plus an 'All' reset."""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(
            text="✳️ All",
            callback_data=RosterCb(action="filter_set", field=field_name, value="").pack(),
        )
    )
    buttons = [
        InlineKeyboardButton(
            text=PaymentStatus.label(v) if field_name == "payment_status" else v,
            callback_data=RosterCb(action="filter_set", field=field_name, value=v).pack(),
        )
        for v in values
    ]
    for i in range(0, len(buttons), 2):
        builder.row(*buttons[i:i + 2])
    builder.row(
        InlineKeyboardButton(text="🔙 Filters", callback_data=RosterCb(action="filter_menu").pack())
    )
    return builder.as_markup()


def filter_input_cancel_kb() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="❌ Cancel", callback_data=RosterCb(action="filter_menu").pack())
    )
    return builder.as_markup()


def player_detail_kb(pid: str, current_status: str) -> InlineKeyboardMarkup:
    """Payment status switcher; the current status is marked."""
    builder = InlineKeyboardBuilder()
    for status in PaymentStatus.ALL:
        mark = "✔️ " if status == current_status else ""
        builder.row(
            InlineKeyboardButton(
                text=f"{mark}{PaymentStatus.EMOJI[status]} {PaymentStatus.label(status)}",
                callback_data=PlayerCb(action="pay", pid=pid, status=status).pack(),
            )
        )
    builder.row(_back_to_roster())
    return builder.as_markup()


def roster_error_kb() -> InlineKeyboardMarkup:
    """Shown instead of the roster when it could not be loaded."""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="🔄 Refresh", callback_data=RosterCb(action="refresh").pack()),
        InlineKeyboardButton(text="🚪 Logout",  callback_data=RosterCb(action="logout").pack()),
    )
    return builder.as_markup()
