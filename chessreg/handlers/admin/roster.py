"""
Admin roster panel: registrations list with filter / sort / paging,
player detail and payment-status updates.

The roster for each admin chat is fetched once and kept in memory; paging,
sorting and filtering work on that copy. It is only replaced by a refresh,
and only patched after the database has confirmed a payment update.
"""
import logging
from typing import Dict

from aiogram import F, Router
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramBadRequest
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message
from sqlalchemy.ext.asyncio import AsyncSession

from chessreg.config import settings
from chessreg.errors import PersistenceError, RosterTableMissing
from chessreg.formatting import player_detail_text, roster_text
from chessreg.keyboards import (
    PlayerCb, RosterCb,
    PICKER_FILTER_FIELDS, TEXT_FILTER_FIELDS,
    filter_input_cancel_kb, filter_menu_kb, filter_values_kb,
    player_detail_kb, roster_error_kb, roster_kb, sort_menu_kb,
)
from chessreg.middlewares import IsAdmin
from chessreg.middlewares.auth_middleware import ROSTER_VIEW_KEY
from chessreg.models.models import PaymentStatus
from chessreg.services import (
    FIELD_LABELS, Roster, RosterPage, RosterView,
    build_roster_page, list_players, unique_values, update_payment_status,
)
from chessreg.states import AdminStates

logger = logging.getLogger(__name__)
router = Router(name="admin_roster")
router.callback_query.filter(F.data.startswith(("ros:", "pl:")), IsAdmin())

UPDATING_KEY = "updating_ids"
FILTER_FIELD_KEY = "filter_field"

# chat_id → that admin's copy of the registrations
_ROSTERS: Dict[int, Roster] = {}


# ── Roster cache ──────────────────────────────────────────────────────────────

async def load_roster(session: AsyncSession, chat_id: int, refresh: bool = False) -> Roster:
    """Return the chat's roster, fetching it from the database when needed."""
    roster = _ROSTERS.get(chat_id)
    if roster is None or refresh:
        players = await list_players(session)
        if roster is None:
            roster = Roster.from_players(players)
        else:
            roster.replace(Roster.from_players(players).records)
        _ROSTERS[chat_id] = roster
        logger.info("Roster loaded for chat %s: %d registrations", chat_id, len(roster.records))
    return roster


def drop_roster(chat_id: int) -> None:
    _ROSTERS.pop(chat_id, None)


async def begin_update(state: FSMContext, player_id: str) -> bool:
    """Mark one record as in flight. False if it already is."""
    data = await state.get_data()
    pending = list(data.get(UPDATING_KEY) or [])
    if player_id in pending:
        return False
    await state.update_data({UPDATING_KEY: pending + [player_id]})
    return True


async def end_update(state: FSMContext, player_id: str) -> None:
    data = await state.get_data()
    pending = [pid for pid in (data.get(UPDATING_KEY) or []) if pid != player_id]
    await state.update_data({UPDATING_KEY: pending})


async def get_view(state: FSMContext) -> RosterView:
    data = await state.get_data()
    return RosterView.from_dict(data.get(ROSTER_VIEW_KEY))


async def save_view(state: FSMContext, view: RosterView) -> None:
    await state.update_data({ROSTER_VIEW_KEY: view.to_dict()})


async def current_page(session: AsyncSession, chat_id: int, state: FSMContext) -> RosterPage:
    """Build the page the admin is looking at; the clamped page is saved back."""
    roster = await load_roster(session, chat_id)
    view = await get_view(state)
    page = build_roster_page(roster.records, view)
    if page.page != view.page:
        view.page = page.page
        await save_view(state, view)
    return page


# ── Rendering ─────────────────────────────────────────────────────────────────

async def _edit(message: Message, text: str, markup: InlineKeyboardMarkup) -> None:
    try:
        await message.edit_text(text, parse_mode=ParseMode.MARKDOWN, reply_markup=markup)
    except TelegramBadRequest as exc:
        # Refresh without changes
        if "message is not modified" not in str(exc):
            raise


async def show_roster(
    message: Message,
    session: AsyncSession,
    state: FSMContext,
    *,
    refresh: bool = False,
    edit: bool = True,
) -> None:
    """Render the roster panel into `message` (edit) or as a new message."""
    try:
        if refresh:
            await load_roster(session, message.chat.id, refresh=True)
        page = await current_page(session, message.chat.id, state)
    except RosterTableMissing:
        text = (
            "⚠️ *Registrations table not found*\n\n"
            "The database has not been set up yet. Run the migrations, then tap Refresh."
        )
        markup = roster_error_kb()
    except PersistenceError:
        text = "❌ Failed to load registrations. Try again in a moment."
        markup = roster_error_kb()
    else:
        view = await get_view(state)
        text = roster_text(page, view)
        markup = roster_kb(page, sheets_enabled=settings.sheets_enabled)

    if edit:
        await _edit(message, text, markup)
    else:
        await message.answer(text, parse_mode=ParseMode.MARKDOWN, reply_markup=markup)


# ── List / refresh / paging ───────────────────────────────────────────────────

@router.callback_query(RosterCb.filter(F.action.in_(("show", "refresh"))))
async def cq_show_roster(
    callback: CallbackQuery,
    callback_data: RosterCb,
    session: AsyncSession,
    state: FSMContext,
) -> None:
    await state.set_state(None)
    await show_roster(callback.message, session, state, refresh=callback_data.action == "refresh")
    await callback.answer("🔄 Refreshed" if callback_data.action == "refresh" else None)


@router.callback_query(RosterCb.filter(F.action == "page"))
async def cq_roster_page(
    callback: CallbackQuery,
    callback_data: RosterCb,
    session: AsyncSession,
    state: FSMContext,
) -> None:
    page = await current_page(session, callback.message.chat.id, state)
    view = await get_view(state)
    view.go_to_page(callback_data.page, page.total_pages)
    if view.page == page.page:
        await callback.answer("No more pages.")
        return
    await save_view(state, view)
    await show_roster(callback.message, session, state)
    await callback.answer()


# ── Sorting ───────────────────────────────────────────────────────────────────

@router.callback_query(RosterCb.filter(F.action == "sort_menu"))
async def cq_sort_menu(callback: CallbackQuery, state: FSMContext) -> None:
    view = await get_view(state)
    await callback.message.edit_text(
        "↕️ *Sort by* — tap the active column again to reverse it:",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=sort_menu_kb(view),
    )
    await callback.answer()


@router.callback_query(RosterCb.filter(F.action == "sort"))
async def cq_sort(
    callback: CallbackQuery,
    callback_data: RosterCb,
    session: AsyncSession,
    state: FSMContext,
) -> None:
    view = await get_view(state)
    try:
        view.toggle_sort(callback_data.field)
    except ValueError:
        await callback.answer("Unknown column.", show_alert=True)
        return
    await save_view(state, view)
    await show_roster(callback.message, session, state)
    await callback.answer()


# ── Filtering ─────────────────────────────────────────────────────────────────

@router.callback_query(RosterCb.filter(F.action == "filter_menu"))
async def cq_filter_menu(callback: CallbackQuery, state: FSMContext) -> None:
    await state.set_state(None)
    view = await get_view(state)
    await callback.message.edit_text(
        "🔎 *Filters* — all active filters must match:",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=filter_menu_kb(view),
    )
    await callback.answer()


@router.callback_query(RosterCb.filter(F.action == "filter_pick"))
async def cq_filter_pick(
    callback: CallbackQuery,
    callback_data: RosterCb,
    session: AsyncSession,
) -> None:
    if callback_data.field not in PICKER_FILTER_FIELDS:
        await callback.answer("Unknown filter.", show_alert=True)
        return
    roster = await load_roster(session, callback.message.chat.id)
    values = unique_values(roster.records, callback_data.field)
    await callback.message.edit_text(
        f"🔽 *{FIELD_LABELS[callback_data.field]}* — choose a value:",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=filter_values_kb(callback_data.field, values),
    )
    await callback.answer()


@router.callback_query(RosterCb.filter(F.action == "filter_set"))
async def cq_filter_set(
    callback: CallbackQuery,
    callback_data: RosterCb,
    session: AsyncSession,
    state: FSMContext,
) -> None:
    view = await get_view(state)
    try:
        view.set_filter(callback_data.field, callback_data.value)
    except ValueError:
        await callback.answer("Unknown filter.", show_alert=True)
        return
    await save_view(state, view)
    await show_roster(callback.message, session, state)
    await callback.answer()


@router.callback_query(RosterCb.filter(F.action == "filter_clear"))
async def cq_filter_clear(
    callback: CallbackQuery,
    session: AsyncSession,
    state: FSMContext,
) -> None:
    view = await get_view(state)
    view.clear_filters()
    await save_view(state, view)
    await show_roster(callback.message, session, state)
    await callback.answer("🧹 Filters cleared")


@router.callback_query(RosterCb.filter(F.action == "filter_text"))
async def cq_filter_text(
    callback: CallbackQuery,
    callback_data: RosterCb,
    state: FSMContext,
) -> None:
    if callback_data.field not in TEXT_FILTER_FIELDS:
        await callback.answer("Unknown filter.", show_alert=True)
        return
    await state.update_data({FILTER_FIELD_KEY: callback_data.field})
    await state.set_state(AdminStates.enter_filter)
    await callback.message.edit_text(
        f"✏️ Type part of the *{FIELD_LABELS[callback_data.field]}* to search for.\n"
        f"_Send_ `-` _to clear this filter._",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=filter_input_cancel_kb(),
    )
    await callback.answer()


@router.message(AdminStates.enter_filter, IsAdmin())
async def msg_filter_text(message: Message, session: AsyncSession, state: FSMContext) -> None:
    data = await state.get_data()
    field_name = data.get(FILTER_FIELD_KEY)
    pattern = (message.text or "").strip()
    if pattern == "-":
        pattern = ""

    view = await get_view(state)
    try:
        view.set_filter(field_name, pattern)
    except ValueError:
        await state.set_state(None)
        await message.answer("⚠️ Filter expired. Open the filter menu again.")
        return

    await save_view(state, view)
    await state.set_state(None)
    await show_roster(message, session, state, edit=False)


# ── Player detail / payment status ───────────────────────────────────────────

@router.callback_query(PlayerCb.filter(F.action == "view"))
async def cq_player_view(
    callback: CallbackQuery,
    callback_data: PlayerCb,
    session: AsyncSession,
) -> None:
    roster = await load_roster(session, callback.message.chat.id)
    record = roster.get(callback_data.pid)
    if record is None:
        await callback.answer("Registration not found. Tap Refresh.", show_alert=True)
        return
    await callback.message.edit_text(
        player_detail_text(record),
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=player_detail_kb(record.id, record.payment_status),
    )
    await callback.answer()


@router.callback_query(PlayerCb.filter(F.action == "pay"))
async def cq_player_pay(
    callback: CallbackQuery,
    callback_data: PlayerCb,
    session: AsyncSession,
    state: FSMContext,
) -> None:
    roster = await load_roster(session, callback.message.chat.id)
    record = roster.get(callback_data.pid)
    if record is None:
        await callback.answer("Registration not found. Tap Refresh.", show_alert=True)
        return
    if callback_data.status == record.payment_status:
        await callback.answer("Already set.")
        return

    if not await begin_update(state, record.id):
        await callback.answer("⏳ Update in progress for this player…")
        return
    try:
        await update_payment_status(session, record.id, callback_data.status)
    except PersistenceError as exc:
        logger.warning("Payment update for %s failed: %s", record.id, exc)
        await callback.answer("❌ Failed to update payment status.", show_alert=True)
        return
    finally:
        await end_update(state, record.id)

    roster.patch_status(record.id, callback_data.status)
    record = roster.get(record.id)
    await callback.message.edit_text(
        player_detail_text(record),
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=player_detail_kb(record.id, record.payment_status),
    )
    await callback.answer(f"✅ {PaymentStatus.label(record.payment_status)}")
