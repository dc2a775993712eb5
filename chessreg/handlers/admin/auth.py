"""
Admin sign-in / sign-out.

/admin asks for the shared password (the message carrying it is deleted),
then opens the roster panel. /logout or the Logout button ends the session.
"""
import logging

from aiogram import F, Router
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession

from chessreg.handlers.admin.roster import drop_roster, show_roster
from chessreg.keyboards import RosterCb, landing_menu, password_cancel_kb
from chessreg.middlewares.auth_middleware import (
    check_password, end_admin_session, reset_flow, start_admin_session,
)
from chessreg.states import AdminStates

logger = logging.getLogger(__name__)
router = Router(name="admin_auth")


@router.message(Command("admin"))
async def cmd_admin(
    message: Message,
    session: AsyncSession,
    state: FSMContext,
    is_admin: bool = False,
) -> None:
    await reset_flow(state)
    if is_admin:
        await show_roster(message, session, state, refresh=True, edit=False)
        return

    # Roster left over from a session that was lost without /logout
    drop_roster(message.chat.id)
    await state.set_state(AdminStates.enter_password)
    await message.answer(
        "🔐 *Admin Login*\n\nEnter the admin password:",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=password_cancel_kb(),
    )


@router.message(AdminStates.enter_password)
async def msg_admin_password(message: Message, session: AsyncSession, state: FSMContext) -> None:
    candidate = (message.text or "").strip()

    # The password should not stay in the chat history
    try:
        await message.delete()
    except TelegramAPIError as exc:
        logger.debug("Could not delete password message: %s", exc)

    if not check_password(candidate):
        logger.info("Failed admin login from user %s", message.from_user.id)
        await message.answer("❌ Incorrect password. Try again:", reply_markup=password_cancel_kb())
        return

    await start_admin_session(state)
    logger.info("Admin session started for user %s", message.from_user.id)
    await message.answer("✅ Signed in.")
    await show_roster(message, session, state, refresh=True, edit=False)


async def _logout(message: Message, state: FSMContext) -> None:
    await end_admin_session(state)
    drop_roster(message.chat.id)


@router.message(Command("logout"))
async def cmd_logout(message: Message, state: FSMContext) -> None:
    await _logout(message, state)
    await message.answer("🚪 Logged out.", reply_markup=landing_menu())


@router.callback_query(RosterCb.filter(F.action == "logout"))
async def cq_logout(callback: CallbackQuery, state: FSMContext) -> None:
    await _logout(callback.message, state)
    await callback.message.edit_text("🚪 Logged out.", reply_markup=landing_menu())
    await callback.answer()
