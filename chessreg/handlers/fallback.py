"""
Global fallback handler — included LAST in the dispatcher.

Callbacks no other router handled:
  - admin buttons pressed without a signed-in session → "session expired"
  - stale keyboards after a restart (MemoryStorage is wiped on redeploy)

Messages no other router handled get the "page not found" reply with the
landing menu.
"""
import logging

from aiogram import F, Router
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from chessreg.handlers.admin.roster import drop_roster
from chessreg.keyboards import landing_menu
from chessreg.middlewares.auth_middleware import reset_flow

logger = logging.getLogger(__name__)
router = Router(name="fallback")


@router.callback_query(F.data.startswith(("ros:", "pl:")))
async def cq_admin_expired(callback: CallbackQuery, state: FSMContext) -> None:
    await callback.answer("🔒 Session expired. Send /admin to sign in.", show_alert=True)
    await reset_flow(state)
    drop_roster(callback.message.chat.id)


@router.callback_query()
async def cq_fallback(callback: CallbackQuery, state: FSMContext) -> None:
    await callback.answer("⚠️ Button expired. Please start again.", show_alert=True)
    await reset_flow(state)
    try:
        await callback.message.edit_text(
            "🔄 *Session reset.* Back to the main menu:",
            parse_mode=ParseMode.MARKDOWN,
            reply_markup=landing_menu(),
        )
    except TelegramAPIError as exc:
        logger.debug("Fallback edit failed: %s", exc)


@router.message()
async def msg_not_found(message: Message) -> None:
    await message.answer(
        "🤷 *Page not found*\n\nUse the menu below or send /start.",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=landing_menu(),
    )
