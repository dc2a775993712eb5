"""
Admin export handler — .xlsx download of the current roster view, plus the
optional Google Sheets mirror.

Both exports carry every row that passes the active filters, in the active
sort order, not just the page on screen.
"""
import logging
from datetime import date

from aiogram import F, Router
from aiogram.enums import ParseMode
from aiogram.fsm.context import FSMContext
from aiogram.types import BufferedInputFile, CallbackQuery
from sqlalchemy.ext.asyncio import AsyncSession

from chessreg.handlers.admin.roster import current_page
from chessreg.keyboards import RosterCb
from chessreg.middlewares import IsAdmin
from chessreg.services import build_export, export_to_sheets

logger = logging.getLogger(__name__)
router = Router(name="admin_export")
router.callback_query.filter(F.data.startswith("ros:"), IsAdmin())


@router.callback_query(RosterCb.filter(F.action == "export"))
async def cq_export_xlsx(
    callback: CallbackQuery,
    session: AsyncSession,
    state: FSMContext,
) -> None:
    page = await current_page(session, callback.message.chat.id, state)
    if not page.visible:
        await callback.answer("Nothing to export.", show_alert=True)
        return

    await callback.answer("⏳ Preparing export…")
    filename, payload = build_export(page.visible, date.today())
    await callback.message.answer_document(
        BufferedInputFile(payload, filename=filename),
        caption=f"📥 {len(page.visible)} registrations",
    )
    logger.info("Exported %d registrations to %s", len(page.visible), filename)


@router.callback_query(RosterCb.filter(F.action == "sheets"))
async def cq_export_sheets(
    callback: CallbackQuery,
    session: AsyncSession,
    state: FSMContext,
) -> None:
    await callback.answer("⏳ Exporting…")
    page = await current_page(session, callback.message.chat.id, state)

    try:
        url = await export_to_sheets(page.visible)
    except Exception as e:
        logger.exception("Sheets export failed: %s", e)
        await callback.message.answer("❌ Google Sheets export failed. Check the logs.")
        return

    if url:
        await callback.message.answer(
            f"✅ *Export complete!*\n\n📊 [Open spreadsheet]({url})",
            parse_mode=ParseMode.MARKDOWN,
        )
    else:
        await callback.message.answer(
            "⚠️ Google Sheets is not configured. Set GOOGLE\\_CREDENTIALS\\_JSON and GOOGLE\\_SPREADSHEET\\_ID."
        )
