"""
Common handlers: /start landing message, Details / Prizes / Payment sections,
main menu routing.
"""
import logging

from aiogram import F, Router
from aiogram.enums import ParseMode
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from chessreg.config import settings
from chessreg.formatting import md
from chessreg.keyboards import MainMenuCb, back_to_main, landing_menu
from chessreg.middlewares.auth_middleware import reset_flow

logger = logging.getLogger(__name__)
router = Router(name="common")


def landing_text() -> str:
    return (
        f"♟ *{md(settings.TOURNAMENT_NAME)}* — {md(settings.TOURNAMENT_SEASON)}\n"
        f"_Register now!_\n\n"
        f"📅 {md(settings.TOURNAMENT_DATES)}\n"
        f"🕗 {md(settings.TOURNAMENT_TIME)}\n"
        f"📍 {md(settings.TOURNAMENT_VENUE)}\n"
        f"💵 Entry Fee: *{md(settings.ENTRY_FEE)}*\n\n"
        f"Grand Prize Awaits! 🏆\n\n"
        f"_Organisers: /admin_"
    )


def details_text() -> str:
    return (
        "📅 *Tournament Details*\n\n"
        f"*Date:* {md(settings.TOURNAMENT_DATES)}\n"
        f"*Time:* {md(settings.TOURNAMENT_TIME)} Start\n"
        f"*Venue:* {md(settings.TOURNAMENT_VENUE)}\n"
        f"*Organizer:* {md(settings.ORGANIZER)}\n\n"
        "📞 *Contact Information*\n"
        f"{md(settings.CONTACT_PHONE)}\n"
        f"{md(settings.CONTACT_EMAIL)}"
    )


def prizes_text() -> str:
    return (
        "🏆 *Prizes & Recognition*\n\n"
        "🥇 1st Place — Champion + Medal\n"
        "🥈 2nd Place — Champion + Medal\n"
        "🥉 3rd Place — Champion + Medal\n"
        "🏅 4th & 5th Place — Medal\n"
        "📜 All Participants — Certificate of Participation"
    )


def payment_text() -> str:
    return (
        "🏦 *Bank Details*\n\n"
        f"*{md(settings.PAYEE_B_BANK)}*\n"
        f"Name: {md(settings.PAYEE_B_NAME)}\n"
        f"Branch: {md(settings.PAYEE_B_BRANCH)}\n"
        f"Account: `{settings.PAYEE_B_ACCOUNT}`\n\n"
        f"*{md(settings.PAYEE_A_BANK)}*\n"
        f"Name: {md(settings.PAYEE_A_NAME)}\n"
        f"Branch: {md(settings.PAYEE_A_BRANCH)}\n"
        f"Account: `{settings.PAYEE_A_ACCOUNT}`\n\n"
        "⚠️ *Important:* Keep your deposit slip or payment reference number."
    )


SECTIONS = {
    "details": details_text,
    "prizes":  prizes_text,
    "payment": payment_text,
}


# ── /start ────────────────────────────────────────────────────────────────────

@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext) -> None:
    await reset_flow(state)
    await message.answer(landing_text(), parse_mode=ParseMode.MARKDOWN, reply_markup=landing_menu())


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(
        "/start — tournament information\n"
        "/register — register a player\n"
        "/admin — organiser panel\n"
        "/logout — leave the organiser panel"
    )


# ── Main menu callbacks ───────────────────────────────────────────────────────

@router.callback_query(MainMenuCb.filter(F.action == "main"))
async def cq_main_menu(callback: CallbackQuery, state: FSMContext) -> None:
    await reset_flow(state)
    await callback.message.edit_text(
        landing_text(), parse_mode=ParseMode.MARKDOWN, reply_markup=landing_menu()
    )
    await callback.answer()


@router.callback_query(MainMenuCb.filter(F.action.in_(tuple(SECTIONS))))
async def cq_section(callback: CallbackQuery, callback_data: MainMenuCb) -> None:
    text = SECTIONS[callback_data.action]()
    await callback.message.edit_text(text, parse_mode=ParseMode.MARKDOWN, reply_markup=back_to_main())
    await callback.answer()


@router.callback_query(F.data == "noop")
async def cq_noop(callback: CallbackQuery) -> None:
    await callback.answer()
