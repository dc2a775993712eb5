"""
Keyboards for the player registration FSM flow.
"""
from typing import Optional

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from chessreg.keyboards.callbacks import MainMenuCb, RegistrationCb
from chessreg.models.models import Gender


def _cancel_button() -> InlineKeyboardButton:
    return InlineKeyboardButton(text="❌ Cancel", callback_data=MainMenuCb(action="main").pack())


def cancel_registration_kb() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(_cancel_button())
    return builder.as_markup()


def skip_fide_kb() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(
            text="⏭ I don't have a FIDE ID",
            callback_data=RegistrationCb(action="skip_fide").pack(),
        )
    )
    builder.row(_cancel_button())
    return builder.as_markup()


def gender_kb() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(*[
        InlineKeyboardButton(
            text=f"{Gender.EMOJI[g]} {g}",
            callback_data=RegistrationCb(action="gender", value=g).pack(),
        )
        for g in (Gender.MALE, Gender.FEMALE)
    ])
    builder.row(
        InlineKeyboardButton(
            text=f"{Gender.EMOJI[Gender.UNSPECIFIED]} {Gender.UNSPECIFIED}",
            callback_data=RegistrationCb(action="gender", value=Gender.UNSPECIFIED).pack(),
        )
    )
    builder.row(_cancel_button())
    return builder.as_markup()


def confirm_registration_kb() -> InlineKeyboardMarkup:
    """The confirm button doubles as the 'details are correct' checkbox."""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(
            text="✅ I confirm the details are correct",
            callback_data=RegistrationCb(action="confirm").pack(),
        )
    )
    builder.row(
        InlineKeyboardButton(text="✏️ Edit", callback_data=RegistrationCb(action="edit").pack()),
        _cancel_button(),
    )
    return builder.as_markup()


def retry_registration_kb() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="🔁 Try again", callback_data=RegistrationCb(action="retry").pack()),
    )
    builder.row(
        InlineKeyboardButton(text="✏️ Edit", callback_data=RegistrationCb(action="edit").pack()),
        _cancel_button(),
    )
    return builder.as_markup()


def registration_success_kb(whatsapp_url: Optional[str] = None) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    if whatsapp_url:
        builder.row(InlineKeyboardButton(text="💬 Join WhatsApp Group", url=whatsapp_url))
    builder.row(
        InlineKeyboardButton(
            text="➕ Register Another Player",
            callback_data=RegistrationCb(action="another").pack(),
        )
    )
    builder.row(InlineKeyboardButton(text="🏠 Main menu", callback_data=MainMenuCb(action="main").pack()))
    return builder.as_markup()
