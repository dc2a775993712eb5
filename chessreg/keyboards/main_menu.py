"""
Landing-page keyboards: the bot's equivalent of the site navigation bar.
"""
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from chessreg.keyboards.callbacks import MainMenuCb


def landing_menu() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="♟ Register Now",      callback_data=MainMenuCb(action="register").pack()),
    )
    builder.row(
        InlineKeyboardButton(text="📅 Details",          callback_data=MainMenuCb(action="details").pack()),
        InlineKeyboardButton(text="🏆 Prizes",           callback_data=MainMenuCb(action="prizes").pack()),
    )
    builder.row(
        InlineKeyboardButton(text="💳 Payment",          callback_data=MainMenuCb(action="payment").pack()),
    )
    return builder.as_markup()


def back_to_main() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="♟ Register Now", callback_data=MainMenuCb(action="register").pack()),
    )
    builder.row(InlineKeyboardButton(text="🔙 Main menu", callback_data=MainMenuCb(action="main").pack()))
    return builder.as_markup()
