"""Reply keyboard utilities for DebtBot."""

from aiogram.utils.keyboard import ReplyKeyboardBuilder
from aiogram.types import ReplyKeyboardMarkup

from .texts import BTN_ADD, BTN_DELETE, BTN_HELP, BTN_LIST


def main_menu_kb() -> ReplyKeyboardMarkup:
    """Return the persistent two-by-two menu with the four bot commands."""
    kb = ReplyKeyboardBuilder()
    kb.button(text=BTN_ADD)
    kb.button(text=BTN_LIST)
    kb.button(text=BTN_DELETE)
    kb.button(text=BTN_HELP)
    kb.adjust(2)
    return kb.as_markup(resize_keyboard=True, is_persistent=True)
