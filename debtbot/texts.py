"""User-facing texts and message formatting.

All messages are sent with Telegram's HTML parse mode, so anything the user
typed (bank names) is escaped before it is embedded.
"""

from __future__ import annotations

from typing import Iterable

from aiogram.utils.markdown import hbold
from aiogram.utils.text_decorations import html_decoration

from .models import Credit

# Menu button labels.  They double as commands when sent back as text.
BTN_ADD = "➕ Добавить кредит"
BTN_LIST = "💶 Мои кредиты"
BTN_DELETE = "➖ Удалить кредит"
BTN_HELP = "🆘 Помощь"

HELP = "\n".join([
    "Привет! Я бот для учета твоих кредитов.",
    "За день до даты платежа я пришлю напоминание.",
    "",
    "<b>Доступные команды:</b>",
    "/addcredit – добавить кредит",
    "/mycredits – список ваших кредитов",
    "/deletecredit – удалить кредит",
    "/help – вывести эту справку",
    "",
    "Выберите действие:",
])

UNKNOWN_INPUT = "Неизвестная команда. Нажмите «🆘 Помощь» или отправьте /help."
GENERIC_ERROR = "Произошла ошибка, попробуйте еще раз."

ASK_BANK = "Введите название банка:"
ASK_AMOUNT = "Введите сумму кредита:"
BAD_AMOUNT = "Некорректная сумма. Введите число, например, 10000.50"
ASK_DUE_DATE = "Введите дату платежа в формате ГГГГ-ММ-ДД (например, 2024-12-31):"
BAD_DUE_DATE = "Некорректный формат даты. Используйте ГГГГ-ММ-ДД (например, 2024-12-31)"
CREDIT_SAVED = "Кредит успешно добавлен!"
CREDIT_SAVE_FAILED = "Ошибка при сохранении кредита. Попробуйте еще раз."

NO_CREDITS = "У вас пока нет добавленных кредитов. Используйте /addcredit чтобы добавить."
LIST_FAILED = "Ошибка при получении списка кредитов."

NOTHING_TO_DELETE = "У вас нет кредитов для удаления. Используйте /addcredit чтобы добавить."
DELETE_LIST_FAILED = "Ошибка при получении списка кредитов для удаления."
ASK_NUMBER = "Пожалуйста, введите номер кредита для удаления."
BAD_NUMBER = "Неверный номер кредита. Пожалуйста, выберите номер из списка."
CREDIT_DELETED = "Кредит успешно удален!"
CREDIT_DELETE_FAILED = "Ошибка при удалении кредита. Попробуйте еще раз."


def fmt_amount(credit: Credit) -> str:
    return f"{credit.loan_amount:.2f} ₽"


def fmt_date(credit: Credit) -> str:
    return credit.due_date.strftime("%d.%m.%Y")


def credit_list(credits: Iterable[Credit]) -> str:
    """Render the ``/mycredits`` reply."""
    lines = [hbold("Ваши кредиты:"), ""]
    for c in credits:
        lines.append(f"🏦 <b>Банк:</b> {html_decoration.quote(c.bank_name)}")
        lines.append(f"💰 <b>Сумма кредита:</b> {fmt_amount(c)}")
        lines.append(f"📅 <b>Дата платежа:</b> {fmt_date(c)}")
        lines.append("---")
    return "\n".join(lines)


def delete_choices(credits: Iterable[Credit]) -> str:
    """Render the numbered list the user picks a credit to delete from.

    Numbers start at 1 and follow the order of ``credits``.
    """
    lines = ["Выберите номер кредита для удаления:", ""]
    for i, c in enumerate(credits, start=1):
        lines.append(
            f"{i}. 🏦 <b>Банк:</b> {html_decoration.quote(c.bank_name)}, "
            f"💰 <b>Сумма кредита:</b> {fmt_amount(c)}, "
            f"📅 <b>Дата платежа:</b> {fmt_date(c)}"
        )
    lines.append("")
    lines.append("Отправьте номер кредита.")
    return "\n".join(lines)


def reminder(credit: Credit) -> str:
    """Render the day-before payment reminder."""
    return (
        f"🔔 {hbold('Напоминание о платеже по кредиту!')}\n\n"
        f"Банк: {html_decoration.quote(credit.bank_name)}\n"
        f"Сумма: {fmt_amount(credit)}\n"
        f"Дата платежа: {fmt_date(credit)}\n\n"
        "Не забудьте оплатить кредит завтра!"
    )
