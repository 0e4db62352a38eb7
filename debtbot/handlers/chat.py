"""Telegram side of the bot.

Every text message is passed to the :class:`~debtbot.commands.CommandDispatcher`
registered on the aiogram dispatcher under the ``commands`` key; the replies
it returns are sent back here.  A failed send is logged and dropped.
"""

from __future__ import annotations

import logging

from aiogram import Router, F
from aiogram.exceptions import TelegramAPIError
from aiogram.types import Message

from ..commands import CommandDispatcher, IncomingMessage
from ..flow import Reply
from ..keyboards import main_menu_kb

logger = logging.getLogger(__name__)

router = Router()


async def deliver(message: Message, reply: Reply) -> None:
    markup = main_menu_kb() if reply.menu else None
    try:
        if reply.quote:
            await message.reply(reply.text, reply_markup=markup)
        else:
            await message.answer(reply.text, reply_markup=markup)
    except TelegramAPIError:
        logger.exception("Could not send reply to chat %s", message.chat.id)


@router.message(F.text)
async def text_handler(message: Message, commands: CommandDispatcher) -> None:
    """Handle any text message: commands, menu buttons and form answers."""
    incoming = IncomingMessage(
        user_id=message.from_user.id,
        chat_id=message.chat.id,
        text=message.text,
    )
    for reply in await commands.handle(incoming):
        await deliver(message, reply)
