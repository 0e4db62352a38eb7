"""Routing of incoming messages.

:class:`CommandDispatcher` is the single entry point for user text.  It
decides whether a message is one of the bot's commands (typed as a slash
command or sent by pressing a menu button), an answer to a form the user is
filling in, or something the bot does not understand.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from . import texts
from .errors import StorageError
from .flow import CreditInputFlow, Reply
from .sessions import ConversationSession, CreditForm, DeleteForm, SessionStore
from .storage import CreditStorage

logger = logging.getLogger(__name__)


class Command(enum.Enum):
    HELP = "help"
    ADD_CREDIT = "addcredit"
    LIST_CREDITS = "mycredits"
    DELETE_CREDIT = "deletecredit"


_SLASH_COMMANDS = {
    "start": Command.HELP,
    "help": Command.HELP,
    "addcredit": Command.ADD_CREDIT,
    "mycredits": Command.LIST_CREDITS,
    "deletecredit": Command.DELETE_CREDIT,
}


def _strip_emoji(label: str) -> str:
    return label.split(" ", 1)[1]


_BUTTONS = {
    texts.BTN_HELP: Command.HELP,
    texts.BTN_ADD: Command.ADD_CREDIT,
    texts.BTN_LIST: Command.LIST_CREDITS,
    texts.BTN_DELETE: Command.DELETE_CREDIT,
}
# Labels typed by hand usually come without the emoji.
_BUTTONS.update({_strip_emoji(label): cmd for label, cmd in list(_BUTTONS.items())})


def resolve_command(text: str) -> Optional[Command]:
    """Map a slash command or a menu button label to a :class:`Command`.

    ``/help``, ``/HELP``, ``/help@SomeBot`` and ``/help extra words`` all
    resolve to :attr:`Command.HELP`.  Returns ``None`` for anything else.
    """
    text = text.strip()
    if text.startswith("/"):
        token = text.split(maxsplit=1)[0][1:]
        name = token.split("@", 1)[0].lower()
        return _SLASH_COMMANDS.get(name)
    return _BUTTONS.get(text)


@dataclass
class IncomingMessage:
    """The parts of a chat message the bot logic needs."""

    user_id: int
    chat_id: int
    text: str


class CommandDispatcher:
    def __init__(self, storage: CreditStorage, sessions: SessionStore, flow: Optional[CreditInputFlow] = None) -> None:
        self._storage = storage
        self._sessions = sessions
        self._flow = flow or CreditInputFlow(storage, sessions)
        self._handlers = {
            Command.HELP: self.help,
            Command.ADD_CREDIT: self.add_credit,
            Command.LIST_CREDITS: self.list_credits,
            Command.DELETE_CREDIT: self.delete_credit,
        }

    async def handle(self, message: IncomingMessage) -> list[Reply]:
        """Process one message and return the replies to send, possibly none.

        Commands always win over a form in progress, which lets a user
        abandon a form by issuing any command.
        """
        try:
            await self._storage.create_user_if_absent(message.user_id)
        except StorageError:
            logger.exception("Could not register user %s", message.user_id)

        text = message.text.strip()
        command = resolve_command(text)
        if command is not None:
            logger.info("User %s: command %s", message.user_id, command.value)
            return [await self._handlers[command](message.user_id)]

        session = await self._sessions.get(message.user_id)
        if session is not None:
            return [await self._flow.handle(message.user_id, session, message.text)]

        if not text.startswith("/"):
            logger.debug("User %s: unrecognised input", message.user_id)
            return [Reply(texts.UNKNOWN_INPUT)]

        logger.debug("User %s: ignoring unknown command %r", message.user_id, message.text)
        return []

    async def help(self, user_id: int) -> Reply:
        return Reply(texts.HELP, menu=True)

    async def add_credit(self, user_id: int) -> Reply:
        """Start the add-credit form, replacing any unfinished one."""
        await self._sessions.put(user_id, ConversationSession(step=CreditForm.bank_name))
        return Reply(texts.ASK_BANK)

    async def list_credits(self, user_id: int) -> Reply:
        try:
            credits = await self._storage.list_credits(user_id)
        except StorageError:
            logger.exception("Could not list credits for user %s", user_id)
            return Reply(texts.LIST_FAILED)
        if not credits:
            return Reply(texts.NO_CREDITS)
        return Reply(texts.credit_list(credits))

    async def delete_credit(self, user_id: int) -> Reply:
        """Show the numbered list of credits and wait for the user's pick.

        The IDs are remembered in the order they were shown so that the
        number the user sends back maps to the row they saw.
        """
        try:
            credits = await self._storage.list_credits(user_id)
        except StorageError:
            logger.exception("Could not list credits for user %s", user_id)
            return Reply(texts.DELETE_LIST_FAILED)
        if not credits:
            return Reply(texts.NOTHING_TO_DELETE)
        await self._sessions.put(
            user_id,
            ConversationSession(step=DeleteForm.choice, candidates=[c.id for c in credits]),
        )
        return Reply(texts.delete_choices(credits))
