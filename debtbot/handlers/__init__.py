"""Package for message handlers.

This subpackage contains the aiogram router that connects Telegram updates
to the bot logic in :mod:`debtbot.commands`.
"""
