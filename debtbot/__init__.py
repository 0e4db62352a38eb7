"""Application package for DebtBot.

DebtBot is a Telegram bot that keeps a list of the user's loan payments
("credits") and reminds them the day before each payment is due.  This
package contains configuration, database models, the storage gateway, the
conversation logic and the aiogram handlers.
"""
