"""Configuration for DebtBot.

This module loads environment variables from a ``.env`` file via python-dotenv
and exposes a single ``settings`` instance with all configuration values.

Examples
--------

Set up a ``.env`` file in the project root with at least the following values::

    BOT_TOKEN=123456:ABC-DEF1234ghIkl-zyx57W2v1u123ew11
    DB_NAME=debtbot.db

``NOTIFY_HOUR``, ``SESSION_TTL_MINUTES`` and ``LOG_LEVEL`` are optional.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

# Load .env at import time so that ``settings`` below sees the values.
load_dotenv()


def _int_env(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to ``default``.

    Empty or malformed values are treated as unset.
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    """Simple dataclass for accessing application configuration."""

    BOT_TOKEN: str = os.getenv("BOT_TOKEN", "")
    # Path to the SQLite file.
    DB_NAME: str = os.getenv("DB_NAME", "") or "debtbot.db"
    # Local hour at which the daily payment reminders go out.
    NOTIFY_HOUR: int = _int_env("NOTIFY_HOUR", 9)
    # Unfinished forms are dropped after this many idle minutes; 0 keeps them forever.
    SESSION_TTL_MINUTES: int = _int_env("SESSION_TTL_MINUTES", 30)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def database_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.DB_NAME}"


settings = Settings()
