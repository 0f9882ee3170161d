"""Configuration for the split preview web app.

Settings come from environment variables prefixed with ``MORTGAGE_SPLIT_``;
every setting has a default suitable for local development.

Environment Variables
---------------------
MORTGAGE_SPLIT_DATABASE_URL : str
    SQLAlchemy URL of the saved-split store (default: local SQLite file).
MORTGAGE_SPLIT_SECRET_KEY : str
    Flask session secret.
MORTGAGE_SPLIT_ASSET_VERSION : str
    Cache-busting suffix for static assets.
MORTGAGE_SPLIT_LOG_LEVEL : str
    Logging level (DEBUG, INFO, WARNING, ERROR).
MORTGAGE_SPLIT_MAX_SAVED_PER_USER : int
    How many saved splits to keep per browser session.
MORTGAGE_SPLIT_TOLERANCE : str
    Allowed difference between a split and its total before warning.
"""

from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation
from typing import Any


def _get_env(key: str, default: Any, value_type: type = str) -> Any:
    """Read ``MORTGAGE_SPLIT_<KEY>`` converted to ``value_type``.

    Unset or unparseable values fall back to ``default``.
    """
    env_value = os.environ.get(f"MORTGAGE_SPLIT_{key.upper()}")
    if env_value is None:
        return default
    try:
        if value_type == bool:
            return env_value.lower() in ("true", "1", "yes", "on")
        if value_type == int:
            return int(env_value)
        if value_type == Decimal:
            parsed = Decimal(env_value)
            return parsed if parsed.is_finite() else default
        return env_value
    except (ValueError, TypeError, InvalidOperation):
        return default


class Settings:
    """Web app configuration loaded from environment variables."""

    def __init__(self) -> None:
        self.database_url: str = _get_env("DATABASE_URL", "sqlite:///mortgage_splits.sqlite3", str)
        self.secret_key: str = _get_env("SECRET_KEY", "dev-secret-key", str)
        self.asset_version: str = _get_env("ASSET_VERSION", "1", str)
        self.log_level: str = _get_env("LOG_LEVEL", "INFO", str)
        self.log_format: str = _get_env(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s", str
        )
        self.max_saved_per_user: int = _get_env("MAX_SAVED_PER_USER", 10, int)
        self.split_tolerance: Decimal = _get_env("TOLERANCE", Decimal("0.02"), Decimal)
        self.debug: bool = _get_env("DEBUG", False, bool)
