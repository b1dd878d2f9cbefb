"""
Sauron configuration — all environment variables in one place.

Read from environment at import time.
"""

from __future__ import annotations

import logging
import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Engine settings from environment variables."""

    # Logging
    LOG_LEVEL: str = os.environ.get("SAURON_LOG_LEVEL", "INFO").upper()

    # Reject an assembly outright when any of its slots has no template
    STRICT_ASSEMBLIES: bool = _env_bool("SAURON_STRICT_ASSEMBLIES")

    # Key-value store key for the saved build snapshot
    SNAPSHOT_KEY: str = os.environ.get("SAURON_SNAPSHOT_KEY", "builder_state")


# Singleton instance
settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for scripts and tests. Library code only gets loggers."""
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # basicConfig is a no-op once handlers exist, so set the level directly
    logging.getLogger().setLevel(level or settings.LOG_LEVEL)
