"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/AgeOfFocus/settings.json

Usage::

    settings = load_settings()
    settings.focus_duration_minutes = 50
    save_settings(settings)
    engine = SessionTimerEngine(settings.session_config())
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .timer.engine import (
    SessionConfig,
    DEFAULT_FOCUS_MINUTES,
    DEFAULT_REWARD_INTERVAL_MINUTES,
    DEFAULT_REWARD_AMOUNT_MINUTES,
    DEFAULT_INITIAL_BANK_MINUTES,
)

logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "AgeOfFocus"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── session ───────────────────────────────────────────────────────
    focus_duration_minutes: int = DEFAULT_FOCUS_MINUTES
    reward_interval_minutes: int = DEFAULT_REWARD_INTERVAL_MINUTES
    reward_amount_minutes: int = DEFAULT_REWARD_AMOUNT_MINUTES
    initial_bank_minutes: int = DEFAULT_INITIAL_BANK_MINUTES

    # ── restore ───────────────────────────────────────────────────────
    catch_up_on_restore: bool = False      # credit time spent closed

    def session_config(self) -> SessionConfig:
        """Build a validated ``SessionConfig``; raises ``ConfigError``."""
        return SessionConfig(
            focus_duration_minutes=self.focus_duration_minutes,
            reward_interval_minutes=self.reward_interval_minutes,
            reward_amount_minutes=self.reward_amount_minutes,
            initial_bank_minutes=self.initial_bank_minutes,
        )


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    if not SETTINGS_PATH.exists():
        return Settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("could not read %s (%s); using defaults", SETTINGS_PATH, exc)
        return Settings()
    if not isinstance(data, dict):
        logger.warning("%s does not hold an object; using defaults", SETTINGS_PATH)
        return Settings()
    # Only use keys that exist in the dataclass
    valid_keys = {f.name for f in fields(Settings)}
    filtered = {k: v for k, v in data.items() if k in valid_keys}
    return Settings(**filtered)


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
