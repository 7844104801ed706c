"""Timer package."""

from .engine import (
    SessionTimerEngine,
    SessionConfig,
    SessionState,
    SessionOutcome,
    DEFAULT_FOCUS_MINUTES,
    DEFAULT_REWARD_INTERVAL_MINUTES,
    DEFAULT_REWARD_AMOUNT_MINUTES,
    DEFAULT_INITIAL_BANK_MINUTES,
)
from .driver import TimerDriver

__all__ = [
    "SessionTimerEngine",
    "SessionConfig",
    "SessionState",
    "SessionOutcome",
    "TimerDriver",
    "DEFAULT_FOCUS_MINUTES",
    "DEFAULT_REWARD_INTERVAL_MINUTES",
    "DEFAULT_REWARD_AMOUNT_MINUTES",
    "DEFAULT_INITIAL_BANK_MINUTES",
]
