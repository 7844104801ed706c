"""Gamification package."""

from .actions import (
    FocusAction,
    ActionTarget,
    ResourceUpdate,
    FOCUS_ACTIONS,
    actions_for_duration,
    select_actions,
    apply_actions,
    settle_session,
)

__all__ = [
    "FocusAction",
    "ActionTarget",
    "ResourceUpdate",
    "FOCUS_ACTIONS",
    "actions_for_duration",
    "select_actions",
    "apply_actions",
    "settle_session",
]
