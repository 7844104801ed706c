"""Focus actions: what a settled session does to the game world.

The timer only reports *whether* a session completed fully.  This module
turns that into economy changes:

- **Full completion**: every selected action is applied.
- **Partial completion** (abandoned early): only the first one is.

Action Catalog
--------------
    build    Build in Galicia      +industry in a province
    invest   Invest in Lusatia     +gold income in a province
    expand   Expand in Brittany    +gold and research for the nation

Game Model
----------
``apply_actions`` works on a plain dict::

    {"nations": [{"nation_tag": "FRA", "gold": 100, "research_points": 0,
                  "provinces": [{"id": "brittany", "gold_income": 2,
                                 "industry": 1, "army": 0,
                                 "population": 1000}]}]}

The input is never mutated; a deep copy with the updates is returned.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from ..errors import ActionError
from ..timer.engine import SessionOutcome

logger = logging.getLogger(__name__)


PROVINCE_RESOURCES = frozenset({"gold_income", "industry", "army", "population"})
NATION_RESOURCES = frozenset({"gold", "research_points"})

ACTIONS_PER_HOUR = 2
MIN_ACTIONS = 1
MAX_ACTIONS = 8


# ── catalog dataclasses ──────────────────────────────────────────────────


@dataclass(frozen=True)
class ResourceUpdate:
    resource: str
    amount: int


@dataclass(frozen=True)
class ActionTarget:
    kind: str   # "province" | "nation"
    id: str


@dataclass(frozen=True)
class FocusAction:
    key: str
    name: str
    description: str
    target: ActionTarget
    updates: tuple[ResourceUpdate, ...] = ()


FOCUS_ACTIONS: list[FocusAction] = [
    FocusAction(
        key="build",
        name="Build in Galicia",
        description="Build infrastructure in your territories",
        target=ActionTarget("province", "galicia"),
        updates=(ResourceUpdate("industry", 1),),
    ),
    FocusAction(
        key="invest",
        name="Invest in Lusatia",
        description="Invest in economy and production",
        target=ActionTarget("province", "lusatia"),
        updates=(ResourceUpdate("gold_income", 1),),
    ),
    FocusAction(
        key="expand",
        name="Expand in Brittany",
        description="Expand your influence and territories",
        target=ActionTarget("nation", "FRA"),
        updates=(
            ResourceUpdate("gold", 25),
            ResourceUpdate("research_points", 5),
        ),
    ),
]


# ── selection ────────────────────────────────────────────────────────────


def actions_for_duration(duration_minutes: int) -> int:
    """How many actions a session of *duration_minutes* earns (1-8)."""
    count = duration_minutes * ACTIONS_PER_HOUR // 60
    return max(MIN_ACTIONS, min(MAX_ACTIONS, count))


def select_actions(
    actions: Sequence[FocusAction], outcome: SessionOutcome
) -> list[FocusAction]:
    """All of *actions* for a full completion, only the first otherwise."""
    if outcome.completed:
        return list(actions)
    return list(actions[:1])


# ── application ──────────────────────────────────────────────────────────


def _find_province(game: dict[str, Any], province_id: str) -> dict[str, Any] | None:
    for nation in game.get("nations", []):
        for province in nation.get("provinces", []):
            if province.get("id") == province_id:
                return province
    return None


def _find_nation(game: dict[str, Any], tag: str) -> dict[str, Any] | None:
    for nation in game.get("nations", []):
        if nation.get("nation_tag") == tag:
            return nation
    return None


def apply_actions(
    game: dict[str, Any], actions: Iterable[FocusAction]
) -> dict[str, Any]:
    """Return a copy of *game* with every action's updates applied.

    Resource values never drop below zero.  An action whose target is
    missing is skipped with a warning; an update naming a resource the
    target kind doesn't have raises ``ActionError``.
    """
    updated = copy.deepcopy(game)

    for action in actions:
        target = action.target
        if target.kind == "province":
            entity = _find_province(updated, target.id)
            allowed = PROVINCE_RESOURCES
        elif target.kind == "nation":
            entity = _find_nation(updated, target.id)
            allowed = NATION_RESOURCES
        else:
            raise ActionError(f"unknown target kind {target.kind!r} in {action.key!r}")

        if entity is None:
            logger.warning("%s %r not found; skipping %r", target.kind, target.id, action.key)
            continue

        for update in action.updates:
            if update.resource not in allowed:
                raise ActionError(
                    f"{target.kind} has no resource {update.resource!r} "
                    f"(action {action.key!r})"
                )
            old = entity.get(update.resource, 0)
            entity[update.resource] = max(0, old + update.amount)
            logger.debug(
                "%s: %s.%s %s -> %s",
                action.key, target.id, update.resource, old, entity[update.resource],
            )

    return updated


def settle_session(
    game: dict[str, Any],
    actions: Sequence[FocusAction],
    outcome: SessionOutcome,
) -> tuple[dict[str, Any], list[FocusAction]]:
    """Select and apply actions for *outcome*; returns ``(game, applied)``."""
    chosen = select_actions(actions, outcome)
    return apply_actions(game, chosen), chosen
