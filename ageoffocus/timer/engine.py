"""Focus session state machine for Age of Focus.

States
------
IDLE            Constructed or reset; nothing has been started.
FOCUSING        Focus countdown running; focus time earns break rewards.
PAUSED          Frozen mid-phase (focus or break); counters untouched.
FOCUS_DONE      Focus countdown hit zero.  The engine stops and waits
                for the owner to resolve the session's game effects.
ON_BREAK        Banked break time counting down.

Transitions
-----------
IDLE → FOCUSING                       (start)
FOCUSING | ON_BREAK → PAUSED          (pause)
PAUSED → {whatever was paused}        (resume)
FOCUSING → FOCUS_DONE                 (tick reaches zero)
PAUSED | FOCUS_DONE → ON_BREAK        (enter_break, needs banked time)
ON_BREAK → PAUSED | FOCUS_DONE        (end_break, or tick reaches zero)
Any → IDLE                            (reset / complete)

The engine never schedules anything.  Its owner calls ``tick()`` once per
elapsed second while ``is_running`` is true (see ``TimerDriver``), which
keeps the engine trivially testable: tests just call ``tick()`` in a loop.

Reward banking
--------------
Every ``reward_interval_minutes`` of focus credits
``reward_amount_minutes`` of break time to the bank, capped at
``break_potential_seconds`` (what the full planned focus phase can earn).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, asdict, fields
from typing import Any, Callable

from ..errors import ConfigError, InvalidSessionState


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_FOCUS_MINUTES = 25
DEFAULT_REWARD_INTERVAL_MINUTES = 5
DEFAULT_REWARD_AMOUNT_MINUTES = 5
DEFAULT_INITIAL_BANK_MINUTES = 0  # a brand-new session starts with an empty bank

TICK_SECONDS = 1


# ── config / snapshots ────────────────────────────────────────────────────


@dataclass(frozen=True)
class SessionConfig:
    """Immutable session parameters.  Validated on construction."""

    focus_duration_minutes: int = DEFAULT_FOCUS_MINUTES
    reward_interval_minutes: int = DEFAULT_REWARD_INTERVAL_MINUTES
    reward_amount_minutes: int = DEFAULT_REWARD_AMOUNT_MINUTES
    initial_bank_minutes: int = DEFAULT_INITIAL_BANK_MINUTES

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{f.name} must be an integer, got {value!r}")
        if self.focus_duration_minutes <= 0:
            raise ConfigError(
                f"focus_duration_minutes must be > 0, got {self.focus_duration_minutes}"
            )
        if self.reward_interval_minutes <= 0:
            raise ConfigError(
                f"reward_interval_minutes must be > 0, got {self.reward_interval_minutes}"
            )
        if self.reward_amount_minutes < 0:
            raise ConfigError(
                f"reward_amount_minutes must be >= 0, got {self.reward_amount_minutes}"
            )
        if self.initial_bank_minutes < 0:
            raise ConfigError(
                f"initial_bank_minutes must be >= 0, got {self.initial_bank_minutes}"
            )

    @property
    def focus_seconds(self) -> int:
        return self.focus_duration_minutes * 60

    @property
    def reward_interval_seconds(self) -> int:
        return self.reward_interval_minutes * 60

    @property
    def reward_amount_seconds(self) -> int:
        return self.reward_amount_minutes * 60

    @property
    def initial_bank_seconds(self) -> int:
        return self.initial_bank_minutes * 60

    @property
    def break_potential_seconds(self) -> int:
        """Most break time the full planned focus phase can earn."""
        intervals = self.focus_duration_minutes // self.reward_interval_minutes
        return intervals * self.reward_amount_minutes * 60


@dataclass(frozen=True)
class SessionState:
    """Read-only snapshot of a session.  All times are in seconds."""

    is_running: bool
    is_break: bool
    remaining_focus_seconds: int
    remaining_break_seconds: int
    break_bank_seconds: int
    break_awarded_seconds: int
    break_potential_seconds: int
    elapsed_focus_seconds: int
    started: bool = False

    @property
    def is_idle(self) -> bool:
        return not self.started

    @property
    def is_focus_complete(self) -> bool:
        """True once the focus countdown has reached zero."""
        return self.remaining_focus_seconds == 0

    @property
    def is_break_over(self) -> bool:
        return self.is_break and not self.is_running and self.remaining_break_seconds == 0

    @property
    def is_paused(self) -> bool:
        """Stopped mid-phase with time still on the clock."""
        if self.is_running or not self.started:
            return False
        if self.is_break:
            return self.remaining_break_seconds > 0
        return self.remaining_focus_seconds > 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionState:
        """Build a snapshot from ``to_dict()`` output, ignoring extra keys."""
        names = {f.name for f in fields(cls)}
        missing = names - set(data) - {"started"}
        if missing:
            raise InvalidSessionState(
                f"snapshot is missing fields: {', '.join(sorted(missing))}"
            )
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass(frozen=True)
class SessionOutcome:
    """What the owner needs to settle a finished (or abandoned) session."""

    completed: bool
    elapsed_focus_seconds: int
    planned_focus_seconds: int
    break_awarded_seconds: int
    break_bank_seconds: int

    @property
    def elapsed_focus_minutes(self) -> int:
        return self.elapsed_focus_seconds // 60


TickCallback = Callable[[SessionState], None]


# ── engine ────────────────────────────────────────────────────────────────


class SessionTimerEngine:
    """Focus/break countdown with reward banking.

    Every control call made from the wrong state is a silent no-op.
    Timer UIs double-fire buttons all the time, so callers that need to
    branch should look at ``get_state()`` instead of catching errors.

    *on_tick* receives a ``SessionState`` exactly once per applied tick,
    after all of that tick's state changes (rewards included) are done.
    *clock* returns wall-clock seconds and only feeds pause bookkeeping.
    """

    def __init__(
        self,
        config: SessionConfig,
        on_tick: TickCallback | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not isinstance(config, SessionConfig):
            raise ConfigError(f"expected a SessionConfig, got {type(config).__name__}")
        self._config = config
        self._on_tick = on_tick
        self._clock = clock
        self._init_state()

    def _init_state(self) -> None:
        cfg = self._config
        self._running: bool = False
        self._is_break: bool = False
        self._started: bool = False
        self._remaining_focus: int = cfg.focus_seconds
        self._remaining_break: int = 0
        self._bank: int = cfg.initial_bank_seconds
        self._awarded: int = 0
        self._potential: int = cfg.break_potential_seconds
        self._elapsed_focus: int = 0

        # wall-clock bookkeeping, never part of the snapshot
        self._paused_at: float | None = None
        self._paused_seconds: float = 0.0

    @classmethod
    def from_state(
        cls,
        config: SessionConfig,
        state: SessionState,
        on_tick: TickCallback | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> SessionTimerEngine:
        """Construct an engine already seeded with *state*."""
        engine = cls(config, on_tick, clock=clock)
        engine.restore(state)
        return engine

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def paused_seconds(self) -> float:
        """Wall-clock seconds spent paused this session (not counted as focus)."""
        return self._paused_seconds

    def set_tick_callback(self, on_tick: TickCallback | None) -> None:
        """Replace the tick callback; the latest registration always wins."""
        self._on_tick = on_tick

    def get_state(self) -> SessionState:
        return SessionState(
            is_running=self._running,
            is_break=self._is_break,
            remaining_focus_seconds=self._remaining_focus,
            remaining_break_seconds=self._remaining_break,
            break_bank_seconds=self._bank,
            break_awarded_seconds=self._awarded,
            break_potential_seconds=self._potential,
            elapsed_focus_seconds=self._elapsed_focus,
            started=self._started,
        )

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Begin the focus phase.  Only valid from IDLE."""
        if self._started:
            return
        self._started = True
        self._is_break = False
        self._running = True

    def pause(self) -> None:
        if not self._running:
            return
        self._running = False
        self._paused_at = self._clock()

    def resume(self) -> None:
        """Continue the paused phase from exactly where it stopped.

        Wall-clock time spent paused is recorded in ``paused_seconds``
        but never credited as focus or break time.
        """
        if self._running or not self._started:
            return
        left = self._remaining_break if self._is_break else self._remaining_focus
        if left <= 0:
            return
        self._close_pause()
        self._running = True

    def reset(self) -> None:
        """Discard all progress and banked rewards; back to IDLE."""
        self._init_state()

    def enter_break(self, seconds: int | None = None) -> None:
        """Start spending banked break time.

        Valid once the session has started, while stopped in the focus
        phase (focus done, or paused early) with a non-empty bank.
        *seconds* caps the break; by default the whole bank is available.
        """
        if self._running or self._is_break or not self._started:
            return
        budget = self._bank if seconds is None else min(max(0, int(seconds)), self._bank)
        if budget <= 0:
            return
        self._close_pause()
        self._is_break = True
        self._remaining_break = budget
        self._running = True

    def end_break(self) -> None:
        """Leave the break phase.  Unspent break time stays in the bank."""
        if not self._is_break:
            return
        self._is_break = False
        self._running = False
        self._remaining_break = 0
        if self._remaining_focus > 0:
            self._paused_at = self._clock()

    def outcome(self) -> SessionOutcome | None:
        """The outcome the session would settle with right now.

        Returns ``None`` when no session was started.  ``completed`` is
        true only if the focus phase ran all the way to zero; anything
        less is a partial completion.
        """
        if not self._started:
            return None
        return SessionOutcome(
            completed=self._remaining_focus == 0,
            elapsed_focus_seconds=self._elapsed_focus,
            planned_focus_seconds=self._config.focus_seconds,
            break_awarded_seconds=self._awarded,
            break_bank_seconds=self._bank,
        )

    def complete(self) -> SessionOutcome | None:
        """Close out the session with ``outcome()``, then reset to IDLE."""
        outcome = self.outcome()
        if outcome is not None:
            self.reset()
        return outcome

    # ══════════════════════════════════════════════════════════════════
    #  TICKING
    # ══════════════════════════════════════════════════════════════════

    def tick(self) -> None:
        """Apply one second of the running phase, then notify once."""
        if not self._running:
            return
        self._step()
        self._notify()

    def advance(self, seconds: int) -> int:
        """Apply up to *seconds* ticks back to back with one notification.

        Stops early when the running phase stops.  Returns the number of
        ticks actually applied.
        """
        applied = 0
        while self._running and applied < seconds:
            self._step()
            applied += 1
        if applied:
            self._notify()
        return applied

    def _step(self) -> None:
        if self._is_break:
            self._remaining_break = max(0, self._remaining_break - TICK_SECONDS)
            self._bank = max(0, self._bank - TICK_SECONDS)
            if self._remaining_break == 0:
                self._running = False
            return

        self._remaining_focus = max(0, self._remaining_focus - TICK_SECONDS)
        self._elapsed_focus += TICK_SECONDS
        self._credit_rewards()
        if self._remaining_focus == 0:
            self._running = False

    def _credit_rewards(self) -> None:
        """Bank every reward boundary crossed so far, capped at potential.

        Computed from ``elapsed_focus`` rather than counted per tick, so a
        boundary can never be credited twice.
        """
        cfg = self._config
        intervals = self._elapsed_focus // cfg.reward_interval_seconds
        due = min(intervals * cfg.reward_amount_seconds, self._potential)
        if due > self._awarded:
            self._bank += due - self._awarded
            self._awarded = due

    def _notify(self) -> None:
        if self._on_tick is not None:
            self._on_tick(self.get_state())

    def _close_pause(self) -> None:
        if self._paused_at is not None:
            self._paused_seconds += max(0.0, self._clock() - self._paused_at)
            self._paused_at = None

    # ══════════════════════════════════════════════════════════════════
    #  RESTORE
    # ══════════════════════════════════════════════════════════════════

    def restore(self, state: SessionState) -> None:
        """Seed the engine with a previously captured snapshot.

        Raises ``InvalidSessionState`` if *state* could not have been
        produced by an engine with this config.
        """
        self._validate(state)
        self._running = state.is_running
        self._is_break = state.is_break
        self._started = state.started
        self._remaining_focus = state.remaining_focus_seconds
        self._remaining_break = state.remaining_break_seconds
        self._bank = state.break_bank_seconds
        self._awarded = state.break_awarded_seconds
        self._potential = state.break_potential_seconds
        self._elapsed_focus = state.elapsed_focus_seconds
        self._paused_at = None
        self._paused_seconds = 0.0

    def _validate(self, state: SessionState) -> None:
        cfg = self._config
        counters = (
            "remaining_focus_seconds",
            "remaining_break_seconds",
            "break_bank_seconds",
            "break_awarded_seconds",
            "break_potential_seconds",
            "elapsed_focus_seconds",
        )
        for name in counters:
            value = getattr(state, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidSessionState(f"{name} must be a non-negative integer, got {value!r}")

        if state.break_potential_seconds != cfg.break_potential_seconds:
            raise InvalidSessionState(
                f"break_potential_seconds {state.break_potential_seconds} does not "
                f"match config ({cfg.break_potential_seconds})"
            )
        if state.remaining_focus_seconds > cfg.focus_seconds:
            raise InvalidSessionState("remaining_focus_seconds exceeds the focus duration")
        if state.break_awarded_seconds > state.break_potential_seconds:
            raise InvalidSessionState("break_awarded_seconds exceeds break_potential_seconds")
        if state.remaining_break_seconds and not state.is_break:
            raise InvalidSessionState("remaining_break_seconds set outside the break phase")
        if state.remaining_break_seconds > state.break_bank_seconds:
            raise InvalidSessionState("remaining_break_seconds exceeds break_bank_seconds")

        if not state.started:
            untouched = (
                not state.is_running
                and not state.is_break
                and state.elapsed_focus_seconds == 0
                and state.break_awarded_seconds == 0
                and state.remaining_focus_seconds == cfg.focus_seconds
            )
            if not untouched:
                raise InvalidSessionState("a session that never started cannot have progress")

        if state.is_running:
            left = state.remaining_break_seconds if state.is_break else state.remaining_focus_seconds
            if left == 0:
                raise InvalidSessionState("running phase has no time left")
