"""Console front end for Age of Focus.

``FocusApp`` is the owner the timer engine expects: it listens to the
``TimerDriver`` signals, renders one status line per tick, settles the
session (history row + earned actions) as soon as the focus phase is
done, then spends the banked break.
"""

from __future__ import annotations

import itertools
import logging
import sys
from typing import Any, Sequence, TextIO

from PyQt6.QtCore import QObject, pyqtSignal

from .database.store import (
    clear_active_session,
    record_session,
    save_active_session,
)
from .gamification.actions import (
    FOCUS_ACTIONS,
    FocusAction,
    actions_for_duration,
    select_actions,
    settle_session,
)
from .timer.driver import TimerDriver
from .timer.engine import SessionOutcome, SessionState

logger = logging.getLogger(__name__)


# ── helper: format seconds as mm:ss ──────────────────────────────────────

def _fmt_time(seconds: int) -> str:
    m, s = divmod(max(0, seconds), 60)
    return f"{m}:{s:02d}"


def render_state(state: SessionState) -> str:
    """One-line status for *state*."""
    if state.is_break:
        phase, left = "BREAK", state.remaining_break_seconds
    else:
        phase, left = "FOCUS", state.remaining_focus_seconds
    if state.is_paused:
        phase += " (paused)"
    return (
        f"[{phase}] {_fmt_time(left)} left"
        f" | bank {_fmt_time(state.break_bank_seconds)}"
        f" | earned {_fmt_time(state.break_awarded_seconds)}"
        f"/{_fmt_time(state.break_potential_seconds)}"
    )


def session_actions(
    focus_minutes: int, catalog: Sequence[FocusAction] = FOCUS_ACTIONS
) -> list[FocusAction]:
    """The actions a session of *focus_minutes* is played for, in order."""
    if not catalog:
        return []
    count = actions_for_duration(focus_minutes)
    return list(itertools.islice(itertools.cycle(catalog), count))


class FocusApp(QObject):
    """Runs one focus session end to end on the console.

    Signals
    -------
    finished(outcome: SessionOutcome | None)
        Emitted once the session is over (``None`` when it was saved for
        later instead of settled).
    """

    finished = pyqtSignal(object)

    def __init__(
        self,
        driver: TimerDriver,
        *,
        catalog: Sequence[FocusAction] = FOCUS_ACTIONS,
        settled: bool = False,
        game: dict[str, Any] | None = None,
        out: TextIO | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._driver = driver
        self._catalog = catalog
        self._game = game
        self._out = out if out is not None else sys.stdout
        self._settled = settled

        driver.tick.connect(self._on_tick)
        driver.focus_completed.connect(self._on_focus_completed)
        driver.break_finished.connect(self._on_break_finished)

    @property
    def settled(self) -> bool:
        return self._settled

    @property
    def game(self) -> dict[str, Any] | None:
        """The game model with every earned action applied, if one was given."""
        return self._game

    # ── controls ──────────────────────────────────────────────────────

    def begin(self) -> None:
        """Start a fresh session or pick up a restored one."""
        state = self._driver.state()
        if state.is_idle:
            self._driver.start()
        elif state.is_paused:
            self._driver.resume()
        elif state.is_break_over:
            self._finish()
            return
        elif state.is_focus_complete and not state.is_break:
            self._settle()
            self._enter_break_or_finish(state)
            return
        self._write(render_state(self._driver.state()))

    def interrupt(self) -> None:
        """Stop ticking and save the session so ``--resume`` can continue it."""
        self._driver.stop()
        state = self._driver.state()
        if not state.is_idle:
            save_active_session(self._driver.engine.config, state, settled=self._settled)
            logger.info("interrupted with %ss of focus left", state.remaining_focus_seconds)
            self._write("\nSession saved. Resume with --resume.")
        self.finished.emit(None)

    def abandon(self) -> SessionOutcome | None:
        """Give up early: settle as a partial completion and end."""
        self._driver.stop()
        return self._finish()

    # ── signal handlers ───────────────────────────────────────────────

    def _on_tick(self, state: SessionState) -> None:
        self._write("\r" + render_state(state), newline=False)

    def _on_focus_completed(self, state: SessionState) -> None:
        self._write("\nFocus complete!")
        self._settle()
        self._enter_break_or_finish(state)

    def _on_break_finished(self, state: SessionState) -> None:
        self._write("\nBreak over.")
        self._finish()

    # ── internals ─────────────────────────────────────────────────────

    def _enter_break_or_finish(self, state: SessionState) -> None:
        if state.break_bank_seconds > 0:
            self._write(f"Enjoy your {_fmt_time(state.break_bank_seconds)} break.")
            self._driver.enter_break()
        else:
            self._finish()

    def _settle(self) -> None:
        if self._settled:
            return
        outcome = self._driver.engine.outcome()
        if outcome is None:
            return
        planned = session_actions(outcome.planned_focus_seconds // 60, self._catalog)
        if self._game is not None:
            self._game, chosen = settle_session(self._game, planned, outcome)
        else:
            chosen = select_actions(planned, outcome)
        record_session(outcome, actions_applied=len(chosen))
        self._settled = True

        kind = "Full" if outcome.completed else "Partial"
        self._write(
            f"{kind} session: {outcome.elapsed_focus_minutes} min focused, "
            f"{len(chosen)} action(s) earned"
        )
        for action in chosen:
            self._write(f"  - {action.name}")

    def _finish(self) -> SessionOutcome | None:
        self._settle()
        outcome = self._driver.complete()
        clear_active_session()
        self.finished.emit(outcome)
        return outcome

    def _write(self, text: str, *, newline: bool = True) -> None:
        self._out.write(text + ("\n" if newline else ""))
        self._out.flush()
