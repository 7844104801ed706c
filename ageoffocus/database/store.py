"""Saving, restoring, and recording focus sessions.

The timer engine never touches the database.  Its owner calls into this
module at save points:

* ``save_active_session`` / ``restore_engine``: survive a restart
  mid-session.  The snapshot is stored together with the config and the
  wall-clock instant it was captured and whether its outcome was
  already recorded (``active_session_settled``).
* ``record_session``: append a settled ``SessionOutcome`` to history.
* ``session_stats`` and friends: read the history back.

Restore policy
--------------
A session that was running when saved comes back *paused*.  With
``catch_up=True`` the whole seconds elapsed since capture are replayed
through ``engine.advance()`` first, so the focus countdown (and any
reward boundaries) move as if the app had kept running.
"""

from __future__ import annotations

import logging
from datetime import datetime, date, time as dtime

from ..timer.engine import (
    SessionConfig,
    SessionOutcome,
    SessionState,
    SessionTimerEngine,
    TickCallback,
)
from .db import get_session
from .models import ActiveSession, FocusSession

logger = logging.getLogger(__name__)

_CONFIG_FIELDS = (
    "focus_duration_minutes",
    "reward_interval_minutes",
    "reward_amount_minutes",
    "initial_bank_minutes",
)


# ── active session ───────────────────────────────────────────────────────


def save_active_session(
    config: SessionConfig,
    state: SessionState,
    captured_at: datetime | None = None,
    *,
    settled: bool = False,
) -> None:
    """Upsert the single active-session row.

    *settled* records whether the session's outcome was already written
    to history, so a restore never settles it twice or not at all.
    """
    if captured_at is None:
        captured_at = datetime.now()

    with get_session() as db:
        row = db.query(ActiveSession).first()
        if row is None:
            row = ActiveSession()
            db.add(row)
        for name in _CONFIG_FIELDS:
            setattr(row, name, getattr(config, name))
        for name, value in state.to_dict().items():
            setattr(row, name, value)
        row.settled = settled
        row.captured_at = captured_at

    logger.debug(
        "saved active session: running=%s break=%s remaining=%ss settled=%s",
        state.is_running, state.is_break, state.remaining_focus_seconds, settled,
    )


def load_active_session() -> tuple[SessionConfig, SessionState, datetime] | None:
    """Return ``(config, state, captured_at)`` or ``None`` if nothing is saved."""
    with get_session() as db:
        row = db.query(ActiveSession).first()
        if row is None:
            return None
        config = SessionConfig(**{n: getattr(row, n) for n in _CONFIG_FIELDS})
        columns = {c.name: getattr(row, c.name) for c in ActiveSession.__table__.columns}
        state = SessionState.from_dict(columns)
        return config, state, row.captured_at


def active_session_settled() -> bool:
    """Whether the saved session was already recorded to history."""
    with get_session() as db:
        row = db.query(ActiveSession).first()
        return bool(row is not None and row.settled)


def clear_active_session() -> None:
    with get_session() as db:
        db.query(ActiveSession).delete()


def restore_engine(
    now: datetime | None = None,
    *,
    catch_up: bool = False,
    on_tick: TickCallback | None = None,
) -> SessionTimerEngine | None:
    """Rebuild an engine from the saved snapshot (see module docstring).

    Raises ``InvalidSessionState`` if the stored row is not a state the
    engine could have produced.
    """
    saved = load_active_session()
    if saved is None:
        return None
    config, state, captured_at = saved

    engine = SessionTimerEngine.from_state(config, state, on_tick)
    if not state.is_running:
        return engine

    if catch_up:
        if now is None:
            now = datetime.now()
        gap = max(0, int((now - captured_at).total_seconds()))
        applied = engine.advance(gap)
        logger.info("caught up %s of %s offline seconds", applied, gap)
    engine.pause()
    return engine


# ── history ──────────────────────────────────────────────────────────────


def record_session(outcome: SessionOutcome, actions_applied: int = 0) -> int:
    """Persist a settled session and return its row id."""
    with get_session() as db:
        record = FocusSession(
            recorded_at=datetime.now(),
            planned_minutes=outcome.planned_focus_seconds // 60,
            elapsed_focus_seconds=outcome.elapsed_focus_seconds,
            break_awarded_seconds=outcome.break_awarded_seconds,
            break_bank_seconds=outcome.break_bank_seconds,
            was_completed=outcome.completed,
            actions_applied=actions_applied,
        )
        db.add(record)
        db.flush()
        record_id = record.id

    logger.info(
        "recorded %s session #%s (%s min focused, %s actions)",
        "full" if outcome.completed else "partial",
        record_id, outcome.elapsed_focus_minutes, actions_applied,
    )
    return record_id


def recent_sessions(limit: int = 20) -> list[FocusSession]:
    """Most recent sessions first."""
    with get_session() as db:
        return (
            db.query(FocusSession)
            .order_by(FocusSession.recorded_at.desc(), FocusSession.id.desc())
            .limit(limit)
            .all()
        )


def today_sessions(today: date | None = None) -> list[FocusSession]:
    if today is None:
        today = date.today()
    start = datetime.combine(today, dtime.min)
    with get_session() as db:
        return (
            db.query(FocusSession)
            .filter(FocusSession.recorded_at >= start)
            .order_by(FocusSession.recorded_at.desc())
            .all()
        )


def session_stats() -> dict[str, float]:
    """Totals across every recorded session.  Minutes are focus minutes."""
    with get_session() as db:
        rows = db.query(FocusSession).all()
        total_sessions = len(rows)
        total_minutes = sum(r.elapsed_focus_minutes for r in rows)
        completed_sessions = sum(1 for r in rows if r.was_completed)

    avg = total_minutes / total_sessions if total_sessions else 0
    return {
        "total_sessions": total_sessions,
        "total_minutes": total_minutes,
        "completed_sessions": completed_sessions,
        "avg_session_length": avg,
    }
