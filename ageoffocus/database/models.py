"""SQLAlchemy ORM models for Age of Focus."""

from datetime import datetime
from sqlalchemy import Column, Integer, Boolean, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class FocusSession(Base):
    """One settled focus session (full or partial)."""

    __tablename__ = "focus_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recorded_at = Column(DateTime, nullable=False, default=datetime.now)
    planned_minutes = Column(Integer, nullable=False, default=0)
    elapsed_focus_seconds = Column(Integer, nullable=False, default=0)
    break_awarded_seconds = Column(Integer, nullable=False, default=0)
    break_bank_seconds = Column(Integer, nullable=False, default=0)
    was_completed = Column(Boolean, nullable=False, default=False)
    actions_applied = Column(Integer, nullable=False, default=0)

    @property
    def elapsed_focus_minutes(self) -> int:
        return (self.elapsed_focus_seconds or 0) // 60

    def __repr__(self) -> str:
        return (
            f"<FocusSession id={self.id} elapsed={self.elapsed_focus_seconds}s "
            f"completed={self.was_completed}>"
        )


class ActiveSession(Base):
    """Single-row table holding the in-progress session snapshot.

    Stores the config the engine was built with alongside every
    ``SessionState`` field, plus the wall-clock instant of capture.
    """

    __tablename__ = "active_session"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # ── config ────────────────────────────────────────────────────────
    focus_duration_minutes = Column(Integer, nullable=False)
    reward_interval_minutes = Column(Integer, nullable=False)
    reward_amount_minutes = Column(Integer, nullable=False)
    initial_bank_minutes = Column(Integer, nullable=False, default=0)

    # ── snapshot ──────────────────────────────────────────────────────
    is_running = Column(Boolean, nullable=False, default=False)
    is_break = Column(Boolean, nullable=False, default=False)
    started = Column(Boolean, nullable=False, default=False)
    remaining_focus_seconds = Column(Integer, nullable=False, default=0)
    remaining_break_seconds = Column(Integer, nullable=False, default=0)
    break_bank_seconds = Column(Integer, nullable=False, default=0)
    break_awarded_seconds = Column(Integer, nullable=False, default=0)
    break_potential_seconds = Column(Integer, nullable=False, default=0)
    elapsed_focus_seconds = Column(Integer, nullable=False, default=0)

    # True once the history row and actions for this session were written.
    settled = Column(Boolean, nullable=False, default=False)

    captured_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return (
            f"<ActiveSession running={self.is_running} break={self.is_break} "
            f"remaining={self.remaining_focus_seconds}s captured={self.captured_at}>"
        )
