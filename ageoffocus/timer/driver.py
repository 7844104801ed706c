"""Qt glue between a ``SessionTimerEngine`` and the event loop.

The engine knows nothing about scheduling.  ``TimerDriver`` owns a
one-second ``QTimer``, calls ``engine.tick()`` on every timeout, and keeps
the ``QTimer`` running exactly while the engine says it is running.

A ``QTimer`` that fires late (laptop lid closed, process suspended) still
delivers a single tick, so time the process never observed as running is
never credited as focus or break time.
"""

from __future__ import annotations

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .engine import SessionOutcome, SessionState, SessionTimerEngine


TICK_INTERVAL_MS = 1000


class TimerDriver(QObject):
    """Drives a ``SessionTimerEngine`` from a ``QTimer``.

    Signals
    -------
    tick(state: SessionState)
        Emitted once per engine tick, after the engine has finished
        updating (rewards included).
    state_changed(state: SessionState)
        Emitted after every control call (start, pause, resume, ...).
    focus_completed(state: SessionState)
        Emitted once when the focus countdown reaches zero.
    break_finished(state: SessionState)
        Emitted once when a break countdown reaches zero.
    """

    tick = pyqtSignal(object)
    state_changed = pyqtSignal(object)
    focus_completed = pyqtSignal(object)
    break_finished = pyqtSignal(object)

    def __init__(
        self,
        engine: SessionTimerEngine,
        parent: QObject | None = None,
        *,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._engine.set_tick_callback(self._on_engine_tick)

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._on_timeout)

        self._sync_timer()

    # ── properties ────────────────────────────────────────────────────

    @property
    def engine(self) -> SessionTimerEngine:
        return self._engine

    @property
    def timer_active(self) -> bool:
        """True while the underlying ``QTimer`` is scheduled."""
        return self._qt_timer.isActive()

    def state(self) -> SessionState:
        return self._engine.get_state()

    # ── controls ──────────────────────────────────────────────────────

    def start(self) -> None:
        self._engine.start()
        self._after_control()

    def pause(self) -> None:
        self._engine.pause()
        self._after_control()

    def resume(self) -> None:
        self._engine.resume()
        self._after_control()

    def reset(self) -> None:
        self._engine.reset()
        self._after_control()

    def enter_break(self, seconds: int | None = None) -> None:
        self._engine.enter_break(seconds)
        self._after_control()

    def end_break(self) -> None:
        self._engine.end_break()
        self._after_control()

    def complete(self) -> SessionOutcome | None:
        outcome = self._engine.complete()
        self._after_control()
        return outcome

    def stop(self) -> None:
        """Stop the ``QTimer`` and pause the engine (e.g. on shutdown)."""
        self._engine.pause()
        self._qt_timer.stop()

    # ── internals ─────────────────────────────────────────────────────

    def _on_timeout(self) -> None:
        self._engine.tick()

    def _on_engine_tick(self, state: SessionState) -> None:
        self.tick.emit(state)
        if state.is_running:
            return
        self._qt_timer.stop()
        if state.is_break:
            self.break_finished.emit(state)
        elif state.is_focus_complete:
            self.focus_completed.emit(state)

    def _after_control(self) -> None:
        self._sync_timer()
        self.state_changed.emit(self._engine.get_state())

    def _sync_timer(self) -> None:
        if self._engine.is_running:
            if not self._qt_timer.isActive():
                self._qt_timer.start()
        else:
            self._qt_timer.stop()
