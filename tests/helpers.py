"""Shared test helpers for Age of Focus."""

from ageoffocus.timer.engine import SessionTimerEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions (or plain callbacks) into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def run_ticks(engine: SessionTimerEngine, count: int) -> None:
    """Deliver *count* one-second ticks, as the QTimer would."""
    for _ in range(count):
        engine.tick()


def finish_focus(engine: SessionTimerEngine) -> None:
    """Tick until the focus countdown reaches zero."""
    run_ticks(engine, engine.get_state().remaining_focus_seconds)
