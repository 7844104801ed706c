"""Shared pytest fixtures for Age of Focus tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from ageoffocus.database.db import configure_engine, init_db
from ageoffocus.timer.engine import SessionConfig, SessionTimerEngine

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def config():
    """The classic 25/5/5 session."""
    return SessionConfig(
        focus_duration_minutes=25,
        reward_interval_minutes=5,
        reward_amount_minutes=5,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(config, clock):
    """Fresh engine on the 25/5/5 config with a controllable wall clock."""
    return SessionTimerEngine(config, clock=clock)
