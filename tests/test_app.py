"""Tests for the console front end: settling, breaks, saving, abandoning."""

import io
from datetime import datetime, timedelta

import pytest

from ageoffocus.__main__ import main
from ageoffocus.app import FocusApp, render_state, session_actions
from ageoffocus.database.db import get_session
from ageoffocus.database.models import FocusSession
from ageoffocus.database.store import (
    active_session_settled,
    load_active_session,
    recent_sessions,
    restore_engine,
    save_active_session,
    session_stats,
)
from ageoffocus.gamification.actions import FOCUS_ACTIONS
from ageoffocus.timer.driver import TimerDriver
from ageoffocus.timer.engine import SessionConfig, SessionTimerEngine

from helpers import SignalCollector, run_ticks


def _timeouts(driver, count):
    for _ in range(count):
        driver._on_timeout()


CAPTURED = datetime(2026, 3, 1, 9, 0, 0)

SHORT = SessionConfig(
    focus_duration_minutes=2,
    reward_interval_minutes=1,
    reward_amount_minutes=1,
)


def _make_app(qapp, config=None, engine=None, **kwargs):
    if engine is None:
        engine = SessionTimerEngine(config or SHORT)
    driver = TimerDriver(engine)
    out = io.StringIO()
    app = FocusApp(driver, out=out, **kwargs)
    done = SignalCollector()
    app.finished.connect(done)
    return app, driver, out, done


class TestRender:

    def test_focus_line(self, engine):
        engine.start()
        run_ticks(engine, 300)
        line = render_state(engine.get_state())
        assert line == "[FOCUS] 20:00 left | bank 5:00 | earned 5:00/25:00"

    def test_paused_break_line(self, engine):
        engine.start()
        run_ticks(engine, 300)
        engine.pause()
        engine.enter_break(90)
        run_ticks(engine, 30)
        engine.pause()
        assert render_state(engine.get_state()).startswith("[BREAK (paused)] 1:00 left")

    def test_session_actions_cycle_catalog(self):
        assert session_actions(25) == FOCUS_ACTIONS[:1]
        assert len(session_actions(240)) == 8
        assert session_actions(240)[3] == FOCUS_ACTIONS[0]
        assert session_actions(60, []) == []


class TestFocusApp:

    def test_begin_starts_session(self, qapp):
        app, driver, out, _ = _make_app(qapp)
        app.begin()
        assert driver.state().is_running
        assert "[FOCUS] 2:00 left" in out.getvalue()

    def test_full_session_settles_then_breaks(self, qapp):
        app, driver, out, done = _make_app(qapp)
        app.begin()
        _timeouts(driver, 120)

        assert app.settled
        assert driver.state().is_break
        assert driver.timer_active
        assert session_stats()["completed_sessions"] == 1
        assert "Full session: 2 min focused, 1 action(s) earned" in out.getvalue()

        _timeouts(driver, 120)
        assert len(done) == 1
        assert done.last.completed is True
        assert done.last.break_bank_seconds == 0
        assert driver.state().is_idle
        assert len(recent_sessions()) == 1

    def test_no_bank_finishes_without_break(self, qapp):
        app, driver, out, done = _make_app(qapp, SessionConfig(
            focus_duration_minutes=1,
            reward_interval_minutes=1,
            reward_amount_minutes=0,
        ))
        app.begin()
        _timeouts(driver, 60)
        assert len(done) == 1
        assert done.last.completed is True
        assert "Break over" not in out.getvalue()

    def test_interrupt_saves_session(self, qapp):
        app, driver, out, done = _make_app(qapp)
        app.begin()
        _timeouts(driver, 30)
        app.interrupt()

        assert done.last is None
        assert driver.timer_active is False
        _config, state, _captured = load_active_session()
        assert state.elapsed_focus_seconds == 30
        assert state.is_paused
        assert session_stats()["total_sessions"] == 0

    def test_interrupt_idle_saves_nothing(self, qapp):
        app, _driver, _out, done = _make_app(qapp)
        app.interrupt()
        assert load_active_session() is None
        assert len(done) == 1

    def test_abandon_is_partial(self, qapp):
        app, driver, out, done = _make_app(qapp)
        app.begin()
        _timeouts(driver, 70)
        outcome = app.abandon()

        assert outcome.completed is False
        assert outcome.elapsed_focus_seconds == 70
        row = recent_sessions()[0]
        assert row.was_completed is False
        assert row.actions_applied == 1
        assert "Partial session" in out.getvalue()

    def test_restored_break_is_not_settled_twice(self, qapp):
        config = SessionConfig(
            focus_duration_minutes=2,
            reward_interval_minutes=1,
            reward_amount_minutes=1,
        )
        engine = SessionTimerEngine(config)
        engine.start()
        run_ticks(engine, 120)
        engine.enter_break()
        run_ticks(engine, 20)
        engine.pause()

        app, driver, _out, done = _make_app(qapp, engine=engine, settled=True)
        assert app.settled
        app.begin()
        _timeouts(driver, 100)
        assert len(done) == 1
        assert session_stats()["total_sessions"] == 0

    def test_restored_finished_focus_goes_to_break(self, qapp):
        config = SessionConfig(
            focus_duration_minutes=2,
            reward_interval_minutes=1,
            reward_amount_minutes=1,
        )
        engine = SessionTimerEngine(config)
        engine.start()
        run_ticks(engine, 120)

        app, driver, _out, _done = _make_app(qapp, engine=engine)
        app.begin()
        assert driver.state().is_break
        assert driver.state().remaining_break_seconds == 120
        assert session_stats()["completed_sessions"] == 1

    def test_focus_finished_during_catch_up_is_recorded(self, qapp):
        engine = SessionTimerEngine(SHORT)
        engine.start()
        run_ticks(engine, 30)
        save_active_session(SHORT, engine.get_state(), CAPTURED)

        restored = restore_engine(CAPTURED + timedelta(hours=1), catch_up=True)
        assert restored.get_state().is_focus_complete
        app, driver, out, done = _make_app(
            qapp, engine=restored, settled=active_session_settled(),
        )
        assert not app.settled

        app.begin()
        assert app.settled
        assert driver.state().is_break
        row = recent_sessions()[0]
        assert row.was_completed is True
        assert row.elapsed_focus_seconds == 120
        assert "Full session: 2 min focused" in out.getvalue()

        app.abandon()
        assert len(done) == 1
        assert len(recent_sessions()) == 1

    def test_break_ran_out_during_catch_up_is_recorded(self, qapp):
        engine = SessionTimerEngine(SHORT)
        engine.start()
        run_ticks(engine, 70)
        engine.pause()
        engine.enter_break()
        run_ticks(engine, 10)
        save_active_session(SHORT, engine.get_state(), CAPTURED)

        restored = restore_engine(CAPTURED + timedelta(hours=1), catch_up=True)
        assert restored.get_state().is_break_over
        app, _driver, out, done = _make_app(
            qapp, engine=restored, settled=active_session_settled(),
        )
        app.begin()

        assert len(done) == 1
        assert done.last.completed is False
        row = recent_sessions()[0]
        assert row.was_completed is False
        assert row.elapsed_focus_seconds == 70
        assert row.actions_applied == 1
        assert load_active_session() is None
        assert "Partial session" in out.getvalue()

    def test_interrupt_remembers_settlement(self, qapp):
        app, driver, _out, _done = _make_app(qapp)
        app.begin()
        _timeouts(driver, 130)
        app.interrupt()

        assert active_session_settled()
        restored = restore_engine()
        app2, driver2, _out2, done2 = _make_app(
            qapp, engine=restored, settled=active_session_settled(),
        )
        app2.begin()
        _timeouts(driver2, 110)
        assert len(done2) == 1
        assert len(recent_sessions()) == 1

    def test_earned_actions_applied_to_game(self, qapp):
        game = {
            "nations": [{
                "nation_tag": "FRA", "gold": 100, "research_points": 0,
                "provinces": [{"id": "galicia", "gold_income": 2, "industry": 1,
                               "army": 0, "population": 1000}],
            }],
        }
        app, driver, _out, _done = _make_app(qapp, game=game)
        app.begin()
        _timeouts(driver, 120)

        province = app.game["nations"][0]["provinces"][0]
        assert province["industry"] == 2
        assert game["nations"][0]["provinces"][0]["industry"] == 1
        assert recent_sessions()[0].actions_applied == 1


class TestMain:

    @pytest.fixture(autouse=True)
    def _settings(self, tmp_path, monkeypatch):
        monkeypatch.setattr("ageoffocus.settings.SETTINGS_PATH", tmp_path / "settings.json")
        monkeypatch.setattr("ageoffocus.settings.APP_SUPPORT_DIR", tmp_path)

    def test_abandon_saved_session(self, qapp, config, capsys):
        engine = SessionTimerEngine(config)
        engine.start()
        run_ticks(engine, 400)
        save_active_session(config, engine.get_state(), datetime.now())

        main(["--abandon"])

        assert load_active_session() is None
        with get_session() as db:
            row = db.query(FocusSession).one()
            assert row.was_completed is False
            assert row.elapsed_focus_seconds == 400
        assert "Partial session" in capsys.readouterr().out

    def test_abandon_without_saved_session(self, qapp, capsys):
        main(["--abandon"])
        assert "No saved session." in capsys.readouterr().out

    def test_bad_config_exits(self, qapp):
        with pytest.raises(SystemExit):
            main(["--interval", "0"])
