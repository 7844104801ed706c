"""Allow running Age of Focus as a module: python -m ageoffocus."""

import argparse
import logging
import signal
import sys

from PyQt6.QtCore import QCoreApplication, QTimer

from .app import FocusApp
from .database.db import configure_engine, init_db
from .database.store import active_session_settled, clear_active_session, restore_engine
from .errors import ConfigError, InvalidSessionState
from .settings import load_settings
from .timer.driver import TimerDriver
from .timer.engine import SessionTimerEngine

logger = logging.getLogger("ageoffocus")


def _parse_args(argv):
    parser = argparse.ArgumentParser(
        prog="ageoffocus",
        description="Focus to earn break time and move your nation forward.",
    )
    parser.add_argument("--focus", type=int, help="focus duration in minutes")
    parser.add_argument("--interval", type=int, help="reward interval in minutes")
    parser.add_argument("--reward", type=int, help="break minutes earned per interval")
    parser.add_argument("--resume", action="store_true", help="continue the saved session")
    parser.add_argument(
        "--abandon", action="store_true",
        help="settle the saved session as a partial completion and exit",
    )
    parser.add_argument("--db", metavar="URL", help="SQLAlchemy database URL")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser, parser.parse_args(argv)


def main(argv=None) -> None:
    parser, args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.db:
        configure_engine(args.db)
    init_db()

    settings = load_settings()
    if args.focus is not None:
        settings.focus_duration_minutes = args.focus
    if args.interval is not None:
        settings.reward_interval_minutes = args.interval
    if args.reward is not None:
        settings.reward_amount_minutes = args.reward
    try:
        config = settings.session_config()
    except ConfigError as exc:
        parser.error(str(exc))

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("AgeOfFocus")

    engine = None
    settled = False
    if args.resume or args.abandon:
        try:
            engine = restore_engine(catch_up=settings.catch_up_on_restore)
            settled = engine is not None and active_session_settled()
        except InvalidSessionState as exc:
            logger.warning("discarding unusable saved session: %s", exc)
            clear_active_session()
        if engine is None:
            if args.abandon:
                print("No saved session.")
                return
            print("No saved session to resume; starting a new one.")
    if engine is None:
        engine = SessionTimerEngine(config)

    driver = TimerDriver(engine)
    focus_app = FocusApp(driver, settled=settled)
    focus_app.finished.connect(lambda _outcome: app.quit())

    if args.abandon:
        focus_app.abandon()
        return

    # Python signal handlers only run between Qt events; wake up regularly.
    signal.signal(signal.SIGINT, lambda *_: focus_app.interrupt())
    wake = QTimer()
    wake.start(250)
    wake.timeout.connect(lambda: None)

    QTimer.singleShot(0, focus_app.begin)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
