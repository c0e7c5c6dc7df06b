"""Entry point for the waiter-menu Textual app."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from waiter_app.config import DB_PATH, DEBUG_LOG_PATH, REPORT_DIR
from waiter_app.errors import PersistenceFailure
from waiter_app.persistence import MemoryStore, SqliteStore
from waiter_app.state import OrderBook
from waiter_app.waiter_tui import WaiterApp


def setup_logging(level: int = logging.INFO, log_path: str = DEBUG_LOG_PATH) -> None:
    """Send application logs to the debug log file; the terminal belongs to the UI."""
    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.FileHandler(path, encoding="utf-8")],
    )


def main(argv: list[str] | None = None) -> None:
    """Run the Textual application."""
    parser = argparse.ArgumentParser(prog="waiter-menu", description="Restaurant table order management")
    parser.add_argument("--db", default=DB_PATH, help="SQLite state file")
    parser.add_argument("--no-persist", action="store_true", help="keep state in memory only")
    parser.add_argument("--no-printer", action="store_true", help="disable the thermal bill printer")
    parser.add_argument("--report-dir", default=REPORT_DIR, help="directory for daily report PDFs")
    parser.add_argument("--debug", action="store_true", help="verbose debug log")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.debug else logging.INFO)
    logger = logging.getLogger(__name__)

    if args.no_persist:
        store = MemoryStore()
    else:
        store = SqliteStore(args.db)
        try:
            store.bootstrap_schema()
        except PersistenceFailure as exc:
            logger.error("schema_bootstrap_failed path=%s error=%s", args.db, exc)
            store = MemoryStore()
    book = OrderBook(store)
    logger.info("starting db=%s persist=%s", args.db, not args.no_persist)
    WaiterApp(book, report_dir=args.report_dir, printer_enabled=not args.no_printer).run()


if __name__ == "__main__":
    main()
