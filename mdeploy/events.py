from __future__ import annotations

import logging
import os
import sqlite3
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("mdeploy")

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class EventLog:
    """Deploy events: always logged, optionally journaled to sqlite.

    The journal keeps a history of what was deployed where across runs, so a
    build server can show it later (``mdeploy events``).
    """

    def __init__(self, db_path: str | None = None, host: str | None = None):
        self.db_path = _resolve_db_path(db_path) if db_path else None
        self.host = host
        if self.db_path:
            self.init_db()

    def connect(self) -> sqlite3.Connection:
        if not self.db_path:
            raise RuntimeError("event journal is disabled (no db path configured)")
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the events table if it does not exist."""
        with self.connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS events (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  ts TEXT NOT NULL,
                  level TEXT NOT NULL,
                  app_id TEXT,
                  host TEXT,
                  message TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_events_ts ON events(ts);
                """
            )

    def log(self, level: str, message: str, app_id: str | None = None) -> None:
        level = level.upper()
        if level not in LEVELS:
            raise ValueError(f"unknown event level {level!r}")
        logger.log(LEVELS[level], message, extra={"app_id": app_id, "host": self.host})
        if not self.db_path:
            return
        with self.connect() as conn:
            conn.execute(
                "INSERT INTO events (ts, level, app_id, host, message) VALUES (?, ?, ?, ?, ?)",
                (utc_now(), "WARN" if level == "WARNING" else level, app_id, self.host, message),
            )

    def latest(self, limit: int = 100) -> list[dict[str, Any]]:
        if not self.db_path:
            return []
        with self.connect() as conn:
            rows = conn.execute("SELECT * FROM events ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
            return [dict(r) for r in rows]


def _resolve_db_path(path: str) -> str:
    """Return a file path usable by sqlite.

    A directory (e.g. a bind mount on a CI runner) gets an events.db inside it.
    """
    p = os.path.abspath(path)
    if os.path.isdir(p):
        p = os.path.join(p, "events.db")
    parent = os.path.dirname(p)
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)
    return p
