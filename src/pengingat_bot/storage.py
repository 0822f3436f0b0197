"""SQLite connection helper for the events table.

Every operation opens its own short-lived connection; the schema is created
lazily on each open so a fresh database file needs no bootstrap step.
"""

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from pengingat_bot.errors import PersistenceError

log = logging.getLogger(__name__)

SCHEMA = """\
CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    recipient_id TEXT NOT NULL,
    date TEXT NOT NULL,
    time TEXT NOT NULL,
    note TEXT NOT NULL
)"""

# Seconds SQLite waits on a locked database before raising.
BUSY_TIMEOUT = 10.0


@contextlib.contextmanager
def connect(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Open, ensure the schema, and commit on success. sqlite errors become PersistenceError."""
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_path, timeout=BUSY_TIMEOUT)
    except (OSError, sqlite3.Error) as e:
        raise PersistenceError(f"error opening database {db_path}: {e}") from e
    try:
        conn.row_factory = sqlite3.Row
        with conn:
            conn.execute(SCHEMA)
            yield conn
    except sqlite3.Error as e:
        log.error("database error on %s: %s", db_path, e)
        raise PersistenceError(f"database error: {e}") from e
    finally:
        conn.close()
