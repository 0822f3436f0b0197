"""Event data model and the SQLite-backed event store.

An event is a one-shot reminder keyed by its civil ``(date, time)`` strings.
Rows are only ever inserted (by the command interpreter or the CLI) and
deleted (by the scheduler once the slot has been processed, or by cancel).
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path

from pengingat_bot import clock
from pengingat_bot.errors import ValidationError
from pengingat_bot.storage import connect
from pengingat_bot.transport import canonical_recipient

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Event:
    recipient_id: str
    date: str  # DD-MM-YYYY
    time: str  # HH:MM
    note: str
    id: int | None = None


def validate_event(event: Event, *, today: date) -> None:
    """Reject malformed date/time strings and dates before `today`."""
    event_date = clock.parse_civil_date(event.date)
    clock.parse_civil_time(event.time)
    if event_date < today:
        raise ValidationError("Tanggal acara tidak boleh sebelum hari ini")


class EventStore:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def init(self) -> None:
        """Create the schema now instead of on first use."""
        with connect(self.db_path):
            pass

    def insert(self, event: Event, *, today: date | None = None) -> Event:
        validate_event(event, today=today or clock.today())
        event = replace(event, recipient_id=canonical_recipient(event.recipient_id))
        with connect(self.db_path) as conn:
            cur = conn.execute(
                "INSERT INTO events (recipient_id, date, time, note) VALUES (?, ?, ?, ?)",
                (event.recipient_id, event.date, event.time, event.note),
            )
            stored = replace(event, id=cur.lastrowid)
        log.info("Event saved: %s", stored)
        return stored

    def due_events(self, date: str, time: str) -> list[Event]:
        with connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT id, recipient_id, date, time, note FROM events"
                " WHERE date = ? AND time = ?",
                (date, time),
            ).fetchall()
        return [_row_to_event(row) for row in rows]

    def delete_due(self, date: str, time: str) -> int:
        with connect(self.db_path) as conn:
            cur = conn.execute(
                "DELETE FROM events WHERE date = ? AND time = ?", (date, time)
            )
            return cur.rowcount

    def list_events(self, recipient_id: str | None = None) -> list[Event]:
        query = "SELECT id, recipient_id, date, time, note FROM events"
        params: tuple[str, ...] = ()
        if recipient_id is not None:
            query += " WHERE recipient_id = ?"
            params = (canonical_recipient(recipient_id),)
        with connect(self.db_path) as conn:
            rows = conn.execute(query + " ORDER BY id", params).fetchall()
        return [_row_to_event(row) for row in rows]

    def remove_event(self, event_id: int) -> bool:
        with connect(self.db_path) as conn:
            cur = conn.execute("DELETE FROM events WHERE id = ?", (event_id,))
            return cur.rowcount > 0


def _row_to_event(row) -> Event:
    return Event(
        recipient_id=row["recipient_id"],
        date=row["date"],
        time=row["time"],
        note=row["note"],
        id=row["id"],
    )
