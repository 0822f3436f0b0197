"""Scheduling: the event store and the periodic reminder tick."""

from pengingat_bot.scheduling.events import Event, EventStore, validate_event
from pengingat_bot.scheduling.scheduler import (
    TickResult,
    check_due_events,
    format_reminder,
    setup_scheduler,
)

__all__ = [
    "Event",
    "EventStore",
    "TickResult",
    "check_due_events",
    "format_reminder",
    "setup_scheduler",
    "validate_event",
]
