"""Periodic reminder delivery via APScheduler.

Every tick looks up events whose date and time strings equal the current civil
minute, sends each one, then deletes the whole slot. Sends are attempted once:
a failed delivery is logged and the row is deleted with the rest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from pengingat_bot import clock
from pengingat_bot.config import TICK_SECONDS, TZ
from pengingat_bot.connection import ConnectionSupervisor
from pengingat_bot.errors import PersistenceError, TransportError
from pengingat_bot.gateway import DeliveryGateway
from pengingat_bot.scheduling.events import EventStore
from pengingat_bot.transport import Transport

log = logging.getLogger(__name__)

REMINDER_JOB_ID = "check_due_events"


@dataclass(frozen=True, slots=True)
class TickResult:
    skipped: bool = False
    sent: int = 0
    failed: int = 0
    deleted: int = 0


def format_reminder(note: str) -> str:
    return f"Pengingat Acara:\nKeterangan: {note}"


async def check_due_events(
    store: EventStore,
    gateway: DeliveryGateway,
    transport: Transport,
    supervisor: ConnectionSupervisor,
    *,
    at: datetime | None = None,
) -> TickResult:
    """Run one tick. Store errors end this tick only; send errors are per-row."""
    if not transport.is_connected():
        log.info("Transport is not connected. Skipping reminder check.")
        supervisor.request_reconnect()
        return TickResult(skipped=True)

    today, now = clock.civil_now(at)
    log.debug("Checking reminders for date: %s, time: %s", today, now)

    try:
        due = store.due_events(today, now)
    except PersistenceError as e:
        log.error("Error querying due events: %s", e)
        return TickResult()
    if not due:
        return TickResult()

    sent = failed = 0
    for event in due:
        try:
            await gateway.send(event.recipient_id, format_reminder(event.note))
        except TransportError as e:
            failed += 1
            log.error("Error sending reminder to %s: %s", event.recipient_id, e)
        else:
            sent += 1
            log.info("Reminder sent successfully to %s", event.recipient_id)

    try:
        deleted = store.delete_due(today, now)
    except PersistenceError as e:
        log.error("Error deleting delivered events: %s", e)
        deleted = 0
    return TickResult(sent=sent, failed=failed, deleted=deleted)


def setup_scheduler(
    store: EventStore,
    gateway: DeliveryGateway,
    transport: Transport,
    supervisor: ConnectionSupervisor,
    *,
    tick_seconds: int = TICK_SECONDS,
) -> AsyncIOScheduler:
    """Registers the reminder tick; the caller starts the scheduler."""
    scheduler = AsyncIOScheduler(timezone=TZ)

    async def _tick() -> None:
        await check_due_events(store, gateway, transport, supervisor)

    scheduler.add_job(
        _tick,
        IntervalTrigger(seconds=tick_seconds),
        id=REMINDER_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    return scheduler
