"""Wires transport, supervisor, interpreter and scheduler into one bot."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, assert_never

from pengingat_bot.commands import Assistant, CommandInterpreter
from pengingat_bot.config import TICK_SECONDS
from pengingat_bot.connection import ConnectionSupervisor
from pengingat_bot.gateway import DeliveryGateway
from pengingat_bot.scheduling import EventStore, setup_scheduler
from pengingat_bot.transport import (
    Connected,
    Disconnected,
    InboundEvent,
    Message,
    StreamReplaced,
    Transport,
)

if TYPE_CHECKING:
    from apscheduler.schedulers.asyncio import AsyncIOScheduler

log = logging.getLogger(__name__)


class ReminderBot:
    def __init__(
        self,
        transport: Transport,
        store: EventStore,
        assistant: Assistant,
        *,
        tick_seconds: int = TICK_SECONDS,
    ) -> None:
        self.transport = transport
        self.store = store
        self.supervisor = ConnectionSupervisor(transport)
        self.gateway = DeliveryGateway(transport)
        self.interpreter = CommandInterpreter(store, self.gateway, assistant)
        self.tick_seconds = tick_seconds
        self.scheduler: AsyncIOScheduler | None = None
        transport.set_handler(self.on_event)

    async def on_event(self, event: InboundEvent) -> None:
        match event:
            case Connected():
                self.supervisor.mark_connected()
                log.info("Transport connected")
            case Disconnected(reason=reason):
                log.warning("Disconnected from transport: %s", reason)
                self.supervisor.mark_disconnected()
                self.supervisor.request_reconnect()
            case StreamReplaced():
                log.warning("Stream replaced, reconnecting...")
                self.supervisor.mark_disconnected()
                self.supervisor.request_reconnect()
            case Message():
                await self.interpreter.handle_message(event)
            case _:
                assert_never(event)

    async def start(self) -> None:
        """Connect once (a failure here is fatal), then start ticking."""
        self.store.init()
        await self.transport.connect()
        self.scheduler = setup_scheduler(
            self.store,
            self.gateway,
            self.transport,
            self.supervisor,
            tick_seconds=self.tick_seconds,
        )
        self.scheduler.start()
        log.info("scheduler started: %d jobs", len(self.scheduler.get_jobs()))
        self.supervisor.request_reconnect()

    async def stop(self) -> None:
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        await self.supervisor.close()
        await self.transport.disconnect()
