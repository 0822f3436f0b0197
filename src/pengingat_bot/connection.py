"""Connection supervisor: keeps one live transport session.

Reconnects are serialized behind an asyncio.Lock so backoff state is never
touched by two attempts at once. Fire-and-forget triggers (disconnect
notifications, a tick that finds the transport down) go through
``request_reconnect``, which runs at most one supervisor task at a time.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from collections.abc import Awaitable, Callable

from pengingat_bot.errors import ConnectivityError
from pengingat_bot.transport import Transport

log = logging.getLogger(__name__)

BACKOFF_FLOOR = 1.0
BACKOFF_CEILING = 300.0


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class Backoff:
    """Doubling delay, reset to the floor after a success."""

    def __init__(
        self, floor: float = BACKOFF_FLOOR, ceiling: float = BACKOFF_CEILING
    ) -> None:
        self.floor = floor
        self.ceiling = ceiling
        self.current = floor

    def next_delay(self) -> float:
        delay = self.current
        self.current = min(self.current * 2, self.ceiling)
        return delay

    def reset(self) -> None:
        self.current = self.floor


class ConnectionSupervisor:
    def __init__(
        self,
        transport: Transport,
        *,
        backoff: Backoff | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._backoff = backoff or Backoff()
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None
        self.state = ConnectionState.DISCONNECTED

    @property
    def reconnecting(self) -> bool:
        return self._task is not None and not self._task.done()

    async def ensure_connected(self) -> None:
        """Block until the transport is connected. Callers queue on the lock."""
        async with self._lock:
            if self._transport.is_connected():
                self.state = ConnectionState.CONNECTED
                return
            while True:
                self.state = ConnectionState.CONNECTING
                log.info("Transport disconnected. Attempting to reconnect...")
                try:
                    await self._transport.connect()
                except ConnectivityError as e:
                    self.state = ConnectionState.DISCONNECTED
                    delay = self._backoff.next_delay()
                    log.warning("Failed to reconnect: %s. Retrying in %.0fs...", e, delay)
                    await self._sleep(delay)
                    continue
                except BaseException:
                    self.state = ConnectionState.DISCONNECTED
                    raise
                self._backoff.reset()
                self.state = ConnectionState.CONNECTED
                log.info("Successfully reconnected")
                return

    def request_reconnect(self) -> None:
        """Schedule ensure_connected() in the background unless one is in flight."""
        if self.reconnecting:
            return
        self._task = asyncio.get_running_loop().create_task(self.ensure_connected())
        self._task.add_done_callback(self._on_task_done)

    def mark_connected(self) -> None:
        self.state = ConnectionState.CONNECTED

    def mark_disconnected(self) -> None:
        if self.state is ConnectionState.CONNECTED:
            self.state = ConnectionState.DISCONNECTED

    async def close(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        if exc := task.exception():
            log.error("Reconnect task failed", exc_info=exc)
