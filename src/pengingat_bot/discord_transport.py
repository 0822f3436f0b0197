"""Discord implementation of the transport interface.

The client runs with ``reconnect=False`` so discord.py never retries on its
own: a dropped gateway surfaces as a Disconnected event and the connection
supervisor decides when to call ``connect()`` again. Only direct messages from
human users are forwarded as inbound messages.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

import discord

from pengingat_bot.errors import ConnectivityError, TransportError
from pengingat_bot.transport import (
    Connected,
    Disconnected,
    EventHandler,
    InboundEvent,
    Message,
)

log = logging.getLogger(__name__)

MAX_MSG_LEN = 2000


def split_message(text: str, limit: int = MAX_MSG_LEN) -> list[str]:
    """Split on line boundaries where possible so no chunk exceeds `limit`."""
    chunks: list[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks or [""]


class DiscordTransport:
    """One discord.Client per gateway session.

    A closed discord.py client drops its event loop and cannot be started
    again, so every ``connect()`` after the first retires the old client and
    builds a fresh one with the same handlers.
    """

    def __init__(self, token: str) -> None:
        self._token = token
        self._client = self._new_client()
        self._handler: EventHandler | None = None
        self._runner: asyncio.Task[None] | None = None
        self._started = False
        self._connected = False
        self._closing = False

    def _new_client(self) -> discord.Client:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.dm_messages = True
        client = discord.Client(intents=intents)
        self._register_events(client)
        return client

    def set_handler(self, handler: EventHandler) -> None:
        self._handler = handler

    async def _emit(self, event: InboundEvent) -> None:
        if self._handler is not None:
            await self._handler(event)

    def _register_events(self, client: discord.Client) -> None:
        # Events from a retired client are dropped.

        @client.event
        async def on_ready():
            if client is not self._client:
                return
            self._connected = True
            log.info("Connected to Discord as %s", client.user)
            await self._emit(Connected())

        @client.event
        async def on_resumed():
            if client is not self._client:
                return
            self._connected = True
            await self._emit(Connected())

        @client.event
        async def on_disconnect():
            if client is not self._client:
                return
            self._connected = False
            if self._closing:
                return
            await self._emit(Disconnected(reason="gateway connection closed"))

        @client.event
        async def on_message(message: discord.Message):
            if client is not self._client:
                return
            if message.author.bot:
                return
            if not isinstance(message.channel, discord.DMChannel):
                return
            await self._emit(Message(sender=str(message.author.id), text=message.content))

    def is_connected(self) -> bool:
        return self._connected and not self._client.is_closed()

    async def _retire_session(self) -> None:
        old, runner = self._client, self._runner
        self._runner = None
        # close() also waits for a close already started by the gateway.
        await old.close()
        if runner is not None and not runner.done():
            runner.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await runner
        self._client = self._new_client()

    async def connect(self) -> None:
        self._closing = False
        self._connected = False
        if self._started:
            await self._retire_session()
        self._started = True
        client = self._client
        try:
            await client.login(self._token)
        except Exception as e:
            raise ConnectivityError(f"login failed: {e}") from e

        runner = asyncio.create_task(client.connect(reconnect=False))
        runner.add_done_callback(self._on_runner_done)
        self._runner = runner
        ready = asyncio.create_task(client.wait_until_ready())
        done, _ = await asyncio.wait({runner, ready}, return_when=asyncio.FIRST_COMPLETED)
        if ready in done:
            self._connected = True
            return
        ready.cancel()
        exc = None if runner.cancelled() else runner.exception()
        raise ConnectivityError(f"gateway closed before ready: {exc or 'no error'}")

    def _on_runner_done(self, task: asyncio.Task[None]) -> None:
        if task is self._runner:
            self._connected = False
        if task.cancelled():
            return
        if exc := task.exception():
            log.warning("Discord gateway stopped: %s", exc)

    async def disconnect(self) -> None:
        self._closing = True
        self._connected = False
        if not self._client.is_closed():
            await self._client.close()
        runner, self._runner = self._runner, None
        if runner is not None and not runner.done():
            runner.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await runner

    async def send(self, recipient_id: str, text: str) -> None:
        try:
            user_id = int(recipient_id)
        except ValueError as e:
            raise TransportError(f"invalid Discord user id: {recipient_id!r}") from e
        try:
            user = self._client.get_user(user_id) or await self._client.fetch_user(
                user_id
            )
            for chunk in split_message(text):
                await user.send(chunk)
        except discord.DiscordException as e:
            raise TransportError(f"send to {recipient_id} failed: {e}") from e
