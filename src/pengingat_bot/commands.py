"""Command interpreter: turns inbound chat text into events or assistant queries.

Grammar:

- ``/set`` replies with the event format help.
- A message starting with ``Tanggal: `` must be exactly three lines::

      Tanggal: DD-MM-YYYY
      Notifikasi: HH:MM
      Keterangan: <note>

- Anything else is forwarded to the assistant and its answer relayed back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from pengingat_bot.errors import (
    AssistantError,
    FormatError,
    PersistenceError,
    ValidationError,
)
from pengingat_bot.gateway import DeliveryGateway
from pengingat_bot.scheduling.events import Event, EventStore
from pengingat_bot.transport import Message, canonical_recipient

log = logging.getLogger(__name__)

HELP_COMMAND = "/set"
HELP_TEXT = (
    "Silahkan masukan format seperti berikut:\n"
    "Tanggal: DD-MM-YYYY\n"
    "Notifikasi: HH:MM\n"
    "Keterangan: Isi Keterangan Acara"
)
SAVED_TEXT = "Acara berhasil disimpan"
SAVE_FAILED_TEXT = "Gagal menyimpan acara, silakan coba lagi nanti"

_DATE_PREFIX = "Tanggal: "
_TIME_PREFIX = "Notifikasi: "
_NOTE_PREFIX = "Keterangan: "


class Assistant(Protocol):
    async def complete(self, prompt: str) -> str: ...


@dataclass(frozen=True, slots=True)
class EventRequest:
    date: str
    time: str
    note: str


def is_event_command(text: str) -> bool:
    return text.startswith(_DATE_PREFIX)


def parse_event_message(text: str) -> EventRequest:
    """Parse the three-line create command. Raises FormatError."""
    lines = text.strip().splitlines()
    if len(lines) != 3:
        raise FormatError("format pesan tidak sesuai, kurang data")

    fields = {_DATE_PREFIX: "", _TIME_PREFIX: "", _NOTE_PREFIX: ""}
    for line in lines:
        for prefix in fields:
            if line.startswith(prefix):
                fields[prefix] = line.removeprefix(prefix).strip()
                break

    missing = [prefix.rstrip(": ") for prefix, value in fields.items() if not value]
    if missing:
        raise FormatError(
            f"format pesan tidak sesuai, data belum diisi: {', '.join(missing)}"
        )
    return EventRequest(
        date=fields[_DATE_PREFIX],
        time=fields[_TIME_PREFIX],
        note=fields[_NOTE_PREFIX],
    )


class CommandInterpreter:
    def __init__(
        self, store: EventStore, gateway: DeliveryGateway, assistant: Assistant
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._assistant = assistant

    async def handle_message(self, message: Message) -> None:
        sender = canonical_recipient(message.sender)
        text = message.text.strip()
        if not text:
            return

        if text == HELP_COMMAND:
            await self._gateway.reply(sender, HELP_TEXT)
            return

        if is_event_command(text):
            await self._gateway.reply(sender, self._create_event(sender, text))
            return

        try:
            answer = await self._assistant.complete(text)
        except AssistantError as e:
            log.error("Error sending message to assistant: %s", e)
            return
        await self._gateway.reply(sender, answer)

    def _create_event(self, sender: str, text: str) -> str:
        """Returns the reply text for a create command."""
        try:
            request = parse_event_message(text)
            self._store.insert(
                Event(
                    recipient_id=sender,
                    date=request.date,
                    time=request.time,
                    note=request.note,
                )
            )
        except (FormatError, ValidationError) as e:
            return str(e)
        except PersistenceError:
            log.exception("Failed to save event for %s", sender)
            return SAVE_FAILED_TEXT
        return SAVED_TEXT
