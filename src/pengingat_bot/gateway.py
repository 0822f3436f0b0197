"""Thin send primitive shared by command replies and scheduled reminders."""

import logging

from pengingat_bot.errors import TransportError
from pengingat_bot.transport import Transport

log = logging.getLogger(__name__)


class DeliveryGateway:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def send(self, recipient_id: str, text: str) -> None:
        """Raises TransportError; the caller decides how to report it."""
        try:
            await self._transport.send(recipient_id, text)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"send to {recipient_id} failed: {e}") from e

    async def reply(self, recipient_id: str, text: str) -> bool:
        """Best-effort send: failures are logged, never raised."""
        try:
            await self.send(recipient_id, text)
        except TransportError as e:
            log.error("Error sending message to %s: %s", recipient_id, e)
            return False
        return True
