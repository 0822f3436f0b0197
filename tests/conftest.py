"""Shared fixtures for pengingat-bot tests."""

import os

os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")

import pytest

from pengingat_bot.errors import AssistantError, ConnectivityError, TransportError


class FakeTransport:
    """In-memory transport: records sends, fails on demand."""

    def __init__(self) -> None:
        self.connected = True
        self.sent: list[tuple[str, str]] = []
        self.fail_for: set[str] = set()
        self.connect_failures = 0
        self.connect_calls = 0
        self.handler = None

    def set_handler(self, handler) -> None:
        self.handler = handler

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_failures > 0:
            self.connect_failures -= 1
            raise ConnectivityError("network down")
        self.connected = True

    def is_connected(self) -> bool:
        return self.connected

    async def disconnect(self) -> None:
        self.connected = False

    async def send(self, recipient_id: str, text: str) -> None:
        if recipient_id in self.fail_for:
            raise TransportError(f"cannot reach {recipient_id}")
        self.sent.append((recipient_id, text))


class FakeAssistant:
    def __init__(self) -> None:
        self.prompts: list[str] = []
        self.answer = "jawaban"
        self.fail = False

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise AssistantError("backend unavailable")
        return self.answer


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "events.db"


@pytest.fixture()
def store(db_path):
    from pengingat_bot.scheduling.events import EventStore

    return EventStore(db_path)


@pytest.fixture()
def transport():
    return FakeTransport()


@pytest.fixture()
def assistant():
    return FakeAssistant()
