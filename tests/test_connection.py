"""Tests for connection.py — backoff, serialized reconnects, single-task dispatch."""

import asyncio

import pytest

from pengingat_bot.connection import (
    BACKOFF_CEILING,
    Backoff,
    ConnectionState,
    ConnectionSupervisor,
)


def _run(coro):
    return asyncio.run(coro)


def _recording_sleep():
    delays: list[float] = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    return delays, sleep


def test_backoff_doubles_and_caps():
    backoff = Backoff()

    delays = [backoff.next_delay() for _ in range(14)]

    assert delays[:10] == [1, 2, 4, 8, 16, 32, 64, 128, 256, 300]
    assert all(d == BACKOFF_CEILING for d in delays[9:])


def test_backoff_reset_returns_to_floor():
    backoff = Backoff()
    for _ in range(5):
        backoff.next_delay()

    backoff.reset()

    assert backoff.next_delay() == 1


def test_ensure_connected_fast_path(transport):
    supervisor = ConnectionSupervisor(transport)

    _run(supervisor.ensure_connected())

    assert transport.connect_calls == 0
    assert supervisor.state is ConnectionState.CONNECTED


def test_ensure_connected_retries_with_backoff_until_connected(transport):
    transport.connected = False
    transport.connect_failures = 12
    delays, sleep = _recording_sleep()
    backoff = Backoff()
    supervisor = ConnectionSupervisor(transport, backoff=backoff, sleep=sleep)

    _run(supervisor.ensure_connected())

    assert transport.connect_calls == 13
    assert delays == [1, 2, 4, 8, 16, 32, 64, 128, 256, 300, 300, 300]
    assert max(delays) <= BACKOFF_CEILING
    assert supervisor.state is ConnectionState.CONNECTED
    assert backoff.current == 1


def test_backoff_resets_between_outages(transport):
    delays, sleep = _recording_sleep()
    supervisor = ConnectionSupervisor(transport, sleep=sleep)

    async def scenario():
        for _ in range(2):
            transport.connected = False
            transport.connect_failures = 3
            await supervisor.ensure_connected()

    _run(scenario())

    assert delays == [1, 2, 4, 1, 2, 4]


def test_concurrent_callers_share_one_reconnect(transport):
    transport.connected = False

    async def slow_connect():
        transport.connect_calls += 1
        await asyncio.sleep(0.01)
        transport.connected = True

    transport.connect = slow_connect
    supervisor = ConnectionSupervisor(transport)

    async def scenario():
        await asyncio.gather(*(supervisor.ensure_connected() for _ in range(3)))

    _run(scenario())

    assert transport.connect_calls == 1


def test_request_reconnect_coalesces_requests(transport):
    transport.connected = False
    supervisor = ConnectionSupervisor(transport)

    async def scenario():
        gate = asyncio.Event()

        async def gated_connect():
            transport.connect_calls += 1
            await gate.wait()
            transport.connected = True

        transport.connect = gated_connect
        supervisor.request_reconnect()
        supervisor.request_reconnect()
        await asyncio.sleep(0)
        supervisor.request_reconnect()
        assert supervisor.reconnecting
        gate.set()
        while supervisor.reconnecting:
            await asyncio.sleep(0)

    _run(scenario())

    assert transport.connect_calls == 1
    assert supervisor.state is ConnectionState.CONNECTED


def test_request_reconnect_does_not_block_caller(transport):
    transport.connected = False
    transport.connect_failures = 1000

    async def scenario():
        supervisor = ConnectionSupervisor(transport, sleep=lambda _: asyncio.sleep(3600))
        supervisor.request_reconnect()
        assert supervisor.reconnecting
        await asyncio.sleep(0)
        assert supervisor.state is ConnectionState.DISCONNECTED
        await supervisor.close()
        assert not supervisor.reconnecting

    _run(scenario())

    assert transport.connect_calls == 1


def test_mark_disconnected_only_from_connected(transport):
    supervisor = ConnectionSupervisor(transport)
    supervisor.mark_connected()

    supervisor.mark_disconnected()

    assert supervisor.state is ConnectionState.DISCONNECTED


def test_unexpected_connect_error_leaves_state_disconnected(transport):
    transport.connected = False

    async def broken_connect():
        raise RuntimeError("adapter bug")

    transport.connect = broken_connect
    supervisor = ConnectionSupervisor(transport)

    with pytest.raises(RuntimeError, match="adapter bug"):
        _run(supervisor.ensure_connected())

    assert supervisor.state is ConnectionState.DISCONNECTED
