"""
ConnectionRegistry 测试
"""

import pytest
from websockets.exceptions import ConnectionClosed

from pagepipe.realtime.connection_registry import ConnectionRegistry


def test_add_get_remove(fake_websocket):
    registry = ConnectionRegistry()
    socket = fake_websocket()
    connection_id = registry.generate_id()

    registry.add(connection_id, socket)

    assert connection_id in registry
    assert registry.get(connection_id) is socket
    assert registry.ids() == [connection_id]
    assert list(registry) == [connection_id]
    assert registry.remove(connection_id) is True
    assert registry.remove(connection_id) is False
    assert len(registry) == 0


def test_generate_id_is_unique():
    registry = ConnectionRegistry()
    assert registry.generate_id() != registry.generate_id()


def test_clear_returns_count(fake_websocket):
    registry = ConnectionRegistry()
    registry.add("a", fake_websocket())
    registry.add("b", fake_websocket())

    assert registry.clear() == 2
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_broadcast_drops_failed_connections(fake_websocket):
    registry = ConnectionRegistry()
    healthy = fake_websocket()
    registry.add("healthy", healthy)
    registry.add("closed", fake_websocket(error=ConnectionClosed(None, None)))
    registry.add("broken", fake_websocket(error=OSError("reset")))

    delivered = await registry.broadcast(b"update")

    assert delivered == 1
    assert healthy.sent == [b"update"]
    assert registry.ids() == ["healthy"]


@pytest.mark.asyncio
async def test_broadcast_without_connections():
    assert await ConnectionRegistry().broadcast("x") == 0


@pytest.mark.asyncio
async def test_send_to_single_connection(fake_websocket):
    registry = ConnectionRegistry()
    socket = fake_websocket()
    registry.add("a", socket)
    registry.add("b", fake_websocket(error=ConnectionClosed(None, None)))

    assert await registry.send("a", "hello") is True
    assert await registry.send("b", "hello") is False
    assert await registry.send("missing", "hello") is False
    assert socket.sent == ["hello"]
    assert "b" not in registry
