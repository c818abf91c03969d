"""
测试公共夹具
"""

import asyncio

import pytest

from pagepipe.config.environment import set_default_environment
from pagepipe.page import pool


@pytest.fixture
def restore_pool_defaults():
    """测试结束后恢复对象池默认容量"""
    saved = dict(pool._DEFAULT_CAPACITY)
    yield
    pool._DEFAULT_CAPACITY.clear()
    pool._DEFAULT_CAPACITY.update(saved)


class FakeWebSocket:
    """测试用 WebSocket 连接"""

    def __init__(self, error: Exception = None):
        self.sent = []
        self.error = error
        self._closed = None

    async def send(self, data):
        if self.error is not None:
            raise self.error
        self.sent.append(data)

    async def wait_closed(self):
        if self._closed is None:
            self._closed = asyncio.Event()
        await self._closed.wait()

    def close(self):
        if self._closed is None:
            self._closed = asyncio.Event()
        self._closed.set()


@pytest.fixture
def fake_websocket():
    return FakeWebSocket


@pytest.fixture(autouse=True)
def restore_default_environment():
    """测试结束后清除 bootstrap 设置的默认运行环境"""
    yield
    set_default_environment(None)
