"""
Page.configure 重置与生命周期测试
"""

import asyncio

import pytest

from pagepipe.exceptions import ReentrancyError
from pagepipe.page.page import Page
from pagepipe.page.pagelet import Pagelet


class Header(Pagelet):
    pass


class AdminPanel(Pagelet):
    def authorize(self, request):
        return request is not None and request.get("role") == "admin"


class DashboardPage(Page):
    env = "production"
    pagelets = {"header": Header, "admin": AdminPanel}


def names(pagelets):
    return [pagelet.name for pagelet in pagelets]


@pytest.mark.asyncio
async def test_configure_returns_self_and_stores_context():
    page = DashboardPage()
    request, response = {"role": "admin"}, object()

    result = await page.configure(request, response)

    assert result is page
    assert page.request is request
    assert page.response is response
    assert names(page.enabled_pagelets) == ["header", "admin"]


@pytest.mark.asyncio
async def test_configure_clears_connections_and_conditionals():
    page = DashboardPage()
    page.connections.add("c1", object())
    page.conditional_pagelets.append(Header)

    await page.configure({"role": "guest"})

    assert len(page.connections) == 0
    assert page.conditional_pagelets == []


@pytest.mark.asyncio
async def test_configure_removes_previous_listeners():
    page = DashboardPage()
    calls = []
    page.on("render", lambda: calls.append("render"))
    page.once("done", lambda: calls.append("done"))

    await page.configure({"role": "guest"})

    assert page.listener_count() == 0
    assert page.emit("render") is False
    assert page.emit("done") is False
    assert calls == []


@pytest.mark.asyncio
async def test_configure_twice_is_deterministic():
    page = DashboardPage()
    request = {"role": "guest"}

    await page.configure(request)
    first = (names(page.enabled_pagelets), names(page.disabled_pagelets))

    await page.configure(request)
    second = (names(page.enabled_pagelets), names(page.disabled_pagelets))

    assert first == second == (["header"], ["admin"])


@pytest.mark.asyncio
async def test_reset_state_is_empty_before_discovery():
    observed = {}

    class Probe(Pagelet):
        def configure(self, page):
            if not observed:
                observed["enabled"] = list(page.enabled_pagelets)
                observed["disabled"] = list(page.disabled_pagelets)
                observed["connections"] = len(page.connections)
            return super().configure(page)

    class ProbePage(Page):
        env = "production"
        pagelets = {"probe": Probe, "header": Header}

    page = ProbePage()
    await page.configure({})
    page.connections.add("c1", object())

    observed.clear()
    await page.configure({})

    assert observed == {"enabled": [], "disabled": [], "connections": 0}


@pytest.mark.asyncio
async def test_previous_pagelets_are_returned_to_pool():
    page = DashboardPage()
    await page.configure({"role": "admin"})
    first = list(page.enabled_pagelets)

    await page.configure({"role": "admin"})

    assert [id(p) for p in page.enabled_pagelets] == [id(p) for p in first]
    assert all(pagelet.page is page for pagelet in page.enabled_pagelets)


@pytest.mark.asyncio
async def test_overlapping_configure_is_rejected():
    gate = asyncio.Event()

    class Blocking(Pagelet):
        async def authorize(self, request):
            await gate.wait()
            return True

    class BlockingPage(Page):
        env = "production"
        pagelets = {"blocking": Blocking}

    page = BlockingPage()
    task = asyncio.ensure_future(page.configure({"id": 1}))
    await asyncio.sleep(0)

    with pytest.raises(ReentrancyError):
        await page.configure({"id": 2})

    gate.set()
    assert await task is page
    assert page.request == {"id": 1}
    assert names(page.enabled_pagelets) == ["blocking"]

    # 完成后可以再次配置
    await page.configure({"id": 3})
    assert page.request == {"id": 3}


@pytest.mark.asyncio
async def test_alloc_and_free_reuse_instances():
    class PooledPage(Page):
        env = "production"
        pagelets = {"header": Header}

    page = PooledPage.alloc()
    await page.configure({})
    page.on("render", lambda: None)

    assert page.free() is True
    assert page.enabled_pagelets == []
    assert page.listener_count() == 0

    assert PooledPage.alloc() is page
    assert PooledPage.alloc() is not page
