"""
Shared fixtures: a manual clock scheduler, a scripted fetcher and
provider-shaped HTML fixtures.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import pytest

from search_expander.adapters.google import GoogleAdapter
from search_expander.config import ExpansionConfig
from search_expander.document import DocumentView
from search_expander.engines.base import EngineState
from search_expander.engines.expansion import ExpansionController
from search_expander.ui.notifier import Notifier
from search_expander.utils.http import FetchError
from search_expander.utils.timers import TimerHandle

GOOGLE_URL = "https://www.google.com/search?q=python"
BAIDU_URL = "https://www.baidu.com/s?wd=python"
BING_URL = "https://www.bing.com/search?q=python"

SNIPPET = "A search result snippet that is comfortably longer than fifty characters."


# ============================================================================
# Fakes
# ============================================================================

@dataclass
class _Timer:
    due: float
    seq: int
    callback: Callable[[], Any]
    interval: Optional[float] = None
    active: bool = True


class FakeScheduler:
    """Scheduler on a manual clock. Awaitables returned by callbacks are queued for ``drain``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._seq = 0
        self._timers: List[_Timer] = []
        self.spawned: List[Any] = []

    def _add(self, delay: float, callback: Callable[[], Any], interval: Optional[float]) -> TimerHandle:
        self._seq += 1
        timer = _Timer(self.now + delay, self._seq, callback, interval)
        self._timers.append(timer)

        def cancel() -> None:
            timer.active = False

        return TimerHandle(cancel)

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        return self._add(delay, callback, None)

    def call_every(self, interval: float, callback: Callable[[], Any]) -> TimerHandle:
        return self._add(interval, callback, interval)

    def spawn(self, result: Any) -> None:
        if inspect.isawaitable(result):
            self.spawned.append(result)

    @property
    def pending(self) -> int:
        return len([t for t in self._timers if t.active])

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if t.active and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self.now = timer.due
            if timer.interval is None:
                timer.active = False
            else:
                timer.due += timer.interval
            self.spawn(timer.callback())
        self.now = target

    async def drain(self) -> None:
        while self.spawned:
            await self.spawned.pop(0)


class FakeFetcher:
    """Serves canned pages by URL and records every request."""

    def __init__(self, pages: Optional[Dict[str, str]] = None, default: Optional[str] = None) -> None:
        self.pages = dict(pages or {})
        self.default = default
        self.calls: List[str] = []
        self.errors: Dict[str, Exception] = {}
        self.gate: Optional[asyncio.Event] = None

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if url in self.errors:
            raise self.errors[url]
        if url in self.pages:
            return self.pages[url]
        if self.default is not None:
            return self.default
        raise FetchError(url, "HTTP 404", status=404)


# ============================================================================
# HTML fixtures
# ============================================================================

def google_results(count: int, first: int = 1) -> str:
    return "".join(
        f'<div class="g"><h3>Result {first + i}</h3><span>{SNIPPET}</span></div>' for i in range(count)
    )


def google_page(count: int, first: int = 1) -> str:
    return (
        "<html><body>"
        f'<div id="search"><div id="rso">{google_results(count, first)}</div></div>'
        '<div id="foot"><table><tr><td role="heading">Goooogle</td></tr></table></div>'
        "</body></html>"
    )


def baidu_page(count: int, first: int = 1) -> str:
    results = "".join(
        f'<div class="result c-container" id="{first + i}"><h3>Baidu result {first + i}</h3></div>'
        for i in range(count)
    )
    return (
        "<html><body>"
        f'<div id="content_left">{results}</div>'
        '<div id="page"><a href="/s?wd=python&amp;pn=10">2</a></div>'
        "</body></html>"
    )


def bing_page(count: int, first: int = 1) -> str:
    results = "".join(
        f'<li class="b_algo"><h2>Bing result {first + i}</h2>'
        f'<img data-src="//th.bing.com/th?id={first + i}" src="data:image/gif;base64,R0lGOD">'
        "</li>"
        for i in range(count)
    )
    return (
        "<html><body>"
        f'<ol id="b_results">{results}<li class="b_pag"><a>Next</a></li></ol>'
        "</body></html>"
    )


# ============================================================================
# Engine fixtures
# ============================================================================

@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@dataclass
class Harness:
    view: DocumentView
    config: ExpansionConfig
    state: EngineState
    notifier: Notifier
    controller: ExpansionController
    fetcher: FakeFetcher
    scheduler: FakeScheduler


@pytest.fixture
def make_harness(scheduler: FakeScheduler, fetcher: FakeFetcher):
    """Build a Google controller over a fresh view without going through bootstrap."""

    def _make(html: Optional[str] = None, *, url: str = GOOGLE_URL, adapter=None, **config: Any) -> Harness:
        view = DocumentView(url, html if html is not None else google_page(10))
        cfg = ExpansionConfig(**config)
        state = EngineState()
        notifier = Notifier(view, cfg, state, scheduler)
        controller = ExpansionController(view, adapter or GoogleAdapter(), fetcher, cfg, notifier, state)
        controller.seed()
        return Harness(view, cfg, state, notifier, controller, fetcher, scheduler)

    return _make


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: exercises bootstrap, timers and the CLI host together"
    )
