"""Shared fakes: a controllable clock and a canned-HTML site behind httpx.MockTransport."""

import time
from collections import Counter

import httpx
import pytest
from fastapi.testclient import TestClient

from link2json.api.deps import get_fetcher, get_rate_limiter
from link2json.config import Settings
from link2json.main import create_app
from link2json.services.cache import ResponseCache
from link2json.services.metadata import MetadataFetcher
from link2json.services.rate_limit import TokenBucket

TEST_USER_AGENT = "link2json-tests/1.0"


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSite:
    """Serves canned pages keyed by scheme://host/path and counts every request."""

    def __init__(self, pages: dict | None = None) -> None:
        self.pages: dict = dict(pages or {})
        self.requests: Counter = Counter()
        self.user_agents: list[str] = []
        # seconds to stall before answering, consumed by the next request for that key
        self.delays: dict[str, float] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        self.requests[key] += 1
        self.user_agents.append(request.headers.get("User-Agent", ""))
        delay = self.delays.pop(key, 0)
        if delay:
            time.sleep(delay)
        page = self.pages.get(key)
        if page is None:
            return httpx.Response(404, text="not found")
        if isinstance(page, Exception):
            raise page
        if isinstance(page, httpx.Response):
            return page
        return httpx.Response(200, html=page)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def total_requests(self) -> int:
        return sum(self.requests.values())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    return ResponseCache(ttl=1800, sweep_interval=3600, clock=clock)


@pytest.fixture
def fetcher(site: FakeSite, cache: ResponseCache) -> MetadataFetcher:
    return MetadataFetcher(site.client(), cache, TEST_USER_AGENT)


@pytest.fixture
def limiter(clock: FakeClock) -> TokenBucket:
    return TokenBucket(rate=1.0, burst=3, clock=clock)


@pytest.fixture
def api(fetcher: MetadataFetcher, limiter: TokenBucket) -> TestClient:
    app = create_app(Settings())
    app.dependency_overrides[get_fetcher] = lambda: fetcher
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    return TestClient(app)
