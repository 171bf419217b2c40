import asyncio
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

# Add the project root to the Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Set up test environment variables
os.environ["QLSBRIDGE_LOG_FILE"] = ""

from qlsbridge.config import Settings  # noqa: E402
from qlsbridge.main import create_app  # noqa: E402
from qlsbridge.services.aggregator import RankingAggregator  # noqa: E402
from qlsbridge.services.qlstats import QLStatsClient  # noqa: E402

BASE_URL = "http://qlstats.test/api"


def make_players(count: int, prefix: str = "7656119800000") -> List[Dict[str, Any]]:
    return [
        {
            "steamid": f"{prefix}{i:04d}",
            "name": f"player{i}",
            "team": i % 2 + 1,
            "rating": 1400 + i,
            "rd": 30 + i,
            "time": 1700000000000 + i,
        }
        for i in range(count)
    ]


class FakeQLStats:
    """In-process stand-in for the QLStats API.

    ``players[address]`` is the players list served for that server, and
    ``failures[address]`` is one of ``"error"``, ``"status"`` or ``"garbage"``;
    ``"not_ok"`` answers with a well-formed ``{"ok": false}`` document.
    Servers listed in ``slow`` block until ``release`` is set.
    """

    def __init__(self) -> None:
        self.players: Dict[str, Optional[List[Dict[str, Any]]]] = {}
        self.failures: Dict[str, str] = {}
        self.directory: List[Dict[str, Any]] = []
        self.directory_failure: Optional[str] = None
        self.slow: set = set()
        self.release = asyncio.Event()
        self.requests: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(path)
        if path == "/api/server/skillrating":
            if self.directory_failure == "error":
                raise httpx.ConnectError("connection refused", request=request)
            if self.directory_failure == "garbage":
                return httpx.Response(200, content=b"<html>down</html>")
            return httpx.Response(200, json=self.directory)

        address = path[len("/api/server/"):-len("/players")]
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if address in self.slow:
                await self.release.wait()
            failure = self.failures.get(address)
            if failure == "error":
                raise httpx.ConnectError("connection refused", request=request)
            if failure == "status":
                return httpx.Response(502, text="Bad gateway")
            if failure == "garbage":
                return httpx.Response(200, content=b'{"ok": true, "players": [')
            if failure == "not_ok":
                return httpx.Response(200, json={"ok": False, "msg": "unknown server"})
            return httpx.Response(200, json={"ok": True, "players": self.players.get(address, [])})
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_upstream():
    return FakeQLStats()


@pytest_asyncio.fixture
async def qlstats(fake_upstream):
    client = QLStatsClient.create(BASE_URL, transport=httpx.MockTransport(fake_upstream.handler))
    yield client
    fake_upstream.release.set()
    await asyncio.sleep(0.01)
    await client.aclose()


@pytest.fixture
def aggregator(qlstats):
    return RankingAggregator(qlstats)


@pytest.fixture
def settings():
    return Settings(request_timeout=2.0, log_file=None, upstream_base_url=BASE_URL)


@pytest.fixture
def app(settings, qlstats):
    return create_app(settings, qlstats=qlstats)


@pytest_asyncio.fixture
async def async_client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client
