"""Shared fixtures: an in-memory JSON store behind httpx.MockTransport and a settable clock"""
import json

import httpx
import pytest

from workshop_timer.infra.store.client import RemoteStoreClient
from workshop_timer.infra.store.repositories.timers import TimerRepository

STORE_URL = "https://store.test"


def json_response(document, status_code: int = 200) -> httpx.Response:
    """Response carrying the document as JSON, including a literal null"""
    return httpx.Response(
        status_code,
        content=json.dumps(document).encode(),
        headers={"content-type": "application/json"},
    )


class InMemoryStore:
    """Serves GET/PUT {path}.json like the remote store"""

    def __init__(self):
        self.documents = {}
        self.reads = 0
        self.writes = 0
        self.fail_reads = False
        self.fail_writes = False
        self.gates = {}  # key -> asyncio.Event holding reads of that key

    def _key(self, request: httpx.Request) -> str:
        path = request.url.path.strip("/")
        return path[: -len(".json")] if path.endswith(".json") else path

    async def handler(self, request: httpx.Request) -> httpx.Response:
        key = self._key(request)
        if request.method == "GET":
            self.reads += 1
            if key in self.gates:
                await self.gates[key].wait()
            if self.fail_reads:
                return httpx.Response(503, text="unavailable")
            return json_response(self.documents.get(key))
        if request.method == "PUT":
            self.writes += 1
            if self.fail_writes:
                return httpx.Response(500, text="boom")
            self.documents[key] = json.loads(request.content)
            return json_response(self.documents[key])
        return httpx.Response(405)


class FakeClock:
    """Callable wall clock in epoch milliseconds"""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
async def store_client(store):
    client = RemoteStoreClient(STORE_URL, transport=httpx.MockTransport(store.handler))
    yield client
    await client.aclose()


@pytest.fixture
def repository(store_client):
    return TimerRepository(store_client)


@pytest.fixture
def clock():
    return FakeClock()
