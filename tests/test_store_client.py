"""Tests for the remote store client and timer repository"""
import httpx
import pytest

from workshop_timer import config
from workshop_timer.features.timer.domain import TimerRecord, TimerStatus
from workshop_timer.infra.store import client as store_module
from workshop_timer.infra.store.client import RemoteStoreClient, StoreError
from workshop_timer.infra.store.repositories.timers import TimerRepository

from .conftest import json_response


async def test_get_returns_none_for_empty_path(store_client):
    assert await store_client.get_json("timers/nobody") is None


async def test_null_document_reads_as_none():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request.url.path)
        return httpx.Response(200, content=b"null", headers={"content-type": "application/json"})

    client = RemoteStoreClient("https://db.example.com", transport=httpx.MockTransport(handler))
    assert await client.get_json("timers/absent") is None
    assert bodies == ["/timers/absent.json"]
    await client.aclose()


async def test_empty_body_reads_as_none():
    client = RemoteStoreClient(
        "https://db.example.com",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"")),
    )
    assert await client.get_json("timers/absent") is None
    await client.aclose()


async def test_put_then_get(store, store_client):
    await store_client.put_json("timers/abc123", {"status": "running"})
    assert store.documents["timers/abc123"] == {"status": "running"}
    assert await store_client.get_json("timers/abc123") == {"status": "running"}


async def test_requests_target_json_documents():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, str(request.url)))
        return json_response(None)

    client = RemoteStoreClient("https://db.example.com/", transport=httpx.MockTransport(handler))
    await client.get_json("timers/r1")
    await client.put_json("/timers/r1/", {"a": 1})
    await client.aclose()

    assert seen == [
        ("GET", "https://db.example.com/timers/r1.json"),
        ("PUT", "https://db.example.com/timers/r1.json"),
    ]


async def test_http_errors_become_store_errors(store, store_client):
    store.fail_reads = True
    store.fail_writes = True
    with pytest.raises(StoreError):
        await store_client.get_json("timers/r1")
    with pytest.raises(StoreError):
        await store_client.put_json("timers/r1", {})


async def test_transport_errors_become_store_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    client = RemoteStoreClient("https://db.example.com", transport=httpx.MockTransport(handler))
    with pytest.raises(StoreError):
        await client.get_json("timers/r1")
    await client.aclose()


async def test_invalid_json_is_a_store_error():
    client = RemoteStoreClient(
        "https://db.example.com",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
    )
    with pytest.raises(StoreError):
        await client.get_json("timers/r1")
    await client.aclose()


async def test_singleton_requires_url(monkeypatch):
    await store_module.reset_store_client()
    monkeypatch.setattr(config, "TIMER_STORE_URL", None)
    with pytest.raises(ValueError):
        store_module.get_store_client()


async def test_singleton_is_reused(monkeypatch):
    await store_module.reset_store_client()
    monkeypatch.setattr(config, "TIMER_STORE_URL", "https://db.example.com")
    first = store_module.get_store_client()
    assert store_module.get_store_client() is first
    assert first.base_url == "https://db.example.com"
    await store_module.reset_store_client()


class TestTimerRepository:
    async def test_find_absent_room(self, repository):
        assert await repository.find_by_room("empty") is None

    async def test_save_and_find(self, store, repository):
        record = TimerRecord(title="Lunch", duration=60, remaining=60, status=TimerStatus.RUNNING, started_at=1000)
        assert await repository.save("r1", record) is True
        assert store.documents["timers/r1"]["startedAt"] == 1000
        assert await repository.find_by_room("r1") == record

    async def test_save_failure_is_reported_not_raised(self, store, repository):
        store.fail_writes = True
        assert await repository.save("r1", TimerRecord()) is False
        assert "timers/r1" not in store.documents

    async def test_find_failure_raises(self, store, repository):
        store.fail_reads = True
        with pytest.raises(StoreError):
            await repository.find_by_room("r1")

    async def test_malformed_document_reads_as_absent(self, store, repository):
        store.documents["timers/r1"] = ["not", "a", "timer"]
        assert await repository.find_by_room("r1") is None

    async def test_room_id_is_quoted_into_one_document(self, store, repository):
        record = TimerRecord(title="Odd", duration=60, status=TimerStatus.RUNNING, started_at=1000)
        assert await repository.save("a?b", record) is True
        assert list(store.documents) == ["timers/a?b"]
        assert await repository.find_by_room("a") is None
        assert await repository.find_by_room("a?b") == record

    async def test_room_id_path_is_percent_encoded(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path)
            return json_response(None)

        client = RemoteStoreClient("https://db.example.com", transport=httpx.MockTransport(handler))
        await TimerRepository(client).find_by_room("a?b/c")
        await client.aclose()
        assert seen == [b"/timers/a%3Fb%2Fc.json"]
