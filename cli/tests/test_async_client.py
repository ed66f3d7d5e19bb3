from __future__ import annotations

import asyncio
import gzip
import time

import httpx
import pytest

from acai_client import AsyncHttpClient, InvalidURL, Timeout

pytestmark = pytest.mark.anyio


async def test_get_json(server_url) -> None:
    async with AsyncHttpClient(server_url) as client:
        resp = await client.get("/json")

    assert resp.status == 200
    assert resp.data["method"] == "GET"


async def test_post_round_trips_structured_body(server_url) -> None:
    payload = {"nested": {"list": [1, 2.5, None, True]}, "text": "héllo"}
    async with AsyncHttpClient(server_url) as client:
        resp = await client.post("/json", payload)

    assert resp.data["received"] == payload


@pytest.mark.parametrize("verb", ["get", "post", "put", "patch", "delete"])
async def test_verbs(server_url, verb) -> None:
    async with AsyncHttpClient(server_url) as client:
        resp = await getattr(client, verb)("/json")

    assert resp.data["method"] == verb.upper()


async def test_status_is_returned_not_raised(server_url) -> None:
    async with AsyncHttpClient(server_url) as client:
        resp = await client.get("/status?code=404")

    assert resp.status == 404


async def test_timeout_message(server_url) -> None:
    async with AsyncHttpClient(server_url) as client:
        started = time.monotonic()
        with pytest.raises(Timeout) as exc_info:
            await client.get("/timeout", timeout=100)
        elapsed = time.monotonic() - started

    assert str(exc_info.value) == "Request timeout after 100ms"
    assert elapsed < 1.5


async def test_timeout_is_an_overall_deadline(server_url) -> None:
    async with AsyncHttpClient(server_url) as client:
        with pytest.raises(Timeout, match=r"^Request timeout after 300ms$"):
            await client.get("/slow-body", timeout=300)


async def test_concurrent_calls_are_independent(server_url) -> None:
    async with AsyncHttpClient(server_url, {"x-shared": "yes"}) as client:
        results = await asyncio.gather(
            client.get("/headers", headers={"x-call": "one"}),
            client.post("/json", {"n": 2}),
            client.get("/status?code=418"),
        )

    first, second, third = results
    assert first.data["headers"]["x-call"] == "one"
    assert first.data["headers"]["x-shared"] == "yes"
    assert second.data["received"] == {"n": 2}
    assert third.status == 418


async def test_header_snapshot_is_taken_per_call(server_url) -> None:
    async with AsyncHttpClient(server_url, {"x-v": "1"}) as client:
        before = await client.get("/headers")
        client.set_default_headers({"x-v": "2"})
        after = await client.get("/headers")

    assert before.data["headers"]["x-v"] == "1"
    assert after.data["headers"]["x-v"] == "2"


async def test_invalid_url_fails_before_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with AsyncHttpClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(InvalidURL):
            await client.get("relative/path")


async def test_connection_refused_propagates(closed_port_url) -> None:
    async with AsyncHttpClient() as client:
        with pytest.raises(httpx.ConnectError):
            await client.get(f"{closed_port_url}/json")


async def test_raw_is_the_body_as_received() -> None:
    wire = gzip.compress(b"hello")
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["headers"] = dict(request.headers)
        return httpx.Response(200, content=wire, headers={"content-encoding": "gzip"})

    async with AsyncHttpClient(transport=httpx.MockTransport(handler)) as client:
        resp = await client.get("http://h.test/")

    assert resp.raw == wire
    assert "accept-encoding" not in seen["headers"]
    assert "user-agent" not in seen["headers"]
