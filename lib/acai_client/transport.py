from __future__ import annotations

import json
import logging
import time
from typing import Any

import anyio
import httpx

from .errors import Timeout
from .models import ResponseData
from .prepare import JSON_CONTENT_TYPE, PreparedRequest, has_header

logger = logging.getLogger(__name__)

# httpx adds these to every request; only send them when the caller set them.
_ENGINE_DEFAULT_HEADERS = ("accept", "accept-encoding", "user-agent")


def _engine_timeout(timeout_ms: float | None) -> httpx.Timeout:
    if not timeout_ms:
        return httpx.Timeout(None)
    return httpx.Timeout(timeout_ms / 1000.0)


def _strip_engine_defaults(request: httpx.Request, sent: dict[str, str]) -> None:
    for name in _ENGINE_DEFAULT_HEADERS:
        if not has_header(sent, name) and name in request.headers:
            del request.headers[name]


def decode_data(content_type: str | None, raw: bytes) -> Any:
    text = raw.decode("utf-8", errors="replace")
    if content_type and JSON_CONTENT_TYPE in content_type:
        try:
            return json.loads(text)
        except ValueError:
            logger.debug("response claims %s but body is not JSON", content_type)
    return text


def assemble_response(response: httpx.Response, raw: bytes) -> ResponseData:
    headers = dict(response.headers.items())
    return ResponseData(
        status=response.status_code,
        headers=headers,
        data=decode_data(headers.get("content-type"), raw),
        raw=raw,
    )


class Transport:
    """Blocking exchange over ``httpx.Client``.

    The engine's connect/read/write timeouts are set to the call's timeout and an
    overall deadline is checked while the body accumulates.
    """

    def __init__(self, *, transport: httpx.BaseTransport | None = None):
        self._client = httpx.Client(
            transport=transport,
            timeout=None,
            follow_redirects=False,
            trust_env=False,
        )

    def close(self) -> None:
        self._client.close()

    def send(self, prepared: PreparedRequest) -> ResponseData:
        timeout_ms = prepared.timeout_ms
        deadline = time.monotonic() + timeout_ms / 1000.0 if timeout_ms else None
        request = self._client.build_request(
            prepared.method,
            prepared.url,
            headers=prepared.headers,
            content=prepared.content,
            timeout=_engine_timeout(timeout_ms),
        )
        _strip_engine_defaults(request, prepared.headers)
        logger.debug("%s %s", prepared.method, prepared.url)

        chunks: list[bytes] = []
        try:
            response = self._client.send(request, stream=True)
            try:
                for chunk in response.iter_raw():
                    chunks.append(chunk)
                    if deadline is not None and time.monotonic() > deadline:
                        logger.debug("%s %s: deadline passed while reading body", prepared.method, prepared.url)
                        raise Timeout(timeout_ms)
            finally:
                response.close()
        except httpx.TimeoutException as e:
            if not timeout_ms:
                raise
            logger.debug("%s %s: %s", prepared.method, prepared.url, e.__class__.__name__)
            raise Timeout(timeout_ms) from e

        raw = b"".join(chunks)
        logger.debug("%s %s -> %s (%d bytes)", prepared.method, prepared.url, response.status_code, len(raw))
        return assemble_response(response, raw)


class AsyncTransport:
    """Awaitable exchange over ``httpx.AsyncClient`` with an overall deadline (``anyio.fail_after``)."""

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None):
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=None,
            follow_redirects=False,
            trust_env=False,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(self, prepared: PreparedRequest) -> ResponseData:
        timeout_ms = prepared.timeout_ms
        request = self._client.build_request(
            prepared.method,
            prepared.url,
            headers=prepared.headers,
            content=prepared.content,
            timeout=_engine_timeout(timeout_ms),
        )
        _strip_engine_defaults(request, prepared.headers)
        logger.debug("%s %s", prepared.method, prepared.url)

        try:
            with anyio.fail_after(timeout_ms / 1000.0 if timeout_ms else None):
                response = await self._client.send(request, stream=True)
                try:
                    raw = b"".join([chunk async for chunk in response.aiter_raw()])
                finally:
                    await response.aclose()
        except (httpx.TimeoutException, TimeoutError) as e:
            if not timeout_ms:
                raise
            logger.debug("%s %s: %s", prepared.method, prepared.url, e.__class__.__name__)
            raise Timeout(timeout_ms) from e

        logger.debug("%s %s -> %s (%d bytes)", prepared.method, prepared.url, response.status_code, len(raw))
        return assemble_response(response, raw)
