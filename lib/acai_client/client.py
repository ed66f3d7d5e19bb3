from __future__ import annotations

import dataclasses
from typing import Any, Mapping

import httpx

from .config_types import ClientConfig
from .models import Body, RequestOptions, ResponseData
from .prepare import merge_headers, prepare_request
from .transport import AsyncTransport, Transport


def _build_options(options: RequestOptions | None, fields: dict[str, Any]) -> RequestOptions:
    base = options or RequestOptions()
    return dataclasses.replace(base, **fields) if fields else base


class _ConfigMixin:
    _cfg: ClientConfig

    @property
    def base_url(self) -> str | None:
        return self._cfg.base_url

    @property
    def default_headers(self) -> dict[str, str]:
        return dict(self._cfg.default_headers)

    @property
    def timeout_ms(self) -> float | None:
        return self._cfg.timeout_ms

    def set_base_url(self, url: str | None) -> None:
        """Replace the base URL. It is not validated until the next request."""
        self._cfg.base_url = url or None

    def set_default_headers(self, headers: Mapping[str, str]) -> None:
        """Merge ``headers`` over the current default headers."""
        self._cfg.default_headers = merge_headers(self._cfg.default_headers, headers)

    def _snapshot(self) -> ClientConfig:
        return dataclasses.replace(self._cfg, default_headers=dict(self._cfg.default_headers))


class HttpClient(_ConfigMixin):
    """HTTP client bound to an optional base URL and default headers.

    Every call returns a :class:`ResponseData` whatever the status code; only
    invalid URLs, timeouts and transport failures raise.
    """

    def __init__(
            self,
            base_url: str | None = None,
            default_headers: Mapping[str, str] | None = None,
            *,
            timeout_ms: float | None = None,
            transport: httpx.BaseTransport | None = None,
    ):
        self._cfg = ClientConfig(
            base_url=base_url or None,
            default_headers=merge_headers(default_headers),
            timeout_ms=timeout_ms,
        )
        self._t = Transport(transport=transport)

    def close(self) -> None:
        self._t.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def request(self, url: str, options: RequestOptions | None = None, **fields: Any) -> ResponseData:
        prepared = prepare_request(self._snapshot(), url, _build_options(options, fields))
        return self._t.send(prepared)

    def get(self, url: str, options: RequestOptions | None = None, **fields: Any) -> ResponseData:
        return self.request(url, options, **fields, method="GET")

    def post(self, url: str, body: Body = None, options: RequestOptions | None = None, **fields: Any) -> ResponseData:
        return self.request(url, options, **fields, method="POST", body=body)

    def put(self, url: str, body: Body = None, options: RequestOptions | None = None, **fields: Any) -> ResponseData:
        return self.request(url, options, **fields, method="PUT", body=body)

    def delete(self, url: str, options: RequestOptions | None = None, **fields: Any) -> ResponseData:
        return self.request(url, options, **fields, method="DELETE")

    def patch(self, url: str, body: Body = None, options: RequestOptions | None = None, **fields: Any) -> ResponseData:
        return self.request(url, options, **fields, method="PATCH", body=body)


class AsyncHttpClient(_ConfigMixin):
    """Awaitable counterpart of :class:`HttpClient`.

    Concurrent calls on one instance are independent; each takes its own
    snapshot of the base URL and default headers.
    """

    def __init__(
            self,
            base_url: str | None = None,
            default_headers: Mapping[str, str] | None = None,
            *,
            timeout_ms: float | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._cfg = ClientConfig(
            base_url=base_url or None,
            default_headers=merge_headers(default_headers),
            timeout_ms=timeout_ms,
        )
        self._t = AsyncTransport(transport=transport)

    async def aclose(self) -> None:
        await self._t.aclose()

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def request(self, url: str, options: RequestOptions | None = None, **fields: Any) -> ResponseData:
        prepared = prepare_request(self._snapshot(), url, _build_options(options, fields))
        return await self._t.send(prepared)

    async def get(self, url: str, options: RequestOptions | None = None, **fields: Any) -> ResponseData:
        return await self.request(url, options, **fields, method="GET")

    async def post(
            self, url: str, body: Body = None, options: RequestOptions | None = None, **fields: Any
    ) -> ResponseData:
        return await self.request(url, options, **fields, method="POST", body=body)

    async def put(
            self, url: str, body: Body = None, options: RequestOptions | None = None, **fields: Any
    ) -> ResponseData:
        return await self.request(url, options, **fields, method="PUT", body=body)

    async def delete(self, url: str, options: RequestOptions | None = None, **fields: Any) -> ResponseData:
        return await self.request(url, options, **fields, method="DELETE")

    async def patch(
            self, url: str, body: Body = None, options: RequestOptions | None = None, **fields: Any
    ) -> ResponseData:
        return await self.request(url, options, **fields, method="PATCH", body=body)
