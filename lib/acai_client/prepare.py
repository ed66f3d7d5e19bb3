from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from .config_types import ClientConfig
from .errors import InvalidURL
from .models import RequestOptions

JSON_CONTENT_TYPE = "application/json"
_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class PreparedRequest:
    method: str
    url: httpx.URL
    headers: dict[str, str]
    content: bytes | None
    timeout_ms: float | None


def resolve_url(url: str, base_url: str | None = None) -> httpx.URL:
    """Resolve ``url`` against ``base_url`` (RFC 3986) and require an absolute http(s) URL."""
    try:
        target = httpx.URL(base_url).join(url) if base_url else httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidURL(str(url), str(e)) from e

    if not target.scheme:
        raise InvalidURL(str(url), "relative URL without a base URL")
    if target.scheme not in _SCHEMES:
        raise InvalidURL(str(url), f"unsupported scheme {target.scheme!r}")
    if not target.host:
        raise InvalidURL(str(url), "missing host")
    return target


def merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """Merge header mappings left to right.

    Names compare case-insensitively; a later layer drops the earlier spelling
    and its own spelling is kept.
    """
    merged: dict[str, str] = {}
    for layer in layers:
        if not layer:
            continue
        for name, value in layer.items():
            name = str(name)
            lowered = name.lower()
            for existing in [k for k in merged if k.lower() == lowered]:
                del merged[existing]
            merged[name] = str(value)
    return merged


def has_header(headers: Mapping[str, str], name: str) -> bool:
    lowered = name.lower()
    return any(str(k).lower() == lowered for k in headers)


def is_raw_body(body: Any) -> bool:
    return isinstance(body, (str, bytes, bytearray, memoryview))


def encode_body(body: Any) -> bytes | None:
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def prepare_request(cfg: ClientConfig, url: str, options: RequestOptions) -> PreparedRequest:
    target = resolve_url(url, cfg.base_url)

    headers = merge_headers(cfg.default_headers, options.headers)
    if options.body is not None and not is_raw_body(options.body) and not has_header(headers, "content-type"):
        headers = merge_headers({"content-type": JSON_CONTENT_TYPE}, headers)

    timeout_ms = options.timeout if options.timeout is not None else cfg.timeout_ms
    return PreparedRequest(
        method=options.method,
        url=target,
        headers=headers,
        content=encode_body(options.body),
        timeout_ms=timeout_ms or None,
    )
