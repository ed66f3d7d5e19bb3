from __future__ import annotations

from httpx import TransportError


class AcaiClientError(Exception):
    """Base client error."""


class InvalidURL(AcaiClientError, ValueError):
    """The url (or base url + url) does not resolve to an absolute http(s) URL."""

    def __init__(self, url: str, reason: str | None = None):
        msg = f"Invalid URL: {url!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
        self.url = url


class Timeout(AcaiClientError, TimeoutError):
    def __init__(self, timeout_ms: float):
        super().__init__(f"Request timeout after {format_ms(timeout_ms)}ms")
        self.timeout_ms = timeout_ms


def format_ms(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


__all__ = ["AcaiClientError", "InvalidURL", "Timeout", "TransportError", "format_ms"]
