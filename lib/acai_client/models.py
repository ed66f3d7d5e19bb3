from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

# str and bytes-like bodies go out as-is, anything else is JSON-encoded.
Body = Union[str, bytes, bytearray, memoryview, Any]


@dataclass(frozen=True)
class RequestOptions:
    """Per-call request settings.

    ``timeout`` is in milliseconds; ``None`` falls back to the client default and
    ``0`` disables the timeout for this call. ``headers`` are merged over the
    client's default headers.
    """

    method: str = "GET"
    headers: Mapping[str, str] | None = None
    timeout: float | None = None
    body: Body = None

    def __post_init__(self) -> None:
        method = str(self.method or "GET").upper()
        if method not in METHODS:
            raise ValueError(f"unsupported method: {self.method!r}")
        object.__setattr__(self, "method", method)
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {self.timeout!r}")


@dataclass
class ResponseData:
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    data: Any = None
    raw: bytes = b""
