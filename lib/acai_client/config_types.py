from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class ClientConfig:
    base_url: str | None = None
    default_headers: dict[str, str] = field(default_factory=dict)
    timeout_ms: float | None = None
