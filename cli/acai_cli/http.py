from __future__ import annotations

from acai_client import HttpClient

from .config import AppConfig, apply_profile, normalize_base_url, resolve_base_url


def make_client(
    cfg: AppConfig,
    *,
    profile: str | None,
    base_url_override: str | None,
) -> HttpClient:
    effective_cfg = apply_profile(cfg, profile)
    base_url = normalize_base_url(base_url_override or resolve_base_url(effective_cfg), warn=True)
    return HttpClient(
        base_url or None,
        effective_cfg.headers,
        timeout_ms=effective_cfg.timeout_ms,
    )
