from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from acai_client.prepare import merge_headers

from . import console

APP_NAME = "acai"
CONFIG_FILENAME = "config.toml"
ENV_BASE_URL = "ACAI_BASE_URL"

_WARNED_BASE_URL_SCHEME = False


@dataclass
class ProfileConfig:
    base_url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    timeout_ms: float | None = None


@dataclass
class AppConfig:
    base_url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    timeout_ms: float | None = None
    profiles: dict[str, ProfileConfig] = field(default_factory=dict)


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig(base_url="", headers={}, timeout_ms=None, profiles={})


def normalize_base_url(raw: str | None, *, warn: bool = False) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    lowered = value.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        scheme = "http://"
    else:
        scheme = "https://"

    normalized = f"{scheme}{value}"
    if warn:
        _warn_missing_scheme(normalized)
    return normalized


def _warn_missing_scheme(normalized: str) -> None:
    global _WARNED_BASE_URL_SCHEME
    if _WARNED_BASE_URL_SCHEME:
        return
    console.warn(f"base_url missing scheme, assuming {normalized}")
    _WARNED_BASE_URL_SCHEME = True


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def _parse_timeout(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _parse_headers(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return merge_headers({str(k): str(v) for k, v in raw.items() if not isinstance(v, dict)})


def _timeout_to_toml(value: float | None) -> int | float | None:
    if value is None:
        return None
    return int(value) if float(value).is_integer() else value


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    return _prune_empty(
        {
            "base_url": cfg.base_url,
            "timeout_ms": _timeout_to_toml(cfg.timeout_ms),
            "headers": dict(cfg.headers),
            "profiles": {
                name: {
                    "base_url": p.base_url,
                    "timeout_ms": _timeout_to_toml(p.timeout_ms),
                    "headers": dict(p.headers),
                }
                for name, p in cfg.profiles.items()
            },
        }
    )


def _prune_empty(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _prune_empty(v) for k, v in value.items() if v is not None and v != ""}
    return value


def from_toml(data: dict[str, Any]) -> AppConfig:
    profiles: dict[str, ProfileConfig] = {}
    profiles_raw = data.get("profiles") or {}
    if isinstance(profiles_raw, dict):
        for name, prof in profiles_raw.items():
            if not isinstance(prof, dict):
                continue
            profiles[str(name)] = ProfileConfig(
                base_url=normalize_base_url(str(prof.get("base_url") or ""), warn=True),
                headers=_parse_headers(prof.get("headers")),
                timeout_ms=_parse_timeout(prof.get("timeout_ms")),
            )

    return AppConfig(
        base_url=normalize_base_url(str(data.get("base_url") or ""), warn=True),
        headers=_parse_headers(data.get("headers")),
        timeout_ms=_parse_timeout(data.get("timeout_ms")),
        profiles=profiles,
    )


def load_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return from_toml(data)
    except FileNotFoundError:
        return default_config()


def apply_profile(cfg: AppConfig, profile: str | None) -> AppConfig:
    """Layer a named profile over the top-level settings.

    Profile headers merge over the top-level headers; an unknown profile leaves
    the config untouched.
    """
    if not profile:
        return cfg
    prof = cfg.profiles.get(profile)
    if prof is None:
        console.warn(f"Unknown profile {profile!r}, using top-level settings.")
        return cfg
    return AppConfig(
        base_url=prof.base_url or cfg.base_url,
        headers=merge_headers(cfg.headers, prof.headers),
        timeout_ms=prof.timeout_ms if prof.timeout_ms is not None else cfg.timeout_ms,
        profiles=cfg.profiles,
    )


def resolve_base_url(cfg: AppConfig) -> str:
    env_value = os.getenv(ENV_BASE_URL, "").strip()
    if env_value:
        return normalize_base_url(env_value, warn=True)
    return cfg.base_url


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path
