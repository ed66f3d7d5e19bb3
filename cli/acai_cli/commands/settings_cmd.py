from __future__ import annotations

import typer
from rich.markup import escape

from acai_client.prepare import merge_headers

from .. import console
from ..config import ProfileConfig, config_path, load_config, normalize_base_url, save_config
from ..formatting import headers_table

app = typer.Typer(help="Manage local settings (~/.config/acai/config.toml).")


def _target(cfg, profile: str | None):
    if not profile:
        return cfg
    return cfg.profiles.setdefault(profile, ProfileConfig())


@app.command("show")
def show_settings(
        profile: str | None = typer.Option(None, "--profile", help="Show a single profile."),
):
    cfg = load_config()
    if profile and profile not in cfg.profiles:
        console.err(f"Unknown profile: {profile}")
        raise typer.Exit(code=2)
    console.print(f"config={config_path()}")
    scopes = [(profile, cfg.profiles[profile])] if profile else [(None, cfg), *cfg.profiles.items()]
    for name, scope in scopes:
        label = f"[profiles.{name}]" if name else "[default]"
        timeout = "(none)" if scope.timeout_ms is None else f"{scope.timeout_ms:g}ms"
        console.print(escape(f"{label} base_url={scope.base_url or '(unset)'} timeout={timeout}"), highlight=False)
        if scope.headers:
            console.print(headers_table(scope.headers))


@app.command("set")
def set_setting(
        base_url: str | None = typer.Option(None, "--base-url", help="Set the base URL (empty string clears it)."),
        timeout: float | None = typer.Option(None, "--timeout", min=0, help="Default timeout in ms (0 clears it)."),
        profile: str | None = typer.Option(None, "--profile", help="Write to a profile instead of the defaults."),
):
    cfg = load_config()
    target = _target(cfg, profile)
    if base_url is not None:
        target.base_url = normalize_base_url(base_url, warn=True)
    if timeout is not None:
        target.timeout_ms = timeout or None
    saved = save_config(cfg)
    console.ok(f"Settings updated: {saved}")


@app.command("set-header")
def set_header(
        name: str = typer.Argument(..., help="Header name."),
        value: str = typer.Argument(..., help="Header value."),
        profile: str | None = typer.Option(None, "--profile", help="Write to a profile instead of the defaults."),
):
    cfg = load_config()
    target = _target(cfg, profile)
    target.headers = merge_headers(target.headers, {name: value})
    saved = save_config(cfg)
    console.ok(f"Header {name} set: {saved}")


@app.command("unset-header")
def unset_header(
        name: str = typer.Argument(..., help="Header name."),
        profile: str | None = typer.Option(None, "--profile", help="Edit a profile instead of the defaults."),
):
    cfg = load_config()
    target = _target(cfg, profile)
    lowered = name.lower()
    remaining = {k: v for k, v in target.headers.items() if k.lower() != lowered}
    if len(remaining) == len(target.headers):
        console.warn(f"Header {name} is not set.")
        return
    target.headers = remaining
    saved = save_config(cfg)
    console.ok(f"Header {name} removed: {saved}")
