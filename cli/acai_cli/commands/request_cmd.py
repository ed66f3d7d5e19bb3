from __future__ import annotations

import json
from typing import Any

import typer
from rich.markup import escape

from acai_client import METHODS, InvalidURL, ResponseData, Timeout, TransportError

from .. import console
from ..config import load_config
from ..formatting import headers_table, response_to_dict, status_style
from ..http import make_client

_HEADER_HELP = 'Extra header as "Name: value". Repeatable.'


def _parse_headers(values: list[str] | None) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values or []:
        name, sep, value = raw.partition(":")
        name = name.strip()
        if not sep or not name:
            console.err(f'Invalid header {raw!r}, expected "Name: value".')
            raise typer.Exit(code=2)
        if not (name + value).isascii():
            console.err(f"Header {name!r} must be ASCII.")
            raise typer.Exit(code=2)
        headers[name] = value.strip()
    return headers


def _parse_body(data: str | None, json_body: str | None) -> Any:
    if data is not None and json_body is not None:
        console.err("Use either --data or --json-body, not both.")
        raise typer.Exit(code=2)
    if json_body is not None:
        try:
            return json.loads(json_body)
        except ValueError as e:
            console.err(f"--json-body is not valid JSON: {e}")
            raise typer.Exit(code=2)
    return data


def _is_json(text: str) -> bool:
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


def _render(resp: ResponseData, *, include: bool, json_output: bool) -> None:
    if json_output:
        console.print_json(response_to_dict(resp))
        return
    console.print(f"[{status_style(resp.status)}]HTTP {resp.status}[/]")
    if include:
        console.print(headers_table(resp.headers))
        console.print()
    if isinstance(resp.data, str):
        if resp.data:
            console.print(escape(resp.data), highlight=False)
    else:
        # parsed JSON, including 0, false and null
        console.print_json(resp.data)


def send(
        method: str,
        url: str,
        *,
        headers: list[str] | None = None,
        data: str | None = None,
        json_body: str | None = None,
        timeout: float | None = None,
        profile: str | None = None,
        base_url: str | None = None,
        include: bool = False,
        json_output: bool = False,
) -> ResponseData:
    method = method.strip().upper()
    if method not in METHODS:
        console.err(f"Unsupported method {method!r}. Use one of: {', '.join(METHODS)}.")
        raise typer.Exit(code=2)
    extra_headers = _parse_headers(headers)
    body = _parse_body(data, json_body)

    cfg = load_config()
    client = make_client(cfg, profile=profile, base_url_override=base_url)
    try:
        resp = client.request(url, method=method, headers=extra_headers, timeout=timeout, body=body)
    except InvalidURL as e:
        console.err(str(e))
        raise typer.Exit(code=2)
    except UnicodeEncodeError:
        console.err("Header names and values must be ASCII; check the configured headers.")
        raise typer.Exit(code=2)
    except Timeout as e:
        console.err(str(e))
        raise typer.Exit(code=1)
    except TransportError as e:
        console.err(f"{method} {url} failed: {e.__class__.__name__}: {e}")
        raise typer.Exit(code=1)
    finally:
        client.close()

    _render(resp, include=include, json_output=json_output)
    return resp


_headers_opt = typer.Option(None, "-H", "--header", help=_HEADER_HELP)
_timeout_opt = typer.Option(None, "--timeout", min=0, help="Timeout in milliseconds (0 disables).")
_profile_opt = typer.Option(None, "--profile", help="Settings profile to use.")
_base_url_opt = typer.Option(None, "--base-url", help="Override the configured base URL.")
_include_opt = typer.Option(False, "-i", "--include", help="Show response headers.")
_json_opt = typer.Option(False, "--json", help="Output JSON only.")
_data_opt = typer.Option(None, "-d", "--data", help="Raw request body, sent as-is.")
_json_body_opt = typer.Option(None, "-j", "--json-body", help="JSON request body (sets content-type).")


def request_cmd(
        method: str = typer.Argument(..., help="HTTP method."),
        url: str = typer.Argument(..., help="Absolute URL, or a path relative to the base URL."),
        headers: list[str] | None = _headers_opt,
        data: str | None = _data_opt,
        json_body: str | None = _json_body_opt,
        timeout: float | None = _timeout_opt,
        profile: str | None = _profile_opt,
        base_url: str | None = _base_url_opt,
        include: bool = _include_opt,
        json_output: bool = _json_opt,
) -> None:
    """Send a request with any supported method."""
    send(
        method,
        url,
        headers=headers,
        data=data,
        json_body=json_body,
        timeout=timeout,
        profile=profile,
        base_url=base_url,
        include=include,
        json_output=json_output,
    )


def _no_body_command(method: str):
    def command(
            url: str = typer.Argument(..., help="Absolute URL, or a path relative to the base URL."),
            headers: list[str] | None = _headers_opt,
            timeout: float | None = _timeout_opt,
            profile: str | None = _profile_opt,
            base_url: str | None = _base_url_opt,
            include: bool = _include_opt,
            json_output: bool = _json_opt,
    ) -> None:
        send(
            method,
            url,
            headers=headers,
            timeout=timeout,
            profile=profile,
            base_url=base_url,
            include=include,
            json_output=json_output,
        )

    command.__doc__ = f"Send a {method} request."
    return command


def _body_command(method: str):
    def command(
            url: str = typer.Argument(..., help="Absolute URL, or a path relative to the base URL."),
            body: str | None = typer.Argument(None, help="Request body; parsed as JSON when it is valid JSON."),
            headers: list[str] | None = _headers_opt,
            data: str | None = _data_opt,
            timeout: float | None = _timeout_opt,
            profile: str | None = _profile_opt,
            base_url: str | None = _base_url_opt,
            include: bool = _include_opt,
            json_output: bool = _json_opt,
    ) -> None:
        json_body = None
        if body is not None:
            if data is not None:
                console.err("Pass the body either positionally or with --data, not both.")
                raise typer.Exit(code=2)
            if _is_json(body):
                json_body = body
            else:
                data = body
        send(
            method,
            url,
            headers=headers,
            data=data,
            json_body=json_body,
            timeout=timeout,
            profile=profile,
            base_url=base_url,
            include=include,
            json_output=json_output,
        )

    command.__doc__ = f"Send a {method} request with an optional body."
    return command


get_cmd = _no_body_command("GET")
delete_cmd = _no_body_command("DELETE")
post_cmd = _body_command("POST")
put_cmd = _body_command("PUT")
patch_cmd = _body_command("PATCH")
