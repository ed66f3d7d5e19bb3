from __future__ import annotations

from typing import Any

from rich.table import Table

from acai_client import ResponseData


def status_style(status: int) -> str:
    if status < 300:
        return "bold green"
    if status < 400:
        return "bold cyan"
    if status < 500:
        return "bold yellow"
    return "bold red"


def headers_table(headers: dict[str, str]) -> Table:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("name", style="cyan", no_wrap=True)
    table.add_column("value")
    for name, value in headers.items():
        table.add_row(name, value)
    return table


def response_to_dict(resp: ResponseData) -> dict[str, Any]:
    return {"status": resp.status, "headers": dict(resp.headers), "data": resp.data}
