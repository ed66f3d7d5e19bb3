from __future__ import annotations

import json
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlsplit

import pytest

HOLD_SECONDS = 2.0


class _Handler(BaseHTTPRequestHandler):
    def log_message(self, format, *args):  # noqa: A002
        pass

    def _read_body(self) -> bytes:
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length else b""

    def _reply(self, status: int, body: bytes, content_type: str | None = None) -> None:
        self.send_response(status)
        if content_type:
            self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def _reply_json(self, payload: dict) -> None:
        self._reply(200, json.dumps(payload).encode("utf-8"), "application/json")

    def _handle(self) -> None:
        parts = urlsplit(self.path)
        body = self._read_body()

        if parts.path == "/json":
            received = json.loads(body) if body else None
            self._reply_json({"message": "JSON response", "method": self.command, "received": received})
        elif parts.path == "/echo":
            content_type = self.headers.get("Content-Type") or "text/plain"
            self._reply(200, body or b"Echo endpoint", content_type)
        elif parts.path == "/headers":
            headers = {k.lower(): v for k, v in self.headers.items()}
            self._reply_json({"headers": headers, "path": self.path})
        elif parts.path == "/status":
            code = int(parse_qs(parts.query).get("code", ["200"])[0])
            self._reply(code, f"Status code: {code}".encode("utf-8"))
        elif parts.path == "/bad-json":
            self._reply(200, b"{not json", "application/json; charset=utf-8")
        elif parts.path == "/binary":
            self._reply(200, b"\x00\xffok\xfe", "application/octet-stream")
        elif parts.path == "/timeout":
            time.sleep(HOLD_SECONDS)
            try:
                self._reply(200, b"too late")
            except OSError:
                pass
        elif parts.path == "/slow-body":
            self.send_response(200)
            self.send_header("Content-Type", "text/plain")
            self.send_header("Content-Length", "20")
            self.end_headers()
            try:
                for _ in range(10):
                    self.wfile.write(b"ab")
                    self.wfile.flush()
                    time.sleep(0.1)
            except OSError:
                pass
        else:
            self._reply(404, b"Not found")

    do_GET = do_POST = do_PUT = do_DELETE = do_PATCH = do_HEAD = do_OPTIONS = _handle


@pytest.fixture(scope="session")
def server_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def closed_port_url() -> str:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    return f"http://127.0.0.1:{port}"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
