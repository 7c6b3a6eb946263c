# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""pytest configuration.
"""

import http.server
import io
import json
import threading

import pytest

from vardump import colors
from vardump.common import log
from vardump.dumper import Dumper


@pytest.fixture(autouse=True)
def quiet_log(monkeypatch):
    # Keep stderr clean; tests that check log output install their own stream.
    monkeypatch.setattr(log, "stderr_levels", set())


@pytest.fixture
def no_color(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("FORCE_COLOR", raising=False)


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def dumper(output):
    """A Dumper writing plain text to the output fixture."""
    return Dumper(writer=output, colorizer=colors.plain)


class _Handler(http.server.BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def do_GET(self):
        body = json.dumps({"success": True}, separators=(",", ":")).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("X-Test-Header", "TestValue")
        self.end_headers()
        self.wfile.write(body)

    def do_POST(self):
        length = int(self.headers.get("Content-Length", "0"))
        body = self.rfile.read(length)
        self.send_response(201)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        log.debug("http_server: {0}", format % args)


@pytest.fixture
def http_server():
    """Serves JSON on a random local port; yields the base URL."""

    server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        host, port = server.server_address[:2]
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()
        thread.join()
