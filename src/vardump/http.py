# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Dumping of HTTP traffic made with requests.

Mount an HTTPDebugAdapter on a session to have every request and its response
dumped as a single "Transaction" map::

    session = requests.Session()
    session.mount("http://", HTTPDebugAdapter())
    session.mount("https://", HTTPDebugAdapter())

Nothing is dumped unless the HTTP_DEBUG environment variable is set, or the
adapter is switched on with set_debug(True).
"""

import os
import time
import urllib.parse

import requests
import requests.adapters

from vardump.common import log
from vardump.dumper import Dumper


REQUEST_LABEL = "Request"
RESPONSE_LABEL = "Response"

HTTP_MODULES = ("requests", "urllib3")
"""Packages whose frames are skipped when locating the call site of a request."""


class TransportError(requests.RequestException):
    """Raised when a request fails while going through HTTPDebugAdapter.

    The underlying exception is available as __cause__.
    """


def format_duration(seconds: float) -> str:
    """Formats a duration with the largest unit that keeps it above 1, e.g.
    "1.5ms" or "2.000125s".
    """

    for unit, scale in (("s", 1), ("ms", 1e-3), ("µs", 1e-6)):
        if seconds >= scale:
            break
    else:
        unit, scale = "ns", 1e-9

    text = f"{seconds / scale:.6f}".rstrip("0").rstrip(".")
    return text + unit


def _body_text(body) -> str:
    match body:
        case None:
            return ""
        case bytes() | bytearray():
            return bytes(body).decode("utf-8", errors="replace")
        case str():
            return body
        case _:
            raise TypeError(
                f"request body of type {type(body).__name__} cannot be captured"
            )


def dump_request(request: requests.PreparedRequest) -> str:
    """Returns the raw text of an outgoing request, as it goes on the wire.

    Raises TypeError for streaming bodies (files, generators), which cannot be
    read without consuming them.
    """

    body = _body_text(request.body)
    url = urllib.parse.urlsplit(request.url)

    lines = [f"{request.method} {request.path_url} HTTP/1.1"]
    if "Host" not in request.headers:
        lines.append(f"Host: {url.netloc}")
    lines += [f"{name}: {value}" for name, value in request.headers.items()]
    return "\r\n".join(lines) + "\r\n\r\n" + body


def dump_response(response: requests.Response) -> str:
    """Returns the raw text of a response. This reads the whole body, which
    remains available afterwards through response.content.
    """

    body = response.content.decode(response.encoding or "utf-8", errors="replace")

    lines = [f"HTTP/1.1 {response.status_code} {response.reason or ''}".rstrip()]
    lines += [f"{name}: {value}" for name, value in response.headers.items()]
    return "\r\n".join(lines) + "\r\n\r\n" + body


def parse_http_dump(label: str, raw: str) -> dict[str, str]:
    """Parses a raw request or response into a map.

    The first line is stored as "Request-Line" if label is "Request", and as
    "Status" otherwise. It is followed by the headers in alphabetical order,
    and finally by "Body" if the body isn't blank.
    """

    payload = {}
    headers = {}
    body_lines = []
    in_body = False

    for i, line in enumerate(raw.split("\n")):
        line = line.rstrip("\r\n")

        if i == 0:
            payload["Request-Line" if label == REQUEST_LABEL else "Status"] = line
        elif in_body:
            body_lines.append(line)
        elif line == "":
            in_body = True
        elif ":" in line:
            key, _, value = line.partition(":")
            headers[key.strip()] = value.strip()

    for key in sorted(headers):
        payload[key] = headers[key]

    body = "\n".join(body_lines).strip()
    if body:
        payload["Body"] = body

    return payload


class HTTPDebugAdapter(requests.adapters.BaseAdapter):
    """Transport adapter that sends requests through another adapter, and
    dumps each request and response if debugging is enabled.
    """

    inner: requests.adapters.BaseAdapter

    debug: bool

    dumper: Dumper

    def __init__(self, inner=None, *, debug=None, dumper=None):
        super().__init__()
        self.inner = requests.adapters.HTTPAdapter() if inner is None else inner
        self.debug = os.getenv("HTTP_DEBUG", "") != "" if debug is None else debug
        self.dumper = Dumper(skip_modules=HTTP_MODULES) if dumper is None else dumper

    def set_debug(self, enabled: bool) -> None:
        self.debug = enabled

    def send(self, request, **kwargs):
        if not self.debug:
            try:
                return self.inner.send(request, **kwargs)
            except Exception as exc:
                raise TransportError(
                    f"HTTPDebugAdapter: pass-through round trip failed: {exc}",
                    request=request,
                ) from exc

        start = time.perf_counter()

        try:
            request_dump = parse_http_dump(REQUEST_LABEL, dump_request(request))
        except Exception as exc:
            raise TransportError(
                f"HTTPDebugAdapter: failed to dump request: {exc}", request=request
            ) from exc

        try:
            response = self.inner.send(request, **kwargs)
        except Exception as exc:
            raise TransportError(
                f"HTTPDebugAdapter: round trip failed: {exc}", request=request
            ) from exc

        duration = time.perf_counter() - start

        try:
            response_dump = parse_http_dump(RESPONSE_LABEL, dump_response(response))
        except Exception:
            log.swallow_exception("Failed to dump response to {0}", request.url)
            return response

        self.dumper.dump(
            {
                "Transaction": {
                    "Request": request_dump,
                    "Response": response_dump,
                    "Duration": format_duration(duration),
                }
            }
        )
        return response

    def close(self):
        self.inner.close()
