"""Health-check route. No configuration, no external calls."""

from __future__ import annotations

import sys
from http.server import BaseHTTPRequestHandler
from pathlib import Path
from typing import Any

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from core.http import IntakeHttpRequest, json_response

ROUTE = "/api/ping"


def ping(request: Any) -> dict[str, Any]:
    req = IntakeHttpRequest.from_event(request)
    return json_response(200, {"ok": True, "route": ROUTE, "method": req.method}, req.origin)


class handler(BaseHTTPRequestHandler):
    def _dispatch(self) -> None:
        response = ping(self)
        body = response["body"].encode("utf-8")
        self.send_response(response["statusCode"])
        for k, v in response["headers"].items():
            self.send_header(k, v)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    do_GET = _dispatch
    do_POST = _dispatch
    do_OPTIONS = _dispatch
    do_HEAD = _dispatch
    do_PUT = _dispatch
    do_PATCH = _dispatch
    do_DELETE = _dispatch
