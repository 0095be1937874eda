"""Vercel serverless entrypoint for the astrology intake route.

Vercel's Python runtime invokes ``handler`` (a ``BaseHTTPRequestHandler``).
``dispatch`` accepts dict events or attribute-style request objects and returns
``{statusCode, headers, body}``; both share one ``IntakeHandler`` per process.
"""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from http.server import BaseHTTPRequestHandler
from pathlib import Path
from typing import Any

# Ensure project root is on the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from core.config import load_config, load_dotenv_files
from core.http import IntakeHttpRequest, error_response
from core.pipeline import SERVER_ERROR, IntakeHandler, build_services, static_response

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_intake_handler() -> IntakeHandler:
    """Load configuration and build provider clients once per process."""
    load_dotenv_files()
    config = load_config()
    logging.basicConfig(level=config.log_level)
    return IntakeHandler(build_services(config))


def dispatch(request: Any) -> dict[str, Any]:
    req = IntakeHttpRequest.from_event(request)

    # Preflight and health checks answer even when startup is broken
    response = static_response(req)
    if response is not None:
        return response

    try:
        intake = get_intake_handler()
    except Exception:
        logger.exception("Intake handler failed to start")
        return error_response(500, SERVER_ERROR, req.origin)
    return intake.handle(req)


class handler(BaseHTTPRequestHandler):
    def _respond(self, response: dict[str, Any]) -> None:
        body = str(response.get("body") or "").encode("utf-8")
        self.send_response(int(response["statusCode"]))
        for k, v in response.get("headers", {}).items():
            self.send_header(k, v)
        if body:
            self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if body and self.command != "HEAD":
            self.wfile.write(body)

    def _dispatch(self) -> None:
        self._respond(dispatch(self))

    do_GET = _dispatch
    do_POST = _dispatch
    do_OPTIONS = _dispatch
    do_HEAD = _dispatch
    do_PUT = _dispatch
    do_PATCH = _dispatch
    do_DELETE = _dispatch
