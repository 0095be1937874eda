"""HTTP plumbing shared by the Vercel entrypoints.

The Python runtime hands functions different request shapes depending on how
they are invoked (a ``BaseHTTPRequestHandler`` instance, a legacy dict event,
or an object with ``method``/``body`` attributes). ``IntakeHttpRequest``
normalises them, and every response is returned in the
``{statusCode, headers, body}`` form.
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urlsplit

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type"


@dataclass
class IntakeHttpRequest:
    method: str = "GET"
    path: str = "/"
    query: list[tuple[str, str]] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | dict[str, Any] = b""

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    @property
    def origin(self) -> str:
        return self.headers.get("origin", "")

    @property
    def remote_ip(self) -> str | None:
        forwarded = self.headers.get("x-forwarded-for", "")
        if forwarded:
            return forwarded.split(",")[0].strip() or None
        return self.headers.get("x-real-ip") or None

    def query_value(self, key: str) -> str | None:
        for k, v in self.query:
            if k == key:
                return v
        return None

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        headers: Any = None,
        body: bytes | dict[str, Any] = b"",
    ) -> IntakeHttpRequest:
        parts = urlsplit(url or "/")
        return cls(
            method=(method or "GET").upper(),
            path=parts.path or "/",
            query=parse_qsl(parts.query, keep_blank_values=True),
            headers=_lower_headers(headers),
            body=body,
        )

    @classmethod
    def from_event(cls, request: Any) -> IntakeHttpRequest:
        """Build a request from a dict event or an attribute-style request object."""
        if isinstance(request, dict):
            return cls._from_dict(request)

        method = getattr(request, "method", "") or getattr(request, "command", "") or "GET"
        url = str(getattr(request, "url", "") or getattr(request, "path", "") or "/")
        if "://" in url:
            parts = urlsplit(url)
            url = parts.path + (f"?{parts.query}" if parts.query else "")
        headers = getattr(request, "headers", None)

        raw = getattr(request, "body", b"") or b""
        if not raw and hasattr(request, "rfile") and headers is not None:
            length = int(headers.get("Content-Length", 0) or 0)
            if length > 0:
                raw = request.rfile.read(length)
        if isinstance(raw, str):
            raw = raw.encode("utf-8")

        return cls.from_url(str(method), url, headers=headers, body=raw)

    @classmethod
    def _from_dict(cls, event: dict[str, Any]) -> IntakeHttpRequest:
        method = event.get("method") or event.get("httpMethod") or "GET"
        url = str(event.get("url") or event.get("path") or "/")
        req = cls.from_url(str(method), url, headers=event.get("headers"))

        query = event.get("query") or event.get("queryStringParameters")
        if isinstance(query, dict):
            req.query = [
                (str(k), ",".join(map(str, v)) if isinstance(v, list) else str(v))
                for k, v in query.items()
            ]

        body = event.get("body")
        if isinstance(body, dict):
            req.body = body
        elif isinstance(body, str):
            if event.get("isBase64Encoded"):
                req.body = base64.b64decode(body)
            else:
                req.body = body.encode("utf-8")
        elif isinstance(body, bytes):
            req.body = body
        return req


def _lower_headers(headers: Any) -> dict[str, str]:
    if not headers:
        return {}
    return {str(k).lower(): str(v) for k, v in headers.items()}


def cors_headers(origin: str = "") -> dict[str, str]:
    headers = {
        "Access-Control-Allow-Origin": origin or "*",
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }
    if origin:
        headers["Vary"] = "Origin"
    return headers


def json_response(status: int, payload: dict[str, Any], origin: str = "") -> dict[str, Any]:
    headers = {"Content-Type": "application/json; charset=utf-8"}
    headers.update(cors_headers(origin))
    return {
        "statusCode": status,
        "headers": headers,
        "body": json.dumps(payload, ensure_ascii=False),
    }


def error_response(status: int, message: str, origin: str = "", **extra: Any) -> dict[str, Any]:
    return json_response(status, {"ok": False, "error": message, **extra}, origin)


def empty_response(status: int = 204, origin: str = "") -> dict[str, Any]:
    return {"statusCode": status, "headers": cors_headers(origin), "body": ""}
