"""Request body parsing: (content type, raw bytes) -> flat field mapping."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import parse_qsl

from core.errors import MalformedBody
from core.models import ReadingRequest

logger = logging.getLogger(__name__)

JSON_TYPES = ("application/json", "+json")
FORM_TYPE = "application/x-www-form-urlencoded"


def _media_type(content_type: str) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def _as_record(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_body(content_type: str, raw: bytes | str | dict[str, Any] | None) -> dict[str, Any]:
    """Parse a request body into a field mapping.

    Precedence follows the content type: JSON, then form-encoded, then a
    best-effort JSON attempt for anything else, then an empty record. Only a
    body declared as JSON that fails to parse is an error.
    """
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    if isinstance(raw, str):
        raw = raw.encode("utf-8")

    media_type = _media_type(content_type)

    if media_type.endswith(JSON_TYPES):
        try:
            return _as_record(json.loads(_decode(raw)))
        except ValueError as exc:
            logger.info("Rejecting body declared as JSON: %s", exc)
            raise MalformedBody() from exc

    if media_type == FORM_TYPE:
        return dict(parse_qsl(_decode(raw), keep_blank_values=True))

    try:
        return _as_record(json.loads(_decode(raw)))
    except ValueError:
        logger.debug("Unparseable body with content type %r treated as empty", content_type)
        return {}


def parse_reading_request(content_type: str, raw: bytes | str | dict[str, Any] | None) -> ReadingRequest:
    return ReadingRequest.from_fields(parse_body(content_type, raw))
