"""Required-field checks for a parsed reading request."""

from __future__ import annotations

from core.errors import MissingCaptcha, MissingField
from core.models import ReadingRequest


def validate_reading_request(req: ReadingRequest) -> None:
    """Raise if a required field or the CAPTCHA token is missing.

    The missing-field error stays generic and never names the field.
    """
    if not all(req.required_values()):
        raise MissingField()
    if not req.captcha_token:
        raise MissingCaptcha()
