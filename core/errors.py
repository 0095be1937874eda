"""Error taxonomy for the intake endpoint.

Every failure the caller can see is an ``IntakeError`` carrying the HTTP status
and a short, fixed message. Upstream details stay in the logs.
"""

from __future__ import annotations


class ConfigError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


class IntakeError(Exception):
    status: int = 500
    message: str = "Server error."

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        self.message = message or self.message
        if status is not None:
            self.status = status
        super().__init__(self.message)


# --- client errors ---

class MalformedBody(IntakeError):
    status = 400
    message = "Malformed JSON body."


class MissingField(IntakeError):
    status = 400
    message = "Missing required fields."


class MissingCaptcha(IntakeError):
    status = 400
    message = "hCaptcha token missing."


class CaptchaRejected(IntakeError):
    status = 400
    message = "hCaptcha verification failed."


class InvalidProxySignature(IntakeError):
    status = 401
    message = "Invalid proxy signature."


class MethodNotAllowed(IntakeError):
    status = 405
    message = "Method not allowed"


# --- upstream errors ---

class CaptchaUnreachable(IntakeError):
    status = 502
    message = "Could not reach hCaptcha."


class GenerationFailed(IntakeError):
    status = 502
    message = "Reading generation failed."


class DeliveryFailed(IntakeError):
    status = 502
    message = "Email delivery failed."


# --- internal errors ---

class RenderFailed(IntakeError):
    status = 500
    message = "Could not render PDF."
