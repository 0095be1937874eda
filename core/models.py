"""Data models for the astrology intake endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProviderName(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"


# Wire names of the submitted form fields
REQUIRED_FIELDS: tuple[str, ...] = ("q", "email", "first", "last", "dob", "tob", "country", "city")
CAPTCHA_FIELDS: tuple[str, ...] = ("hcaptchaToken", "h-captcha-response")

FALSE_STRINGS = {"0", "false", "f", "no", "n", "off"}

NO_CONTENT_FALLBACK = "No content generated."

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o",
    "gemini": "gemini-2.0-flash",
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _flag(value: Any, default: bool = True) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in FALSE_STRINGS


@dataclass(frozen=True)
class ReadingRequest:
    """A single user's question plus the birth details the reading is cast for."""

    question: str
    email: str
    first: str
    last: str
    dob: str
    tob: str
    country: str
    city: str
    tz: str = ""
    notes: str = ""
    consent: bool = True
    captcha_token: str = ""

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> ReadingRequest:
        """Build a request from submitted form fields, applying defaults."""
        token = ""
        for name in CAPTCHA_FIELDS:
            token = _text(fields.get(name))
            if token:
                break
        return cls(
            question=_text(fields.get("q")),
            email=_text(fields.get("email")),
            first=_text(fields.get("first")),
            last=_text(fields.get("last")),
            dob=_text(fields.get("dob")),
            tob=_text(fields.get("tob")),
            country=_text(fields.get("country")),
            city=_text(fields.get("city")),
            tz=_text(fields.get("tz")),
            notes=_text(fields.get("notes")),
            consent=_flag(fields.get("consent")),
            captcha_token=token,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first} {self.last}".strip()

    @property
    def birthplace(self) -> str:
        return ", ".join(p for p in (self.city, self.country) if p)

    def required_values(self) -> tuple[str, ...]:
        return (
            self.question, self.email, self.first, self.last,
            self.dob, self.tob, self.country, self.city,
        )


@dataclass
class EmailAttachment:
    content: str  # base64
    filename: str
    type: str = "application/pdf"
    disposition: str = "attachment"


@dataclass
class OutgoingEmail:
    to: str
    sender: str
    subject: str
    text: str
    sender_name: str = ""
    attachments: list[EmailAttachment] = field(default_factory=list)


@dataclass
class IntakeResult:
    """Outcome of a successful POST, before it is turned into a response."""

    message: str
    pdf_bytes: int = 0
    test_mode: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"ok": True, "message": self.message}
        if self.test_mode:
            payload["testMode"] = True
            payload["pdfBytes"] = self.pdf_bytes
        return payload
