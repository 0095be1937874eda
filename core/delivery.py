"""Transactional email delivery through the SendGrid v3 HTTP API."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from core.errors import DeliveryFailed
from core.models import EmailAttachment, OutgoingEmail, ReadingRequest

logger = logging.getLogger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"
ATTACHMENT_NAME = "reading.pdf"


def build_reading_email(
    req: ReadingRequest,
    pdf_bytes: bytes,
    sender: str,
    brand_name: str = "Your Brand",
) -> OutgoingEmail:
    """Compose the email that carries the rendered reading."""
    text = (
        f"Hi {req.first},\n\n"
        f"Attached is your personalized PDF reading for the question:\n\n"
        f"\"{req.question}\"\n\n"
        f"Regards,\n{brand_name}"
    )
    return OutgoingEmail(
        to=req.email,
        sender=sender,
        sender_name=brand_name,
        subject=f"Your personalized astrology reading from {brand_name}",
        text=text,
        attachments=[
            EmailAttachment(
                content=base64.b64encode(pdf_bytes).decode("ascii"),
                filename=ATTACHMENT_NAME,
            )
        ],
    )


def sendgrid_payload(message: OutgoingEmail) -> dict[str, Any]:
    sender: dict[str, str] = {"email": message.sender}
    if message.sender_name:
        sender["name"] = message.sender_name
    return {
        "personalizations": [{"to": [{"email": message.to}]}],
        "from": sender,
        "subject": message.subject,
        "content": [{"type": "text/plain", "value": message.text}],
        "attachments": [
            {
                "content": a.content,
                "filename": a.filename,
                "type": a.type,
                "disposition": a.disposition,
            }
            for a in message.attachments
        ],
    }


class SendGridMailer:
    """Hands messages to SendGrid. Success means the provider accepted the send."""

    def __init__(
        self,
        api_key: str,
        client: httpx.Client,
        endpoint: str = SENDGRID_SEND_URL,
    ) -> None:
        self.api_key = api_key
        self.client = client
        self.endpoint = endpoint

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def send(self, message: OutgoingEmail) -> None:
        try:
            resp = self.client.post(
                self.endpoint,
                headers=self._headers(),
                json=sendgrid_payload(message),
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "SendGrid rejected send: status=%s body=%s",
                exc.response.status_code, exc.response.text[:500],
            )
            raise DeliveryFailed() from exc
        except httpx.HTTPError as exc:
            logger.error("SendGrid request failed: %s", exc)
            raise DeliveryFailed() from exc

        logger.info(
            "Email accepted by SendGrid (status=%s, message_id=%s)",
            resp.status_code, resp.headers.get("x-message-id"),
        )
