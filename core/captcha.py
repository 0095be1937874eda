"""Server-side hCaptcha verification."""

from __future__ import annotations

import logging

import httpx

from core.errors import CaptchaRejected, CaptchaUnreachable

logger = logging.getLogger(__name__)

HCAPTCHA_VERIFY_URL = "https://hcaptcha.com/siteverify"


class HCaptchaVerifier:
    """Checks a client token against the hCaptcha siteverify endpoint."""

    def __init__(
        self,
        secret: str,
        client: httpx.Client,
        verify_url: str = HCAPTCHA_VERIFY_URL,
    ) -> None:
        self.secret = secret
        self.client = client
        self.verify_url = verify_url

    def verify(self, token: str, remote_ip: str | None = None) -> None:
        data = {"secret": self.secret, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip

        try:
            resp = self.client.post(self.verify_url, data=data)
            resp.raise_for_status()
            result = resp.json()
        except httpx.HTTPError as exc:
            logger.error("hCaptcha request failed: %s", exc)
            raise CaptchaUnreachable() from exc
        except ValueError as exc:
            logger.error("hCaptcha returned non-JSON body: %s", resp.text[:200])
            raise CaptchaUnreachable() from exc

        if not isinstance(result, dict) or not result.get("success"):
            codes = result.get("error-codes") if isinstance(result, dict) else None
            logger.info("hCaptcha rejected token: error-codes=%s", codes)
            raise CaptchaRejected()

        logger.debug("hCaptcha token accepted (hostname=%s)", result.get("hostname"))
