"""Shopify app-proxy signature verification.

When the storefront forwards a request through an app proxy, the query string
carries a ``signature`` parameter: the hex HMAC-SHA256 of the remaining
parameters, keyed with the app's shared secret.
"""

from __future__ import annotations

import hashlib
import hmac
import logging

from core.errors import InvalidProxySignature
from core.http import IntakeHttpRequest

logger = logging.getLogger(__name__)

SIGNATURE_PARAM = "signature"
PROXY_HEADERS = ("x-shopify-shop-domain",)


def is_proxied(request: IntakeHttpRequest) -> bool:
    if any(h in request.headers for h in PROXY_HEADERS):
        return True
    keys = {k for k, _ in request.query}
    return SIGNATURE_PARAM in keys and "shop" in keys


def canonical_message(path: str, query: list[tuple[str, str]]) -> str:
    pairs = sorted(f"{k}={v}" for k, v in query if k != SIGNATURE_PARAM)
    return f"{path}?{'&'.join(pairs)}"


def compute_signature(secret: str, path: str, query: list[tuple[str, str]]) -> str:
    message = canonical_message(path, query)
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_proxy_signature(request: IntakeHttpRequest, secret: str | None) -> None:
    """Raise ``InvalidProxySignature`` if a proxied request is not correctly signed.

    Without a configured secret the check is skipped and every request passes.
    """
    if not secret or not is_proxied(request):
        return

    supplied = request.query_value(SIGNATURE_PARAM) or ""
    expected = compute_signature(secret, request.path, request.query)
    if not hmac.compare_digest(expected.encode("ascii"), supplied.encode("utf-8")):
        logger.warning("Proxy signature mismatch for path=%s", request.path)
        raise InvalidProxySignature()
