"""Intake pipeline orchestrating verification, generation, rendering, and delivery."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from core.body_parser import parse_reading_request
from core.captcha import HCaptchaVerifier
from core.config import IntakeConfig
from core.delivery import SendGridMailer, build_reading_email
from core.errors import GenerationFailed, IntakeError, MethodNotAllowed
from core.http import IntakeHttpRequest, empty_response, error_response, json_response
from core.models import NO_CONTENT_FALLBACK, IntakeResult, ReadingRequest
from core.pdf_render import render_reading_pdf
from core.prompt_builder import build_reading_prompt
from core.providers import ReadingProvider, get_provider
from core.proxy_signature import verify_proxy_signature
from core.validation import validate_reading_request
from prompts.templates import TEST_MODE_READING

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Your reading is being sent to your email."
TEST_MODE_MESSAGE = "Test mode: request validated and PDF rendered."
REACHABLE_MESSAGE = "Astrology intake endpoint is reachable."
SERVER_ERROR = "Server error."


@dataclass
class IntakeServices:
    """Collaborators built once per process and shared by every invocation."""

    config: IntakeConfig
    captcha: HCaptchaVerifier
    generator: ReadingProvider | None = None
    mailer: SendGridMailer | None = None


def build_services(config: IntakeConfig, http: httpx.Client | None = None) -> IntakeServices:
    """Construct the real provider clients for ``config``."""
    http = http or httpx.Client(timeout=config.http_timeout)

    generator: ReadingProvider | None = None
    mailer: SendGridMailer | None = None
    if not config.test_mode:
        generator = get_provider(
            config.generation_provider,
            api_key=config.generation_api_key,
            model=config.generation_model,
        )
        mailer = SendGridMailer(config.email_api_key, http)

    return IntakeServices(
        config=config,
        captcha=HCaptchaVerifier(config.captcha_secret, http),
        generator=generator,
        mailer=mailer,
    )


def generate_reading(generator: ReadingProvider, req: ReadingRequest) -> str:
    prompt = build_reading_prompt(req)
    try:
        text, elapsed = generator.timed_generate(prompt)
    except Exception as exc:
        logger.exception("Reading generation failed via %s", generator.provider_name)
        raise GenerationFailed() from exc

    logger.info("Reading generated via %s in %.2fs", generator.provider_name, elapsed)
    text = (text or "").strip()
    if not text:
        logger.warning("Provider returned empty output; using fallback text")
        return NO_CONTENT_FALLBACK
    return text


def static_response(request: IntakeHttpRequest) -> dict[str, Any] | None:
    """Answer OPTIONS and GET, which need no configured services."""
    if request.method == "OPTIONS":
        return empty_response(204, request.origin)
    if request.method == "GET":
        return json_response(200, {"ok": True, "message": REACHABLE_MESSAGE}, request.origin)
    return None


class IntakeHandler:
    """Method-dispatched handler for the intake route."""

    def __init__(self, services: IntakeServices) -> None:
        self.services = services
        if not services.config.proxy_signing_secret:
            logger.warning("SHOPIFY_PROXY_SECRET not set: proxy signature checks are skipped")

    @property
    def config(self) -> IntakeConfig:
        return self.services.config

    def handle(self, request: IntakeHttpRequest) -> dict[str, Any]:
        origin = request.origin

        response = static_response(request)
        if response is not None:
            return response

        try:
            if request.method != "POST":
                raise MethodNotAllowed()
            result = self.process(request)
        except IntakeError as exc:
            logger.warning("Intake request failed: %s (%s)", exc.message, type(exc).__name__)
            return error_response(exc.status, exc.message, origin)
        except Exception:
            logger.exception("Unhandled error in intake pipeline")
            return error_response(500, SERVER_ERROR, origin)

        return json_response(200, result.to_dict(), origin)

    def process(self, request: IntakeHttpRequest) -> IntakeResult:
        """Run the POST pipeline; every failure surfaces as an ``IntakeError``."""
        cfg = self.config

        verify_proxy_signature(request, cfg.proxy_signing_secret)

        req = parse_reading_request(request.content_type, request.body)
        validate_reading_request(req)

        self.services.captcha.verify(req.captcha_token, remote_ip=request.remote_ip)

        if cfg.test_mode:
            pdf = render_reading_pdf(req, TEST_MODE_READING, brand_name=cfg.brand_name)
            logger.info("Test mode: skipped generation and delivery")
            return IntakeResult(message=TEST_MODE_MESSAGE, pdf_bytes=len(pdf), test_mode=True)

        if self.services.generator is None or self.services.mailer is None:
            raise RuntimeError("Generator and mailer are required outside test mode")

        reading = generate_reading(self.services.generator, req)
        pdf = render_reading_pdf(req, reading, brand_name=cfg.brand_name)

        message = build_reading_email(req, pdf, cfg.sender_address, cfg.brand_name)
        self.services.mailer.send(message)

        logger.info("Reading handed to email provider")
        return IntakeResult(message=SUCCESS_MESSAGE, pdf_bytes=len(pdf))
