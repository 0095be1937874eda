from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import httpx
import pytest

from core.captcha import HCaptchaVerifier
from core.config import IntakeConfig
from core.models import OutgoingEmail
from core.pipeline import IntakeHandler, IntakeServices
from core.providers import ReadingProvider


class StubGenerator(ReadingProvider):
    provider_name = "stub"

    def __init__(self, text="Sample reading text", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


class StubMailer:
    def __init__(self, error=None):
        self.error = error
        self.sent: list[OutgoingEmail] = []

    def send(self, message):
        self.sent.append(message)
        if self.error is not None:
            raise self.error


class CaptchaServer:
    """Stands in for hCaptcha's siteverify endpoint."""

    def __init__(self, payload=None, status=200):
        self.payload = {"success": True} if payload is None else payload
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request):
        self.requests.append(request)
        return httpx.Response(self.status, json=self.payload)

    def verifier(self, secret="hc-secret"):
        client = httpx.Client(transport=httpx.MockTransport(self))
        return HCaptchaVerifier(secret, client)


@pytest.fixture
def valid_fields():
    return {
        "q": "Will this year bring a career change?",
        "email": "ada@example.com",
        "first": "Ada",
        "last": "Lovelace",
        "dob": "1990-12-10",
        "tob": "08:30",
        "country": "United Kingdom",
        "city": "London",
        "tz": "Europe/London",
        "notes": "",
        "hcaptchaToken": "10000000-aaaa-bbbb-cccc-000000000001",
    }


@pytest.fixture
def config():
    return IntakeConfig(
        captcha_secret="hc-secret",
        generation_api_key="sk-test",
        email_api_key="SG.test",
        sender_address="readings@example.com",
        brand_name="Starlight",
    )


@pytest.fixture
def captcha_server():
    return CaptchaServer()


@pytest.fixture
def generator():
    return StubGenerator()


@pytest.fixture
def mailer():
    return StubMailer()


@pytest.fixture
def make_handler(config, captcha_server, generator, mailer):
    def _make(**overrides):
        cfg = overrides.pop("config", config)
        services = IntakeServices(
            config=cfg,
            captcha=overrides.pop("captcha", captcha_server.verifier()),
            generator=overrides.pop("generator", generator),
            mailer=overrides.pop("mailer", mailer),
        )
        return IntakeHandler(services)

    return _make


@pytest.fixture
def captcha_factory():
    return CaptchaServer


@pytest.fixture
def generator_factory():
    return StubGenerator


@pytest.fixture
def mailer_factory():
    return StubMailer
