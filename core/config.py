"""Environment-sourced configuration, validated once at process start."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from core.errors import ConfigError
from core.models import DEFAULT_MODELS, FALSE_STRINGS, ProviderName

logger = logging.getLogger(__name__)

GENERATION_KEY_ENV: dict[str, tuple[str, ...]] = {
    "openai": ("OPENAI_API_KEY",),
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
}


@dataclass(frozen=True)
class IntakeConfig:
    captcha_secret: str
    generation_api_key: str
    email_api_key: str
    sender_address: str
    brand_name: str = "Your Brand"
    proxy_signing_secret: str | None = None
    test_mode: bool = False
    generation_provider: str = "openai"
    generation_model: str = "gpt-4o"
    http_timeout: float = 15.0
    log_level: str = "INFO"


def load_dotenv_files(root: str | Path | None = None) -> None:
    """Load ``.env`` files for local runs. Vercel injects the environment itself."""
    if os.getenv("VERCEL") == "1":
        return

    from dotenv import load_dotenv

    root = Path(root) if root else Path(__file__).resolve().parents[1]
    for cand in (root / ".env", root / ".env.local"):
        if cand.exists():
            load_dotenv(dotenv_path=cand)


def _get(env: Mapping[str, str], name: str, default: str = "") -> str:
    value = env.get(name)
    return default if value is None else value.strip()


def _get_bool(env: Mapping[str, str], name: str) -> bool:
    value = _get(env, name)
    return bool(value) and value.lower() not in FALSE_STRINGS


def _first(env: Mapping[str, str], names: tuple[str, ...]) -> str:
    for name in names:
        value = _get(env, name)
        if value:
            return value
    return ""


def load_config(environ: Mapping[str, str] | None = None) -> IntakeConfig:
    """Read and validate configuration; raise ``ConfigError`` if anything required is missing."""
    env = os.environ if environ is None else environ

    provider = _get(env, "GENERATION_PROVIDER", "openai").lower() or "openai"
    if provider not in {p.value for p in ProviderName}:
        raise ConfigError(
            f"Unknown GENERATION_PROVIDER: {provider}. Available: {sorted(GENERATION_KEY_ENV)}"
        )

    test_mode = _get_bool(env, "INTAKE_TEST_MODE")
    key_names = GENERATION_KEY_ENV[provider]

    missing: list[str] = []
    if not _get(env, "HCAPTCHA_SECRET"):
        missing.append("HCAPTCHA_SECRET")
    if not test_mode:
        if not _first(env, key_names):
            missing.append(" or ".join(key_names))
        if not _get(env, "SENDGRID_API_KEY"):
            missing.append("SENDGRID_API_KEY")
        if not _get(env, "FROM_EMAIL"):
            missing.append("FROM_EMAIL")
    if missing:
        raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

    timeout_raw = _get(env, "HTTP_TIMEOUT_SECONDS", "15")
    try:
        http_timeout = float(timeout_raw) if timeout_raw else 15.0
    except ValueError as exc:
        raise ConfigError(f"HTTP_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}") from exc

    config = IntakeConfig(
        captcha_secret=_get(env, "HCAPTCHA_SECRET"),
        generation_api_key=_first(env, key_names),
        email_api_key=_get(env, "SENDGRID_API_KEY"),
        sender_address=_get(env, "FROM_EMAIL"),
        brand_name=_get(env, "BRAND_NAME") or "Your Brand",
        proxy_signing_secret=_get(env, "SHOPIFY_PROXY_SECRET") or None,
        test_mode=test_mode,
        generation_provider=provider,
        generation_model=_get(env, "GENERATION_MODEL") or DEFAULT_MODELS[provider],
        http_timeout=http_timeout,
        log_level=(_get(env, "LOG_LEVEL") or "INFO").upper(),
    )

    if config.test_mode:
        logger.warning("INTAKE_TEST_MODE is on: generation and email delivery are skipped")
    return config
