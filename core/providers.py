"""Reading generation provider interface and implementations."""

from __future__ import annotations

import logging
import os
import time
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

READING_TEMPERATURE = 0.7


def resolve_api_key(explicit: str | None, *env_names: str) -> str:
    """Return the explicit key if given, else the first non-empty environment variable."""
    if explicit and explicit.strip():
        return explicit.strip()
    for name in env_names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return ""


class ReadingProvider(ABC):
    """Base interface for text generation providers."""

    provider_name: str = "base"

    @abstractmethod
    def generate(self, prompt: str) -> str:
        ...

    def timed_generate(self, prompt: str) -> tuple[str, float]:
        start = time.time()
        text = self.generate(prompt)
        elapsed = time.time() - start
        return text, elapsed


class OpenAIReadingProvider(ReadingProvider):
    """OpenAI Responses API provider."""

    provider_name = "openai"

    def __init__(self, api_key: str | None = None, model: str = "gpt-4o") -> None:
        self.api_key = resolve_api_key(api_key, "OPENAI_API_KEY")
        self.model = model
        self._client = None
        if not self.api_key:
            raise ValueError("OpenAI API key is required. Set OPENAI_API_KEY or pass api_key.")

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def generate(self, prompt: str) -> str:
        client = self._get_client()
        logger.info("Generating reading via OpenAI model=%s", self.model)

        response = client.responses.create(
            model=self.model,
            input=prompt,
            temperature=READING_TEMPERATURE,
        )
        return response.output_text or ""


class GeminiReadingProvider(ReadingProvider):
    """Google Gemini provider for reading generation."""

    provider_name = "gemini"

    def __init__(self, api_key: str | None = None, model: str = "gemini-2.0-flash") -> None:
        self.api_key = resolve_api_key(api_key, "GEMINI_API_KEY", "GOOGLE_API_KEY")
        self.model = model
        self._client = None
        if not self.api_key:
            raise ValueError(
                "Gemini API key is required. Set GEMINI_API_KEY, GOOGLE_API_KEY or pass api_key."
            )

    def _get_client(self):
        if self._client is None:
            from google import genai
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate(self, prompt: str) -> str:
        client = self._get_client()
        logger.info("Generating reading via Gemini model=%s", self.model)

        response = client.models.generate_content(
            model=self.model,
            contents=prompt,
            config={"temperature": READING_TEMPERATURE},
        )
        return response.text or ""


def get_provider(name: str, **kwargs) -> ReadingProvider:
    """Factory function to get a provider by name."""
    providers: dict[str, type[ReadingProvider]] = {
        "openai": OpenAIReadingProvider,
        "gemini": GeminiReadingProvider,
    }
    if name not in providers:
        raise ValueError(f"Unknown provider: {name}. Available: {list(providers.keys())}")
    return providers[name](**kwargs)
