"""LLM providers used to rewrite resume text.

A provider turns one prompt into plain text. Credentials and the model name
come from the environment; a ``.env`` file in the working directory is
honoured.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import asdict, dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

__all__ = [
    "DEFAULT_GEMINI_MODEL",
    "DEFAULT_PROVIDER",
    "GeminiProvider",
    "GenerationSettings",
    "LLMError",
    "LLMProvider",
    "PROVIDERS",
    "provider_from_env",
]

DEFAULT_PROVIDER = "gemini"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


class LLMError(RuntimeError):
    """Raised when a provider cannot be configured or its call fails."""


@dataclass(frozen=True)
class GenerationSettings:
    """Sampling options passed to the provider.

    ``None`` leaves a value at the provider's default.
    """

    temperature: float | None = 0.7
    max_output_tokens: int | None = None
    seed: int | None = None

    def to_config(self) -> dict:
        return {key: value for key, value in asdict(self).items() if value is not None}


class LLMProvider(ABC):
    """One text-generation backend."""

    name: str = ""

    @abstractmethod
    def complete(self, prompt: str, settings: GenerationSettings) -> str:
        """Send *prompt* and return the model's text, stripped.

        Raises:
            LLMError: If the call fails.
        """


class GeminiProvider(LLMProvider):
    """Google Gemini through the ``google-genai`` SDK."""

    name = "gemini"
    api_key_env = "GEMINI_API_KEY"

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        from google import genai

        self.api_key = api_key or os.environ.get(self.api_key_env)
        if not self.api_key:
            raise LLMError(f"Missing {self.api_key_env} environment variable")

        self.model = model or os.environ.get("LLM_MODEL", DEFAULT_GEMINI_MODEL)
        self.client = genai.Client(api_key=self.api_key)

    @classmethod
    def is_configured(cls, environ: Mapping[str, str] | None = None) -> bool:
        """Whether an API key is available, without creating a client."""
        return bool((environ if environ is not None else os.environ).get(cls.api_key_env))

    def complete(self, prompt: str, settings: GenerationSettings) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model, contents=prompt, config=settings.to_config()
            )
        except Exception as exc:
            # The prompt carries resume text; keep it out of the message.
            raise LLMError(f"Gemini API call failed: {type(exc).__name__}") from exc
        return (response.text or "").strip()


PROVIDERS: dict[str, type[LLMProvider]] = {
    GeminiProvider.name: GeminiProvider,
}


def provider_from_env() -> LLMProvider:
    """Create the provider named by ``LLM_PROVIDER`` (default ``gemini``).

    Raises:
        LLMError: If the name is unknown or the provider is not configured.
    """
    name = os.environ.get("LLM_PROVIDER", DEFAULT_PROVIDER).strip().lower()
    provider_cls = PROVIDERS.get(name)
    if provider_cls is None:
        raise LLMError(f"Unknown LLM provider: {name}")
    logger.debug("Using %s provider", name)
    return provider_cls()
