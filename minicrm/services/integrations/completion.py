"""
Completion providers backed by Gemini or OpenAI.
"""
import logging
from typing import Optional

import google.generativeai as genai
from openai import AsyncOpenAI

from minicrm.config import settings
from minicrm.core.exceptions import ConfigurationError, ProviderError
from minicrm.services.integrations.base import CompletionProvider

logger = logging.getLogger(__name__)


class GeminiCompletionProvider(CompletionProvider):
    """Google Gemini via google-generativeai."""

    name = "Gemini"

    def __init__(self, api_key: str, model: str, temperature: float = 0.7):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature

    async def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured")

        try:
            genai.configure(api_key=self.api_key)
            client = genai.GenerativeModel(
                self.model,
                generation_config={"temperature": self.temperature}
            )
            response = await client.generate_content_async(prompt)
            return response.text or ""
        except Exception as e:
            logger.error(f"Gemini generation failed: {e}")
            raise ProviderError(self.name, str(e)) from e


class OpenAICompletionProvider(CompletionProvider):
    """OpenAI chat completions."""

    name = "OpenAI"

    def __init__(self, api_key: str, model: str, temperature: float = 0.7):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self._client: Optional[AsyncOpenAI] = None

    async def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured")

        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
                temperature=self.temperature
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"OpenAI generation failed: {e}")
            raise ProviderError(self.name, str(e)) from e


def get_completion_provider() -> CompletionProvider:
    """Provider selected by AI_PROVIDER."""
    provider = settings.AI_PROVIDER.lower()
    if provider == "gemini":
        return GeminiCompletionProvider(settings.GEMINI_API_KEY, settings.AI_MODEL, settings.AI_TEMPERATURE)
    if provider == "openai":
        return OpenAICompletionProvider(settings.OPENAI_API_KEY, settings.AI_MODEL, settings.AI_TEMPERATURE)
    raise ConfigurationError(f"Unknown AI_PROVIDER '{settings.AI_PROVIDER}'")
