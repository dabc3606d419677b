"""
Base interfaces for integration providers.
Abstract base classes for third-party service integrations.
"""
from abc import ABC, abstractmethod


class CompletionProvider(ABC):
    """Base interface for text generation providers (Gemini, OpenAI, etc.)"""

    name: str = "completion"

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Send a prompt to the model in a single attempt.

        Returns:
            The raw completion text, untrusted and possibly empty.

        Raises:
            ProviderError: transport or provider-side failure.
            ConfigurationError: provider credential is missing.
        """
        pass
