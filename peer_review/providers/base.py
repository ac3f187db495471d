"""Abstract base for all text-generation providers."""

from abc import ABC, abstractmethod

from config.config_loader import ModelConfig
from peer_review.errors import ConfigurationError


class GenerationError(Exception):
    """Raised by an adapter when a provider call fails.

    Carries raw provider detail. It is classified and replaced by a
    user-safe ProviderError before it leaves the invoker.
    """

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        self.provider_name = provider_name
        self.status_code = status_code
        super().__init__(f"[{provider_name}] {message}")


def require_api_key(config: ModelConfig) -> str:
    if not config.api_key:
        raise ConfigurationError(
            f"Missing API key for {config.label}. Add {config.api_key_env} to .env.local."
        )
    return config.api_key


class TextGenerationProvider(ABC):
    """Abstract base for all text-generation providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'openai', 'claude')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def generate(self, system_instruction: str, user_message: str) -> str:
        """Generate a response.

        Args:
            system_instruction: System prompt for the call.
            user_message: The user turn.

        Returns:
            The response text. May be empty; callers normalize it.

        Raises:
            GenerationError: On API failure, timeout, or invalid response.
        """
        ...
