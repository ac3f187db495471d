"""Config-driven provider construction."""

import logging
from collections.abc import Iterable, Mapping

from config.config_loader import AppConfig, ModelConfig
from peer_review.errors import ConfigurationError
from peer_review.models import Role
from peer_review.providers.anthropic import AnthropicProvider
from peer_review.providers.base import TextGenerationProvider
from peer_review.providers.gemini import GeminiProvider
from peer_review.providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

# Keyed by the ``sdk`` field of a model entry in settings.yaml.
PROVIDER_CLASSES: dict[str, type[TextGenerationProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}


def build_provider(model_cfg: ModelConfig) -> TextGenerationProvider:
    """Instantiate the adapter for one model entry.

    Raises:
        ConfigurationError: Unknown SDK or missing API key.
    """
    provider_cls = PROVIDER_CLASSES.get(model_cfg.sdk)
    if provider_cls is None:
        raise ConfigurationError(f"Unknown SDK '{model_cfg.sdk}' for provider '{model_cfg.name}'.")
    return provider_cls(model_cfg)


def build_providers(config: AppConfig, names: Iterable[str]) -> dict[str, TextGenerationProvider]:
    """Build the named providers. Returns dict keyed by name."""
    providers: dict[str, TextGenerationProvider] = {}
    for name in names:
        if name in providers:
            continue
        model_cfg = config.models.get(name)
        if model_cfg is None:
            raise ConfigurationError(f"Provider '{name}' is not configured in settings.yaml.")
        providers[name] = build_provider(model_cfg)
        logger.debug("Built provider %s (%s)", name, model_cfg.model)
    return providers


def build_review_roles(
    config: AppConfig,
    providers: Mapping[str, TextGenerationProvider],
) -> tuple[list[Role], Role]:
    """Map the configured reviewer and summarizer names onto labelled roles."""

    def role_for(name: str) -> Role:
        if name not in providers:
            raise ConfigurationError(f"Provider '{name}' is not available.")
        model_cfg = config.models.get(name)
        label = model_cfg.label if model_cfg else name
        return Role(label=label, provider=providers[name])

    reviewers = [role_for(name) for name in config.defaults.reviewers]
    summarizer = role_for(config.defaults.summarizer)
    return reviewers, summarizer
