"""Anthropic Claude provider using anthropic SDK with native async."""

import asyncio
import logging
import time

import anthropic as anthropic_sdk

from config.config_loader import ModelConfig
from peer_review.classifier import status_code_of
from peer_review.providers.base import GenerationError, TextGenerationProvider, require_api_key

logger = logging.getLogger(__name__)


class AnthropicProvider(TextGenerationProvider):
    """Anthropic Claude provider via anthropic SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = require_api_key(config)
        # Retries belong to ProviderInvoker, not the SDK.
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key, max_retries=0)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def generate(self, system_instruction: str, user_message: str) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(
                    model=self._config.model,
                    max_tokens=self._config.max_tokens,
                    system=system_instruction,
                    messages=[{"role": "user", "content": user_message}],
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise GenerationError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise GenerationError(
                self._config.name, f"API call failed: {exc}", status_code=status_code_of(exc)
            ) from exc

        latency = time.monotonic() - start

        text_blocks = [b.text for b in response.content or [] if getattr(b, "type", None) == "text"]

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.info("Anthropic %s: %.2fs, %s tokens", self._config.model, latency, token_count)

        return "\n\n".join(text_blocks)
