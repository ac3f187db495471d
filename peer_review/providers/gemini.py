"""Gemini provider using google-genai SDK with native async."""

import asyncio
import logging
import time

from google import genai
from google.genai import types as genai_types

from config.config_loader import ModelConfig
from peer_review.classifier import status_code_of
from peer_review.providers.base import GenerationError, TextGenerationProvider, require_api_key

logger = logging.getLogger(__name__)


class GeminiProvider(TextGenerationProvider):
    """Google Gemini provider via google-genai SDK.

    With ``concat_system_prompt`` set, the system instruction is sent as a
    prefix of the user contents instead of via ``system_instruction``, for
    models that ignore the latter.
    """

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = require_api_key(config)
        self._client = genai.Client(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    def _request(self, system_instruction: str, user_message: str) -> tuple[str, genai_types.GenerateContentConfig]:
        if self._config.concat_system_prompt:
            contents = f"{system_instruction}\n\n---\n\n{user_message}"
            return contents, genai_types.GenerateContentConfig(max_output_tokens=self._config.max_tokens)
        return user_message, genai_types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=self._config.max_tokens,
        )

    async def generate(self, system_instruction: str, user_message: str) -> str:
        contents, generate_config = self._request(system_instruction, user_message)
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._config.model,
                    contents=contents,
                    config=generate_config,
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

        token_count: int | None = None
        if response.usage_metadata:
            token_count = response.usage_metadata.total_token_count

        logger.info("Gemini %s: %.2fs, %s tokens", self._config.model, latency, token_count)

        return response.text or ""
