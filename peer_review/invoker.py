"""Single provider call with one flat-delay retry on transient failures."""

import asyncio
import logging

from peer_review.classifier import ErrorKind, classify_error
from peer_review.errors import ConfigurationError, ProviderError
from peer_review.providers.base import TextGenerationProvider

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAY_SEC = 1.0


def _normalize(text: object) -> str:
    return text.strip() if isinstance(text, str) else ""


class ProviderInvoker:
    """Calls a provider, retrying exactly once after a transient error.

    Stateless apart from the configured delay, so one instance can serve
    concurrent calls for different roles.
    """

    MAX_ATTEMPTS = 2

    def __init__(self, retry_delay_sec: float = DEFAULT_RETRY_DELAY_SEC) -> None:
        self.retry_delay_sec = retry_delay_sec

    async def invoke(
        self,
        provider: TextGenerationProvider,
        system_instruction: str,
        user_message: str,
        role: str | None = None,
    ) -> str:
        """Call ``provider.generate`` and return its trimmed text.

        Args:
            provider: The backend to call.
            system_instruction: System prompt.
            user_message: User turn.
            role: Label used in the user-facing error; defaults to the provider name.

        Returns:
            Response text stripped of surrounding whitespace; "" for empty
            or non-text responses.

        Raises:
            ProviderError: After a permanent failure, or a second failure.
            ConfigurationError: Passed through unchanged.
        """
        label = role or provider.name()
        attempt = 1
        while True:
            try:
                text = await provider.generate(system_instruction, user_message)
            except ConfigurationError:
                raise
            except Exception as exc:
                kind = classify_error(exc)
                if kind is ErrorKind.TRANSIENT and attempt < self.MAX_ATTEMPTS:
                    logger.warning(
                        "%s: transient error on attempt %d, retrying in %.1fs: %s",
                        label, attempt, self.retry_delay_sec, exc,
                    )
                    await asyncio.sleep(self.retry_delay_sec)
                    attempt += 1
                    continue
                logger.warning(
                    "%s failed after %d attempt(s) (%s): %s",
                    label, attempt, kind.value, exc,
                )
                raise ProviderError(label) from exc
            return _normalize(text)
