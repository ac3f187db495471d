"""Tests for peer_review/invoker.py."""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from peer_review.errors import ConfigurationError, ProviderError
from peer_review.invoker import ProviderInvoker
from peer_review.providers.base import GenerationError
from tests.conftest import MockProvider


async def test_invoke_returns_trimmed_text(fast_invoker):
    provider = MockProvider("openai", "  Four.\n\n")
    assert await fast_invoker.invoke(provider, "sys", "user") == "Four."
    provider.generate.assert_awaited_once_with("sys", "user")


@pytest.mark.parametrize("raw", [None, "", "   \n", 42])
async def test_invoke_normalizes_empty_or_non_text(fast_invoker, raw):
    provider = MockProvider("openai")
    provider.generate = AsyncMock(return_value=raw)
    assert await fast_invoker.invoke(provider, "sys", "user") == ""


async def test_retry_succeeds_on_second_attempt(fast_invoker):
    """Transient failure then success: returns the success value after exactly two calls."""
    provider = MockProvider("openai")
    provider.generate = AsyncMock(
        side_effect=[GenerationError("openai", "Request timed out after 10s"), "  eventual answer "]
    )

    assert await fast_invoker.invoke(provider, "sys", "user") == "eventual answer"
    assert provider.generate.await_count == 2


async def test_fails_after_two_transient_errors(fast_invoker):
    provider = MockProvider("openai")
    provider.generate = AsyncMock(side_effect=GenerationError("openai", "503 Service Unavailable"))

    with pytest.raises(ProviderError):
        await fast_invoker.invoke(provider, "sys", "user", role="GPT")
    assert provider.generate.await_count == 2


async def test_permanent_error_is_not_retried(fast_invoker):
    provider = MockProvider("openai")
    provider.generate = AsyncMock(side_effect=GenerationError("openai", "401 unauthorized", status_code=401))

    with pytest.raises(ProviderError):
        await fast_invoker.invoke(provider, "sys", "user")
    assert provider.generate.await_count == 1


async def test_transient_then_permanent_stops_at_two_calls(fast_invoker):
    provider = MockProvider("openai")
    provider.generate = AsyncMock(
        side_effect=[GenerationError("openai", "rate limit"), GenerationError("openai", "invalid request")]
    )

    with pytest.raises(ProviderError):
        await fast_invoker.invoke(provider, "sys", "user")
    assert provider.generate.await_count == 2


async def test_provider_error_hides_raw_message(fast_invoker):
    provider = MockProvider("openai")
    provider.generate = AsyncMock(side_effect=GenerationError("openai", "sk-secret-123 rejected: invalid key"))

    with pytest.raises(ProviderError) as exc_info:
        await fast_invoker.invoke(provider, "sys", "user", role="GPT")

    err = exc_info.value
    assert err.role == "GPT"
    assert "GPT" in err.user_message
    assert "sk-secret-123" not in err.user_message
    assert "sk-secret-123" not in str(err)
    assert isinstance(err.__cause__, GenerationError)


async def test_role_defaults_to_provider_name(fast_invoker):
    provider = MockProvider("gemini")
    provider.generate = AsyncMock(side_effect=GenerationError("gemini", "bad request"))

    with pytest.raises(ProviderError) as exc_info:
        await fast_invoker.invoke(provider, "sys", "user")
    assert exc_info.value.role == "gemini"


async def test_unexpected_exception_is_classified(fast_invoker):
    provider = MockProvider("openai")
    provider.generate = AsyncMock(side_effect=[ConnectionResetError("reset by peer"), "ok"])

    assert await fast_invoker.invoke(provider, "sys", "user") == "ok"


async def test_configuration_error_passes_through(fast_invoker):
    provider = MockProvider("openai")
    provider.generate = AsyncMock(side_effect=ConfigurationError("Missing API key"))

    with pytest.raises(ConfigurationError):
        await fast_invoker.invoke(provider, "sys", "user")
    assert provider.generate.await_count == 1


async def test_retry_waits_flat_delay_once():
    invoker = ProviderInvoker(retry_delay_sec=1.0)
    provider = MockProvider("openai")
    provider.generate = AsyncMock(side_effect=GenerationError("openai", "ETIMEDOUT"))

    with patch("peer_review.invoker.asyncio.sleep", new=AsyncMock()) as sleep:
        with pytest.raises(ProviderError):
            await invoker.invoke(provider, "sys", "user")

    sleep.assert_awaited_once_with(1.0)


async def test_retry_logs_warning(fast_invoker, caplog):
    provider = MockProvider("openai")
    provider.generate = AsyncMock(side_effect=[GenerationError("openai", "429 rate limit"), "ok"])

    with caplog.at_level(logging.WARNING):
        await fast_invoker.invoke(provider, "sys", "user", role="GPT")

    assert any("retrying" in msg for msg in caplog.messages)
