"""Shared pytest fixtures."""

from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, ModelConfig, PromptsConfig
from peer_review.invoker import ProviderInvoker
from peer_review.models import Prompt, Role
from peer_review.providers.base import TextGenerationProvider


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="openai",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
        api_key="sk-test",
    )


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        initial_system="Answer concisely.",
        initial_user="{prompt}",
        critique_system="Critique fairly.",
        critique_user="Prompt: {prompt}\n{target} said:\n{response}\nCritique {target}.",
        summary_system="Summarize critiques by {reviewer_a} and {reviewer_b}.",
        summary_user="{reviewer_a}: {critique_a}\n{reviewer_b}: {critique_b}",
        review_system="You are a reviewer.",
        review_user="Review this {review_type}:\n{context}",
        respond_system="Continue the review.",
        respond_user="Content:\n{context}\nDebate:\n{debate}",
        debate_summary_system="Summarize the debate ({reviewer} as Reviewer).",
        debate_summary_user="Content:\n{context}\nDebate:\n{debate}",
    )


@pytest.fixture
def sample_defaults_config() -> DefaultsConfig:
    return DefaultsConfig(
        reviewers=["claude", "openai"],
        summarizer="claude",
        cli_provider="openai",
        prompt_max_chars=10_000,
        retry_delay_sec=0.0,
    )


@pytest.fixture
def sample_app_config(
    sample_defaults_config: DefaultsConfig,
    sample_prompts_config: PromptsConfig,
) -> AppConfig:
    models = {
        "claude": ModelConfig(
            name="claude",
            sdk="anthropic",
            model="claude-sonnet-4-5",
            api_key_env="ANTHROPIC_API_KEY",
            timeout_sec=60,
            max_tokens=4096,
            label="Claude",
        ),
        "openai": ModelConfig(
            name="openai",
            sdk="openai",
            model="gpt-5.2",
            api_key_env="OPENAI_API_KEY",
            timeout_sec=60,
            max_tokens=4096,
            label="GPT",
        ),
    }
    return AppConfig(
        defaults=sample_defaults_config,
        models=models,
        prompts=sample_prompts_config,
    )


@pytest.fixture
def sample_prompt() -> Prompt:
    return Prompt(text="What is 2+2?")


@pytest.fixture
def fast_invoker() -> ProviderInvoker:
    return ProviderInvoker(retry_delay_sec=0)


class MockProvider(TextGenerationProvider):
    """Test double TextGenerationProvider."""

    def __init__(self, provider_name: str = "mock", response_content: str = "Mock response") -> None:
        self._name = provider_name
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because generate is defined in the class body below.
        self.generate = AsyncMock(return_value=response_content)  # type: ignore[assignment]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def generate(self, system_instruction: str, user_message: str) -> str:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return self._response_content


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def two_mock_providers() -> list[MockProvider]:
    return [MockProvider("provider_a", "Response from A"), MockProvider("provider_b", "Response from B")]


@pytest.fixture
def mock_pipeline_providers() -> dict[str, MockProvider]:
    """Providers keyed like sample_app_config's reviewers."""
    return {"claude": MockProvider("claude", "Claude says 4"), "openai": MockProvider("openai", "GPT says four")}


def make_roles(provider_a, provider_b, summarizer=None) -> tuple[list[Role], Role]:
    reviewers = [Role("A", provider_a), Role("B", provider_b)]
    return reviewers, Role("Summarizer", summarizer or provider_a)
