"""Load settings.yaml into typed dataclasses. Resolves API keys at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    label: str = ""
    base_url: str | None = None
    concat_system_prompt: bool = False
    api_key: str = field(default="", repr=False)

    def __post_init__(self) -> None:
        if not self.label:
            self.label = self.name.title()


@dataclass
class PromptsConfig:
    initial_system: str
    initial_user: str
    critique_system: str
    critique_user: str
    summary_system: str
    summary_user: str
    review_system: str = ""
    review_user: str = ""
    respond_system: str = ""
    respond_user: str = ""
    debate_summary_system: str = ""
    debate_summary_user: str = ""


@dataclass
class DefaultsConfig:
    reviewers: list[str]
    summarizer: str
    cli_provider: str
    prompt_max_chars: int = 10_000
    retry_delay_sec: float = 1.0
    review_type: str = "code"


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    models: dict[str, ModelConfig]
    prompts: PromptsConfig
    server: ServerConfig = field(default_factory=ServerConfig)
    available_providers: set[str] = field(default_factory=set)

    def pipeline_provider_names(self) -> list[str]:
        """Reviewers plus summarizer, deduplicated, in settings order."""
        return list(dict.fromkeys([*self.defaults.reviewers, self.defaults.summarizer]))


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing.
    Missing API keys are logged, not raised: the provider adapters raise
    ConfigurationError when a provider without a key is actually built.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        reviewers=list(defaults_raw["reviewers"]),
        summarizer=str(defaults_raw["summarizer"]),
        cli_provider=str(defaults_raw["cli_provider"]),
        prompt_max_chars=int(defaults_raw.get("prompt_max_chars", 10_000)),
        retry_delay_sec=float(defaults_raw.get("retry_delay_sec", 1.0)),
        review_type=str(defaults_raw.get("review_type", "code")),
    )

    server_raw = raw.get("server") or {}
    server = ServerConfig(
        host=str(server_raw.get("host", "127.0.0.1")),
        port=int(server_raw.get("port", 8000)),
    )

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        initial_system=prompts_raw["initial_system"],
        initial_user=prompts_raw["initial_user"],
        critique_system=prompts_raw["critique_system"],
        critique_user=prompts_raw["critique_user"],
        summary_system=prompts_raw["summary_system"],
        summary_user=prompts_raw["summary_user"],
        review_system=prompts_raw.get("review_system", ""),
        review_user=prompts_raw.get("review_user", ""),
        respond_system=prompts_raw.get("respond_system", ""),
        respond_user=prompts_raw.get("respond_user", ""),
        debate_summary_system=prompts_raw.get("debate_summary_system", ""),
        debate_summary_user=prompts_raw.get("debate_summary_user", ""),
    )

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model = model_raw["model"]
        model_env = model_raw.get("model_env")
        if model_env and os.environ.get(model_env, "").strip():
            model = os.environ[model_env].strip()
            logger.debug("Model override for %s from %s: %s", provider_name, model_env, model)

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        models[provider_name] = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model,
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            label=str(model_raw.get("label", "")),
            base_url=model_raw.get("base_url"),
            concat_system_prompt=bool(model_raw.get("concat_system_prompt", False)),
            api_key=api_key,
        )

        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s, set %s in .env.local",
                provider_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        models=models,
        prompts=prompts,
        server=server,
        available_providers=available_providers,
    )
