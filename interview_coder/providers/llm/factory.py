"""Adapter factory: the one place provider types are registered.

Provider identifiers are resolved once into the closed :class:`ProviderId`
enum; everything downstream dispatches on the enum, never on raw strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from interview_coder.interfaces.model_adapter import CredentialProbe, ModelSpec
from interview_coder.models.config import PROVIDER_ALIASES, AppConfig
from interview_coder.providers.llm.anthropic_provider import AnthropicModelAdapter
from interview_coder.providers.llm.base_adapter import BaseModelAdapter
from interview_coder.providers.llm.ollama_provider import OllamaModelAdapter
from interview_coder.providers.llm.openai_provider import OpenAIModelAdapter
from interview_coder.utils.errors import ConfigurationError
from interview_coder.utils.logging import get_logger

logger = get_logger(__name__)


class ProviderId(str, Enum):  # noqa: UP042  (StrEnum requires Python 3.11+)
    OPENAI = "openai"
    CLAUDE = "claude"
    OLLAMA = "ollama"

    @classmethod
    def parse(cls, value: str | ProviderId) -> ProviderId:
        """Resolve a provider string.

        Raises
        ------
        ConfigurationError
            If *value* names no registered provider.
        """
        if isinstance(value, ProviderId):
            return value
        normalized = (value or "").strip().lower()
        normalized = PROVIDER_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ConfigurationError(f"Unknown provider: {value!r}") from None


_REGISTRY: dict[ProviderId, type[BaseModelAdapter]] = {
    ProviderId.OPENAI: OpenAIModelAdapter,
    ProviderId.CLAUDE: AnthropicModelAdapter,
    ProviderId.OLLAMA: OllamaModelAdapter,
}


@dataclass(frozen=True)
class ProviderInfo:
    provider_id: ProviderId
    name: str
    description: str
    credential_label: str = "API key"


_PROVIDER_INFO: dict[ProviderId, ProviderInfo] = {
    ProviderId.OPENAI: ProviderInfo(
        ProviderId.OPENAI, "OpenAI", "GPT-4o and related models"
    ),
    ProviderId.CLAUDE: ProviderInfo(
        ProviderId.CLAUDE, "Anthropic Claude", "Claude Sonnet, Opus and Haiku models"
    ),
    ProviderId.OLLAMA: ProviderInfo(
        ProviderId.OLLAMA, "Ollama", "Local models served by Ollama", credential_label="Base URL"
    ),
}

# Key shapes the vendors currently issue; used for UI hints only.
_KEY_PATTERNS: dict[ProviderId, re.Pattern[str]] = {
    ProviderId.OPENAI: re.compile(r"^sk-[A-Za-z0-9_-]{32,}$"),
    ProviderId.CLAUDE: re.compile(r"^sk-ant-[A-Za-z0-9_-]{24,}$"),
    ProviderId.OLLAMA: re.compile(r"^https?://\S+$"),
}


def create_model_adapter(
    provider_id: str | ProviderId,
    credential: str | None = None,
    model_id: str | None = None,
    timeout_sec: float = 60.0,
) -> BaseModelAdapter:
    """Build an adapter for *provider_id*.

    Parameters
    ----------
    provider_id:
        One of ``openai``, ``claude`` (alias ``anthropic``) or ``ollama``.
    credential:
        API key (base URL for Ollama).  Empty builds a disabled adapter.
    model_id:
        Model to select; unknown ids fall back to the provider default.
    timeout_sec:
        Per-request timeout passed to the vendor client.

    Raises
    ------
    ConfigurationError
        If *provider_id* is not a registered provider.
    """
    provider = ProviderId.parse(provider_id)
    adapter = _REGISTRY[provider](credential=credential, model_id=model_id, timeout_sec=timeout_sec)
    logger.info(
        "model_adapter_created",
        provider=provider.value,
        model=adapter.current_model(),
        configured=adapter.is_configured(),
    )
    return adapter


def available_providers() -> list[ProviderInfo]:
    return [_PROVIDER_INFO[provider] for provider in ProviderId]


def available_models(provider_id: str | ProviderId) -> list[ModelSpec]:
    return list(_REGISTRY[ProviderId.parse(provider_id)].MODELS.values())


def default_model(provider_id: str | ProviderId) -> str:
    return _REGISTRY[ProviderId.parse(provider_id)].DEFAULT_MODEL


def looks_like_api_key(credential: str, provider_id: str | ProviderId) -> bool:
    """Cheap offline format check for a credential; no network involved."""
    key = (credential or "").strip()
    try:
        provider = ProviderId.parse(provider_id)
    except ConfigurationError:
        return len(key) > 10
    return bool(_KEY_PATTERNS[provider].match(key))


async def probe_provider_credential(
    provider_id: str | ProviderId, credential: str, timeout_sec: float = 30.0
) -> CredentialProbe:
    """Check *credential* against *provider_id* with one minimal real call."""
    adapter = create_model_adapter(provider_id, timeout_sec=timeout_sec)
    return await adapter.probe_credential(credential)


def adapter_from_config(config: AppConfig) -> BaseModelAdapter:
    """Build the adapter for the active provider of *config*.

    Raises
    ------
    ConfigurationError
        If ``config.active_provider`` is not a registered provider.
    """
    provider_config = config.provider_config()
    return create_model_adapter(
        config.active_provider,
        credential=provider_config.api_key,
        model_id=provider_config.model_id or None,
        timeout_sec=config.request_timeout_sec,
    )
