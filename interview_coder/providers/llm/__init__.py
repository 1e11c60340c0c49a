"""Model provider adapters (OpenAI, Anthropic Claude, Ollama) and their factory."""

from interview_coder.providers.llm.anthropic_provider import AnthropicModelAdapter
from interview_coder.providers.llm.base_adapter import BaseModelAdapter, classify_status
from interview_coder.providers.llm.factory import (
    ProviderId,
    ProviderInfo,
    adapter_from_config,
    available_models,
    available_providers,
    create_model_adapter,
    default_model,
    looks_like_api_key,
    probe_provider_credential,
)
from interview_coder.providers.llm.ollama_provider import OllamaModelAdapter
from interview_coder.providers.llm.openai_provider import OpenAIModelAdapter

__all__ = [
    "AnthropicModelAdapter",
    "BaseModelAdapter",
    "OllamaModelAdapter",
    "OpenAIModelAdapter",
    "ProviderId",
    "ProviderInfo",
    "adapter_from_config",
    "available_models",
    "available_providers",
    "classify_status",
    "create_model_adapter",
    "default_model",
    "looks_like_api_key",
    "probe_provider_credential",
]
