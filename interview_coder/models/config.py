"""Runtime configuration record held by the :class:`ConfigStore`."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Alternative spellings accepted for provider ids.
PROVIDER_ALIASES = {"anthropic": "claude"}


class ProviderConfig(BaseModel):
    """Credential and model selection for one provider.

    For Ollama the credential is the server base URL.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    provider_id: str
    api_key: str = ""
    model_id: str = ""

    @field_validator("api_key", "model_id", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class AppConfig(BaseModel):
    """Active provider, per-provider credentials and the user's preferences.

    ``active_provider`` is kept as a plain string: an unknown id is only
    rejected when the adapter is built, as a ``ConfigurationError``.
    """

    model_config = ConfigDict(frozen=True)

    active_provider: str = "openai"
    providers: dict[str, ProviderConfig] = Field(default_factory=dict)
    language: str = "python"
    mode: str = "coding"
    request_timeout_sec: float = Field(default=60.0, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _fill_provider_ids(cls, data: Any) -> Any:
        # ``providers: {openai: {api_key: ...}}`` needs no repeated id.
        if isinstance(data, dict) and isinstance(data.get("providers"), dict):
            providers = {}
            for key, value in data["providers"].items():
                if isinstance(value, dict):
                    value = {"provider_id": key, **value}
                providers[key] = value
            data = {**data, "providers": providers}
        return data

    @field_validator("active_provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        normalized = value.strip().lower()
        return PROVIDER_ALIASES.get(normalized, normalized)

    @field_validator("language")
    @classmethod
    def _default_language(cls, value: str) -> str:
        return value.strip() or "python"

    def provider_config(self, provider_id: str | None = None) -> ProviderConfig:
        """Return the config for *provider_id* (default: the active one)."""
        key = provider_id or self.active_provider
        return self.providers.get(key) or ProviderConfig(provider_id=key)
