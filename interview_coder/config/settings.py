"""Application settings loaded from environment variables via pydantic-settings.

Sources, highest priority first:

    1. environment variables, e.g. ``OPENAI_API_KEY=sk-...``
    2. a ``.env`` file in the working directory
    3. the defaults below

Field ``openai_api_key`` maps to ``OPENAI_API_KEY`` and so on.  An empty
string means "not set here": :func:`~interview_coder.config.loader.load_config`
only overlays values the environment actually provided.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """interview-coder settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", protected_namespaces=()
    )

    # === Provider selection ===
    active_provider: str = ""

    # === Credentials and models ===
    openai_api_key: str = ""
    openai_model: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = ""
    ollama_base_url: str = "http://localhost:11434"  # Ollama always has a default URL
    ollama_model: str = ""

    # === User preferences ===
    preferred_language: str = ""
    interview_mode: str = ""
    request_timeout_sec: float = 60.0

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_providers(self) -> list[str]:
        """Return the provider ids that have a non-empty credential configured."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("openai")
        if self.anthropic_api_key:
            providers.append("claude")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers
