"""YAML configuration loader with environment variable overrides.

Configuration is layered, later layers winning:

    1. built-in defaults (:data:`DEFAULT_CONFIG`)
    2. ``config/config.yaml``, when present
    3. ``.env`` / environment variables, via :class:`Settings`

Only environment values that were actually provided and are non-empty
are overlaid, so a blank ``OPENAI_MODEL=`` never wipes a YAML model id.
The merged dictionary is validated into an :class:`AppConfig`.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from interview_coder.config.settings import Settings
from interview_coder.models.config import AppConfig
from interview_coder.utils.errors import ConfigurationError

DEFAULT_CONFIG: dict[str, Any] = {
    "active_provider": "openai",
    "language": "python",
    "mode": "coding",
    "request_timeout_sec": 60.0,
    "providers": {
        "openai": {"api_key": "", "model_id": "gpt-4o"},
        "claude": {"api_key": "", "model_id": "claude-sonnet-4-20250514"},
        "ollama": {"api_key": "http://localhost:11434", "model_id": "llava"},
    },
}

# Settings field -> path inside the config dictionary.
_ENV_PATHS: dict[str, tuple[str, ...]] = {
    "active_provider": ("active_provider",),
    "openai_api_key": ("providers", "openai", "api_key"),
    "openai_model": ("providers", "openai", "model_id"),
    "anthropic_api_key": ("providers", "claude", "api_key"),
    "anthropic_model": ("providers", "claude", "model_id"),
    "ollama_base_url": ("providers", "ollama", "api_key"),
    "ollama_model": ("providers", "ollama", "model_id"),
    "preferred_language": ("language",),
    "interview_mode": ("mode",),
    "request_timeout_sec": ("request_timeout_sec",),
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> AppConfig:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file is fine.
        settings: Pre-built settings; read from the environment when omitted.

    Returns:
        The validated :class:`AppConfig`.

    Raises:
        ConfigurationError: The YAML is malformed or the merged values do
            not validate.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(path)
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Malformed config file {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")
        deep_merge(config, yaml_config)

    deep_merge(config, env_overrides(settings or Settings()))

    try:
        return AppConfig.model_validate(config)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def env_overrides(settings: Settings) -> dict[str, Any]:
    """Return the nested overrides for every non-empty value the environment set."""
    overrides: dict[str, Any] = {}
    for field_name, path in _ENV_PATHS.items():
        if field_name not in settings.model_fields_set:
            continue
        value = getattr(settings, field_name)
        if isinstance(value, str):
            value = value.strip()
        if value in ("", None):
            continue
        target = overrides
        for key in path[:-1]:
            target = target.setdefault(key, {})
        target[path[-1]] = value
    return overrides


def deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
