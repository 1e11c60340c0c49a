"""Configuration module: Settings, load_config and the in-process ConfigStore."""

from interview_coder.config.loader import DEFAULT_CONFIG, load_config
from interview_coder.config.settings import Settings
from interview_coder.config.store import ConfigStore

__all__ = ["DEFAULT_CONFIG", "ConfigStore", "Settings", "load_config"]
