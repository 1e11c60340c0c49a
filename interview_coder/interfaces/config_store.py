"""Abstract configuration store with change notification."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from interview_coder.models.config import AppConfig

ConfigListener = Callable[[AppConfig], None]


class IConfigStore(ABC):
    """Holds the active :class:`AppConfig` and notifies subscribers on change."""

    @abstractmethod
    def get(self) -> AppConfig:
        """Return the current configuration."""

    @abstractmethod
    def set(self, partial: dict[str, Any]) -> AppConfig:
        """Deep-merge *partial* into the current config, validate, store.

        Returns
        -------
        AppConfig
            The updated configuration.

        Raises
        ------
        ConfigurationError
            If the merged configuration does not validate.
        """

    @abstractmethod
    def subscribe(self, listener: ConfigListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
