"""In-process configuration store with change notification."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from pydantic import ValidationError

from interview_coder.config.loader import deep_merge
from interview_coder.interfaces.config_store import ConfigListener, IConfigStore
from interview_coder.models.config import AppConfig
from interview_coder.utils.errors import ConfigurationError
from interview_coder.utils.logging import get_logger


class ConfigStore(IConfigStore):
    """Holds the current :class:`AppConfig` and notifies listeners on change.

    Listeners are called synchronously, in subscription order, only when
    :meth:`set` actually changes the configuration.  A listener that raises
    is logged and skipped.
    """

    def __init__(self, initial: AppConfig | None = None) -> None:
        self._config = initial or AppConfig()
        self._listeners: list[ConfigListener] = []
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def get(self) -> AppConfig:
        return self._config

    def set(self, partial: dict[str, Any]) -> AppConfig:
        """Deep-merge *partial* into the current config and store the result.

        Parameters
        ----------
        partial:
            Nested dictionary in :class:`AppConfig` shape, e.g.
            ``{"providers": {"openai": {"api_key": "sk-..."}}}``.

        Returns
        -------
        AppConfig
            The stored configuration (unchanged when validation fails).

        Raises
        ------
        ConfigurationError
            If the merged configuration does not validate.
        """
        merged = self._config.model_dump()
        deep_merge(merged, partial)
        try:
            updated = AppConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration update: {exc}") from exc

        if updated == self._config:
            return self._config

        self._config = updated
        self._logger.info(
            "config_updated",
            keys=sorted(partial),
            active_provider=updated.active_provider,
            mode=updated.mode,
        )
        self._notify(updated)
        return updated

    def subscribe(self, listener: ConfigListener) -> Callable[[], None]:
        if listener not in self._listeners:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, config: AppConfig) -> None:
        for listener in list(self._listeners):
            try:
                listener(config)
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    error=str(exc),
                    callback=getattr(listener, "__name__", repr(listener)),
                )
