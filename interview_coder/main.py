"""Dependency-injection assembly for interview-coder.

Wires settings, the config store, an image source, an event sink and the
response parser into a :class:`ProcessingOrchestrator`.  Front ends (the
CLI, or a desktop shell) call :func:`build_components` once and keep the
returned objects for the life of the process.
"""

from __future__ import annotations

from typing import Any

from interview_coder.config.loader import load_config
from interview_coder.config.settings import Settings
from interview_coder.config.store import ConfigStore
from interview_coder.interfaces.event_sink import IEventSink
from interview_coder.interfaces.image_source import IImageSource
from interview_coder.pipeline.event_broadcaster import EventBroadcaster
from interview_coder.pipeline.orchestrator import AdapterFactory, ProcessingOrchestrator
from interview_coder.providers.images.file_image_source import InMemoryImageSource
from interview_coder.services.response_parser import ResponseParser
from interview_coder.utils.logging import get_logger

_logger = get_logger(__name__)


def build_components(
    custom_settings: Settings | None = None,
    config_path: str = "config/config.yaml",
    image_source: IImageSource | None = None,
    event_sink: IEventSink | None = None,
    adapter_factory: AdapterFactory | None = None,
) -> dict[str, Any]:
    """Construct the orchestrator and its collaborators.

    Parameters
    ----------
    custom_settings:
        Application settings.  Read from ``.env`` / the environment when
        not provided.
    config_path:
        YAML defaults layered under the settings.
    image_source:
        Where screenshots come from.  Defaults to an empty
        :class:`InMemoryImageSource`.
    event_sink:
        Receiver for pipeline events.  Defaults to an
        :class:`EventBroadcaster` with no listeners.
    adapter_factory:
        Override for adapter construction (tests, custom providers).

    Returns
    -------
    dict
        Keys ``settings``, ``config_store``, ``image_source``,
        ``event_sink``, ``parser`` and ``orchestrator``.

    Raises
    ------
    ConfigurationError
        If the YAML file or the merged configuration is invalid.
    """
    s = custom_settings or Settings()
    config_store = ConfigStore(load_config(config_path, settings=s))
    source = image_source or InMemoryImageSource()
    sink = event_sink or EventBroadcaster()
    parser = ResponseParser()

    orchestrator = ProcessingOrchestrator(
        config_store=config_store,
        image_source=source,
        event_sink=sink,
        parser=parser,
        adapter_factory=adapter_factory,
    )

    config = config_store.get()
    _logger.info(
        "components_built",
        active_provider=config.active_provider,
        mode=config.mode,
        language=config.language,
        available_providers=s.get_available_providers(),
    )
    return {
        "settings": s,
        "config_store": config_store,
        "image_source": source,
        "event_sink": sink,
        "parser": parser,
        "orchestrator": orchestrator,
    }


def build_orchestrator(
    custom_settings: Settings | None = None, **kwargs: Any
) -> ProcessingOrchestrator:
    """Shortcut for ``build_components(...)["orchestrator"]``."""
    return build_components(custom_settings, **kwargs)["orchestrator"]
