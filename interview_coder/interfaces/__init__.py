"""Interface definitions for the core's collaborators.

The orchestrator only ever sees these abstract base classes.  Concrete
adapters are constructed in ``interview_coder/main.py`` and injected.

    Interface        ->  Concrete implementations
    ---------------------------------------------------------------
    IModelAdapter    ->  OpenAIModelAdapter, AnthropicModelAdapter,
                         OllamaModelAdapter
    IImageSource     ->  FileImageSource, InMemoryImageSource
    IConfigStore     ->  ConfigStore
    IEventSink       ->  EventBroadcaster, QueueEventSink
"""

from interview_coder.interfaces.config_store import ConfigListener, IConfigStore
from interview_coder.interfaces.event_sink import IEventSink
from interview_coder.interfaces.image_source import IImageSource
from interview_coder.interfaces.model_adapter import CredentialProbe, IModelAdapter, ModelSpec

__all__ = [
    "ConfigListener",
    "CredentialProbe",
    "IConfigStore",
    "IEventSink",
    "IImageSource",
    "IModelAdapter",
    "ModelSpec",
]
