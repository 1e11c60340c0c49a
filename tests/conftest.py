"""Shared pytest fixtures for the interview-coder test suite."""

from __future__ import annotations

import asyncio
import io
from collections.abc import Callable, Iterable
from typing import Any

import pytest
from PIL import Image

from interview_coder.config.store import ConfigStore
from interview_coder.interfaces.model_adapter import CredentialProbe, IModelAdapter
from interview_coder.models.config import AppConfig
from interview_coder.models.events import PipelineEvent
from interview_coder.models.images import CapturedImage
from interview_coder.models.messages import ModelMessage, ModelResponse, RequestOptions
from interview_coder.models.pipeline import QueueKind
from interview_coder.pipeline.event_broadcaster import EventBroadcaster
from interview_coder.pipeline.orchestrator import ProcessingOrchestrator
from interview_coder.providers.images.file_image_source import InMemoryImageSource
from interview_coder.utils.errors import (
    ConfigurationError,
    NotConfiguredError,
    UnsupportedCapabilityError,
)

# ---------------------------------------------------------------------------
# Canned model output
# ---------------------------------------------------------------------------

EXTRACTION_JSON = (
    '{"problem_statement": "Sum two numbers", '
    '"constraints": "-10^9 <= a, b <= 10^9", '
    '"example_input": "1 2", '
    '"example_output": "3"}'
)

SOLUTION_TEXT = """### Code
```python
def add(a, b):
    return a + b
```

### Your Thoughts
- Read both numbers
- Return their sum

Time complexity: O(1) - constant work
Space complexity: O(1) - no extra storage
"""

DEBUG_TEXT = """### Issues Identified
- The loop skips the last element
- Missing empty-input check

### Specific Improvements and Corrections
```python
for i in range(len(nums)):
    total += nums[i]
```

### Optimizations
- Use the built-in sum()

### Explanation of Changes Needed
The loop bound must include the last index.

### Key Points
- Check loop bounds
- Handle empty input
"""

_ENV_VARS = (
    "ACTIVE_PROVIDER",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_MODEL",
    "OLLAMA_BASE_URL",
    "OLLAMA_MODEL",
    "PREFERRED_LANGUAGE",
    "INTERVIEW_MODE",
    "REQUEST_TIMEOUT_SEC",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials in the shell out of every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


def make_png(width: int = 8, height: int = 8, color: str = "white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    """Return a tiny valid PNG image."""
    return make_png()


@pytest.fixture
def captured_image(png_bytes: bytes) -> CapturedImage:
    return CapturedImage(identifier="problem.png", data=png_bytes, media_type="image/png")


@pytest.fixture
def image_source(captured_image: CapturedImage) -> InMemoryImageSource:
    """Image source with one screenshot on the primary queue."""
    return InMemoryImageSource(primary=[captured_image])


# ---------------------------------------------------------------------------
# Fake model adapter
# ---------------------------------------------------------------------------


class FakeModelAdapter(IModelAdapter):
    """Scripted adapter: call number ``i`` is answered with ``responses[i]``.

    A response that is an exception instance is raised instead.  When
    *gate* is given, the calls whose index is in *gate_calls* (every call
    when ``None``) wait for the gate before answering, which gives tests a
    window to cancel or reconfigure mid-flight.
    """

    def __init__(
        self,
        responses: Iterable[str | BaseException] = (),
        provider_id: str = "openai",
        configured: bool = True,
        vision: bool = True,
        gate: asyncio.Event | None = None,
        gate_calls: Iterable[int] | None = None,
    ) -> None:
        self._responses = list(responses)
        self._provider_id = provider_id
        self._configured = configured
        self._vision = vision
        self._model = "fake-model"
        self.gate = gate
        self.gate_calls = set(gate_calls) if gate_calls is not None else None
        self.calls: list[tuple[str, list[ModelMessage], RequestOptions | None]] = []
        self.started = asyncio.Event()
        self.aborted = 0
        self.closed = False

    @property
    def provider_id(self) -> str:
        return self._provider_id

    def list_models(self) -> set[str]:
        return {self._model}

    def current_model(self) -> str:
        return self._model

    def set_model(self, model_id: str) -> str:
        return self._model

    def set_credential(self, credential: str | None) -> None:
        self._configured = bool(credential)

    def is_configured(self) -> bool:
        return self._configured

    def supports_vision(self) -> bool:
        return self._vision

    async def probe_credential(self, credential: str | None = None) -> CredentialProbe:
        return CredentialProbe(valid=self._configured)

    async def complete(
        self, messages: list[ModelMessage], options: RequestOptions | None = None
    ) -> ModelResponse:
        return await self._call("complete", messages, options)

    async def vision(
        self, messages: list[ModelMessage], options: RequestOptions | None = None
    ) -> ModelResponse:
        if not self._vision:
            raise UnsupportedCapabilityError(provider_name=self._provider_id)
        return await self._call("vision", messages, options)

    async def aclose(self) -> None:
        self.closed = True

    @property
    def call_kinds(self) -> list[str]:
        return [kind for kind, _, _ in self.calls]

    async def _call(
        self, kind: str, messages: list[ModelMessage], options: RequestOptions | None
    ) -> ModelResponse:
        if not self._configured:
            raise NotConfiguredError(provider_name=self._provider_id)
        index = len(self.calls)
        self.calls.append((kind, messages, options))
        work = self._respond(index)
        token = options.cancel_token if options is not None else None
        if token is not None:
            return await token.run(work)
        return await work

    async def _respond(self, index: int) -> ModelResponse:
        self.started.set()
        try:
            if self.gate is not None and (self.gate_calls is None or index in self.gate_calls):
                await self.gate.wait()
        except asyncio.CancelledError:
            self.aborted += 1
            raise
        if index >= len(self._responses):
            raise AssertionError(f"FakeModelAdapter has no response for call {index}")
        response = self._responses[index]
        if isinstance(response, BaseException):
            raise response
        return ModelResponse(text=response, provider=self._provider_id, model=self._model)


# ---------------------------------------------------------------------------
# Orchestrator wiring
# ---------------------------------------------------------------------------


@pytest.fixture
def config_store() -> ConfigStore:
    return ConfigStore(AppConfig(providers={"openai": {"api_key": "sk-test"}}))


@pytest.fixture
def events() -> list[PipelineEvent]:
    return []


@pytest.fixture
def broadcaster(events: list[PipelineEvent]) -> EventBroadcaster:
    """Broadcaster that records every emitted event into ``events``."""
    sink = EventBroadcaster()
    sink.subscribe(events.append)
    return sink


@pytest.fixture
def build_orchestrator(
    config_store: ConfigStore,
    image_source: InMemoryImageSource,
    broadcaster: EventBroadcaster,
) -> Callable[..., ProcessingOrchestrator]:
    """Factory fixture: ``build_orchestrator({"openai": FakeModelAdapter(...)})``.

    Adapters are looked up by the config's active provider; a provider
    without an adapter fails like an unknown provider id.
    """

    def _build(
        adapters: dict[str, IModelAdapter] | None = None, **overrides: Any
    ) -> ProcessingOrchestrator:
        registry = adapters or {}

        def factory(config: AppConfig) -> IModelAdapter:
            try:
                return registry[config.active_provider]
            except KeyError:
                raise ConfigurationError(
                    f"Unknown provider: {config.active_provider!r}"
                ) from None

        kwargs: dict[str, Any] = {
            "config_store": config_store,
            "image_source": image_source,
            "event_sink": broadcaster,
            "adapter_factory": factory,
        }
        kwargs.update(overrides)
        return ProcessingOrchestrator(**kwargs)

    return _build


def events_for(events: list[PipelineEvent], run_id: str) -> list[PipelineEvent]:
    return [event for event in events if event.run_id == run_id]


def progress_percents(events: list[PipelineEvent], queue_kind: QueueKind) -> list[int]:
    return [
        event.percent
        for event in events
        if event.event_type == "progress" and event.queue_kind == queue_kind
    ]
