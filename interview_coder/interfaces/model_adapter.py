"""Abstract base class for model-provider adapters.

Defines the single capability contract every vendor adapter satisfies:
text completion, vision completion, model selection against a static
capability table, and credential management.  Everything above the
provider layer talks to this interface only, so switching vendors never
touches the orchestrator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from interview_coder.models.messages import ModelMessage, ModelResponse, RequestOptions
from interview_coder.utils.errors import ErrorKind


@dataclass(frozen=True)
class ModelSpec:
    """Static capability row for one model id."""

    model_id: str
    display_name: str
    description: str = ""
    supports_vision: bool = True
    context_window: int = 128_000


@dataclass(frozen=True)
class CredentialProbe:
    """Outcome of :meth:`IModelAdapter.probe_credential`."""

    valid: bool
    error_kind: ErrorKind | None = None
    reason: str = ""


# Concrete implementations: OpenAIModelAdapter, AnthropicModelAdapter,
# OllamaModelAdapter.  Located in: interview_coder/providers/llm/
class IModelAdapter(ABC):
    """Contract for one vendor's text/vision completion API.

    Client construction is lazy.  Credential or model changes take effect
    on the next call only; a call already in flight keeps the client and
    model it started with.
    """

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Stable provider identifier, e.g. ``"openai"``."""

    @abstractmethod
    def list_models(self) -> set[str]:
        """Return the model ids this provider offers (static)."""

    @abstractmethod
    def current_model(self) -> str:
        """Return the model id used by the next call."""

    @abstractmethod
    def set_model(self, model_id: str) -> str:
        """Select a model; unknown ids fall back to the provider default.

        Returns
        -------
        str
            The model id actually selected.  Never raises.
        """

    @abstractmethod
    def set_credential(self, credential: str | None) -> None:
        """Replace the credential.

        An empty or missing value disables the adapter: every subsequent
        :meth:`complete` / :meth:`vision` call fails fast with
        :class:`~interview_coder.utils.errors.NotConfiguredError`.
        """

    @abstractmethod
    def is_configured(self) -> bool:
        """Return ``True`` if a credential is present (does not contact the vendor)."""

    @abstractmethod
    async def probe_credential(self, credential: str | None = None) -> CredentialProbe:
        """Issue one minimal real call to check *credential*.

        Uses the adapter's own credential when *credential* is ``None``.
        Never raises for vendor failures; they are classified into the
        returned :class:`CredentialProbe`.
        """

    @abstractmethod
    async def complete(
        self, messages: list[ModelMessage], options: RequestOptions | None = None
    ) -> ModelResponse:
        """Text-only completion.

        Raises
        ------
        NotConfiguredError
            If no credential is set.
        ProviderCallError
            Or one of its subclasses, for vendor failures.
        OperationCancelledError
            If ``options.cancel_token`` fires before the call completes.
        """

    @abstractmethod
    async def vision(
        self, messages: list[ModelMessage], options: RequestOptions | None = None
    ) -> ModelResponse:
        """Like :meth:`complete`, but messages may carry image parts.

        Raises
        ------
        UnsupportedCapabilityError
            If the current model has no image support.  Raised before any
            network interaction.
        """

    @abstractmethod
    def supports_vision(self) -> bool:
        """Return ``True`` if the current model accepts image input."""
