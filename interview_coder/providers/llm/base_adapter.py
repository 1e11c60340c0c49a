"""Shared machinery for the vendor model adapters.

Concrete adapters only describe their vendor: a static model table, how to
build the SDK client, how to translate the neutral message list into the
vendor's request, and how to map SDK exceptions onto the error hierarchy.
Everything else lives here:

    - lazy, cached client construction (rebuilt after a credential change)
    - model selection with fallback to the provider default
    - fail-fast ``NotConfiguredError`` / ``UnsupportedCapabilityError``
      checks before any network interaction
    - pinning the client and model at call start, so ``set_model`` or
      ``set_credential`` never affect a call already in flight
    - racing the request against the run's cancellation token
    - credential probing with status classification
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Awaitable
from typing import Any, ClassVar

import structlog

from interview_coder.interfaces.model_adapter import CredentialProbe, IModelAdapter, ModelSpec
from interview_coder.models.messages import ModelMessage, ModelResponse, RequestOptions
from interview_coder.utils.errors import (
    ErrorKind,
    InterviewCoderError,
    NotConfiguredError,
    OperationCancelledError,
    ProviderCallError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
    UnsupportedCapabilityError,
)

logger = structlog.get_logger(logger_name=__name__)


def classify_status(
    status_code: int | None, message: str, provider_name: str
) -> ProviderCallError:
    """Map an HTTP-like status code onto the normalized error classes."""
    if status_code in (401, 403):
        return UnauthorizedError("Invalid API key", provider_name=provider_name, status_code=status_code)
    if status_code == 429:
        return RateLimitError("Rate limit exceeded", provider_name=provider_name, status_code=status_code)
    if status_code is not None and status_code >= 500:
        return ServerError(
            f"{provider_name} server error",
            provider_name=provider_name,
            status_code=status_code,
        )
    return ProviderCallError(
        f"Unknown error: {message}", provider_name=provider_name, status_code=status_code
    )


class BaseModelAdapter(IModelAdapter):
    """Template for adapters backed by an async vendor SDK client."""

    PROVIDER_ID: ClassVar[str] = ""
    DISPLAY_NAME: ClassVar[str] = ""
    MODELS: ClassVar[dict[str, ModelSpec]] = {}
    DEFAULT_MODEL: ClassVar[str] = ""

    def __init__(
        self,
        credential: str | None = None,
        model_id: str | None = None,
        timeout_sec: float = 60.0,
    ) -> None:
        self._credential = (credential or "").strip()
        self._model = self.DEFAULT_MODEL
        self._timeout_sec = timeout_sec
        self._client: Any | None = None
        if model_id:
            self.set_model(model_id)

    # ------------------------------------------------------------------
    # Vendor hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _build_client(self, credential: str) -> Any:
        """Construct the vendor SDK client for *credential*."""

    @abstractmethod
    async def _send(
        self,
        client: Any,
        model: str,
        messages: list[ModelMessage],
        options: RequestOptions,
    ) -> ModelResponse:
        """Translate, send, and translate back one request."""

    @abstractmethod
    async def _probe(self, client: Any, credential: str) -> None:
        """Make the cheapest real call that proves *credential* works."""

    @abstractmethod
    def _translate_error(self, exc: Exception) -> InterviewCoderError | None:
        """Map a vendor exception; ``None`` means it is not a vendor error."""

    # ------------------------------------------------------------------
    # IModelAdapter implementation
    # ------------------------------------------------------------------

    @property
    def provider_id(self) -> str:
        return self.PROVIDER_ID

    @property
    def display_name(self) -> str:
        return self.DISPLAY_NAME

    def list_models(self) -> set[str]:
        return set(self.MODELS)

    def model_specs(self) -> list[ModelSpec]:
        return list(self.MODELS.values())

    def current_model(self) -> str:
        return self._model

    def set_model(self, model_id: str) -> str:
        if model_id in self.MODELS:
            self._model = model_id
        else:
            logger.warning(
                "unknown_model_fallback",
                provider=self.PROVIDER_ID,
                requested=model_id,
                fallback=self.DEFAULT_MODEL,
            )
            self._model = self.DEFAULT_MODEL
        return self._model

    def set_credential(self, credential: str | None) -> None:
        self._credential = (credential or "").strip()
        # The cached client belongs to the old credential.
        self._client = None
        logger.info(
            "credential_updated",
            provider=self.PROVIDER_ID,
            configured=self.is_configured(),
        )

    def is_configured(self) -> bool:
        return bool(self._credential)

    def masked_credential(self) -> str:
        """Return the credential with all but its first and last four characters hidden."""
        key = self._credential
        if not key:
            return ""
        if len(key) <= 8:
            return "*" * len(key)
        return f"{key[:4]}...{key[-4:]}"

    def supports_vision(self) -> bool:
        return self._spec(self._model).supports_vision

    async def complete(
        self, messages: list[ModelMessage], options: RequestOptions | None = None
    ) -> ModelResponse:
        return await self._invoke(messages, options or RequestOptions(), vision=False)

    async def vision(
        self, messages: list[ModelMessage], options: RequestOptions | None = None
    ) -> ModelResponse:
        return await self._invoke(messages, options or RequestOptions(), vision=True)

    async def probe_credential(self, credential: str | None = None) -> CredentialProbe:
        key = self._credential if credential is None else credential.strip()
        if not key:
            return CredentialProbe(
                valid=False, error_kind=ErrorKind.NOT_CONFIGURED, reason="API key is empty"
            )

        client = self._build_client(key)
        try:
            await self._probe(client, key)
        except Exception as exc:
            error = self._translate_error(exc) or ProviderCallError(
                f"Unknown error: {exc}", provider_name=self.PROVIDER_ID
            )
            logger.warning(
                "credential_probe_failed",
                provider=self.PROVIDER_ID,
                error_kind=error.kind.value,
                error=error.message,
            )
            return CredentialProbe(valid=False, error_kind=error.kind, reason=error.message)
        finally:
            await self._close(client)

        logger.info("credential_probe_ok", provider=self.PROVIDER_ID)
        return CredentialProbe(valid=True)

    async def aclose(self) -> None:
        """Close the cached client, if one was built."""
        client, self._client = self._client, None
        if client is not None:
            await self._close(client)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _spec(self, model_id: str) -> ModelSpec:
        return self.MODELS.get(model_id) or self.MODELS[self.DEFAULT_MODEL]

    def _get_client(self) -> Any:
        if not self.is_configured():
            raise NotConfiguredError(provider_name=self.PROVIDER_ID)
        if self._client is None:
            self._client = self._build_client(self._credential)
        return self._client

    async def _close(self, client: Any) -> None:
        close = getattr(client, "close", None)
        if close is None:
            return
        result = close()
        if isinstance(result, Awaitable):
            await result

    async def _invoke(
        self, messages: list[ModelMessage], options: RequestOptions, *, vision: bool
    ) -> ModelResponse:
        # Pin client and model for the whole call.
        client = self._get_client()
        model = self._model

        if vision and not self._spec(model).supports_vision:
            raise UnsupportedCapabilityError(
                f"Model {model} does not support image input",
                provider_name=self.PROVIDER_ID,
            )

        token = options.cancel_token
        try:
            request = self._send(client, model, messages, options)
            response = await token.run(request) if token is not None else await request
        except (InterviewCoderError, OperationCancelledError):
            raise
        except Exception as exc:
            error = self._translate_error(exc)
            if error is None:
                raise
            logger.warning(
                "model_call_failed",
                provider=self.PROVIDER_ID,
                model=model,
                error_kind=error.kind.value,
                error=error.message,
            )
            raise error from exc

        logger.info(
            "model_completion",
            provider=self.PROVIDER_ID,
            model=model,
            vision=vision,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return response
