"""OpenAI model adapter.

Wraps the ``openai`` async client to implement :class:`IModelAdapter`.
Messages map onto the chat-completions format almost one-to-one: system
messages stay inline, text parts become ``{"type": "text"}`` blocks and
image parts become ``image_url`` blocks carrying a base64 data URI.

The client is built with ``max_retries=0``: retrying a failed request is
the caller's decision, never the adapter's.
"""

from __future__ import annotations

from typing import Any, ClassVar

import openai

from interview_coder.interfaces.model_adapter import ModelSpec
from interview_coder.models.messages import (
    ImagePart,
    ModelMessage,
    ModelResponse,
    RequestOptions,
    TextPart,
    TokenUsage,
)
from interview_coder.providers.llm.base_adapter import BaseModelAdapter, classify_status
from interview_coder.utils.errors import InterviewCoderError, ProviderCallError, ServerError


def to_chat_messages(messages: list[ModelMessage]) -> list[dict[str, Any]]:
    """Translate neutral messages into chat-completions ``messages``.

    A message made of a single text part is sent as a plain string; any
    other message is sent as an ordered list of content blocks.
    """
    converted: list[dict[str, Any]] = []
    for message in messages:
        if len(message.content) == 1 and isinstance(message.content[0], TextPart):
            converted.append({"role": message.role.value, "content": message.content[0].text})
            continue

        blocks: list[dict[str, Any]] = []
        for part in message.content:
            if isinstance(part, ImagePart):
                blocks.append({"type": "image_url", "image_url": {"url": part.data_uri}})
            else:
                blocks.append({"type": "text", "text": part.text})
        converted.append({"role": message.role.value, "content": blocks})
    return converted


class OpenAIModelAdapter(BaseModelAdapter):
    """Adapter for OpenAI chat models.

    ``gpt-4o`` is the default; ``gpt-3.5-turbo`` is text-only, so a vision
    call against it fails with ``UnsupportedCapabilityError``.
    """

    PROVIDER_ID: ClassVar[str] = "openai"
    DISPLAY_NAME: ClassVar[str] = "OpenAI"
    MODELS: ClassVar[dict[str, ModelSpec]] = {
        "gpt-4o": ModelSpec("gpt-4o", "GPT-4o", "Most capable multimodal model"),
        "gpt-4o-mini": ModelSpec("gpt-4o-mini", "GPT-4o mini", "Faster, cheaper multimodal model"),
        "gpt-4-turbo": ModelSpec("gpt-4-turbo", "GPT-4 Turbo", "Previous-generation vision model"),
        "gpt-3.5-turbo": ModelSpec(
            "gpt-3.5-turbo",
            "GPT-3.5 Turbo",
            "Text only, lowest cost",
            supports_vision=False,
            context_window=16_385,
        ),
    }
    DEFAULT_MODEL: ClassVar[str] = "gpt-4o"

    def __init__(
        self,
        credential: str | None = None,
        model_id: str | None = None,
        timeout_sec: float = 60.0,
        base_url: str = "",
    ) -> None:
        super().__init__(credential=credential, model_id=model_id, timeout_sec=timeout_sec)
        # Custom endpoint for OpenAI-compatible servers.
        self._base_url = base_url

    def _build_client(self, credential: str) -> Any:
        client_kwargs: dict[str, Any] = {
            "api_key": credential,
            "timeout": openai.Timeout(self._timeout_sec, connect=5.0),
            "max_retries": 0,
        }
        if self._base_url:
            client_kwargs["base_url"] = self._base_url
        return openai.AsyncOpenAI(**client_kwargs)

    async def _send(
        self,
        client: Any,
        model: str,
        messages: list[ModelMessage],
        options: RequestOptions,
    ) -> ModelResponse:
        response = await client.chat.completions.create(
            model=model,
            messages=to_chat_messages(messages),
            max_tokens=options.max_tokens,
            temperature=options.temperature,
        )
        content = response.choices[0].message.content if response.choices else None
        if content is None:
            raise ProviderCallError(
                f"{self.DISPLAY_NAME} returned an empty response",
                provider_name=self.PROVIDER_ID,
            )

        usage = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )
        return ModelResponse(text=content, usage=usage, provider=self.PROVIDER_ID, model=model)

    async def _probe(self, client: Any, credential: str) -> None:
        # Listing models costs nothing and still authenticates the key.
        await client.models.list()

    def _translate_error(self, exc: Exception) -> InterviewCoderError | None:
        if isinstance(exc, openai.APITimeoutError):
            return ServerError(
                f"{self.DISPLAY_NAME} request timed out after {self._timeout_sec:g}s",
                provider_name=self.PROVIDER_ID,
            )
        if isinstance(exc, openai.APIConnectionError):
            return ServerError(
                f"Could not reach {self.DISPLAY_NAME}: {exc}", provider_name=self.PROVIDER_ID
            )
        if isinstance(exc, openai.APIStatusError):
            return classify_status(exc.status_code, exc.message, self.PROVIDER_ID)
        if isinstance(exc, openai.APIError):
            return ProviderCallError(
                f"{self.DISPLAY_NAME} API error: {exc}", provider_name=self.PROVIDER_ID
            )
        return None
