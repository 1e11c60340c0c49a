"""Anthropic (Claude) model adapter.

Wraps the ``anthropic`` async client to implement :class:`IModelAdapter`.

Key differences from the OpenAI adapter:
    - Uses the Messages API (not chat.completions)
    - System messages are lifted out of the list into the top-level
      ``system`` parameter
    - Images use the "image" content type with a base64 source object
    - Response content is a list of blocks; text blocks are joined
"""

from __future__ import annotations

from typing import Any, ClassVar

import anthropic

from interview_coder.interfaces.model_adapter import ModelSpec
from interview_coder.models.messages import (
    ImagePart,
    ModelMessage,
    ModelResponse,
    RequestOptions,
    Role,
    TextPart,
    TokenUsage,
)
from interview_coder.providers.llm.base_adapter import BaseModelAdapter, classify_status
from interview_coder.utils.errors import InterviewCoderError, ProviderCallError, ServerError


def to_claude_request(messages: list[ModelMessage]) -> tuple[str, list[dict[str, Any]]]:
    """Split neutral messages into ``(system, messages)`` for the Messages API."""
    system_parts: list[str] = []
    converted: list[dict[str, Any]] = []
    for message in messages:
        if message.role == Role.SYSTEM:
            system_parts.append(message.text)
            continue

        role = "assistant" if message.role == Role.ASSISTANT else "user"
        if len(message.content) == 1 and isinstance(message.content[0], TextPart):
            converted.append({"role": role, "content": message.content[0].text})
            continue

        blocks: list[dict[str, Any]] = []
        for part in message.content:
            if isinstance(part, ImagePart):
                blocks.append(
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": part.mime,
                            "data": part.base64,
                        },
                    }
                )
            else:
                blocks.append({"type": "text", "text": part.text})
        converted.append({"role": role, "content": blocks})
    return "\n\n".join(p for p in system_parts if p), converted


class AnthropicModelAdapter(BaseModelAdapter):
    """Adapter for Claude models.  Every listed model accepts images."""

    PROVIDER_ID: ClassVar[str] = "claude"
    DISPLAY_NAME: ClassVar[str] = "Anthropic Claude"
    MODELS: ClassVar[dict[str, ModelSpec]] = {
        "claude-sonnet-4-20250514": ModelSpec(
            "claude-sonnet-4-20250514", "Claude Sonnet 4", "Balanced quality and speed",
            context_window=200_000,
        ),
        "claude-3-5-sonnet-20240620": ModelSpec(
            "claude-3-5-sonnet-20240620", "Claude 3.5 Sonnet", "Strong coding model",
            context_window=200_000,
        ),
        "claude-3-5-haiku-20241022": ModelSpec(
            "claude-3-5-haiku-20241022", "Claude 3.5 Haiku", "Fastest, lowest cost",
            context_window=200_000,
        ),
        "claude-3-opus-20240229": ModelSpec(
            "claude-3-opus-20240229", "Claude 3 Opus", "Most capable Claude 3 model",
            context_window=200_000,
        ),
        "claude-3-sonnet-20240229": ModelSpec(
            "claude-3-sonnet-20240229", "Claude 3 Sonnet", "Claude 3 balanced model",
            context_window=200_000,
        ),
        "claude-3-haiku-20240307": ModelSpec(
            "claude-3-haiku-20240307", "Claude 3 Haiku", "Claude 3 fast model",
            context_window=200_000,
        ),
    }
    DEFAULT_MODEL: ClassVar[str] = "claude-sonnet-4-20250514"
    PROBE_MODEL: ClassVar[str] = "claude-3-5-haiku-20241022"

    def _build_client(self, credential: str) -> Any:
        return anthropic.AsyncAnthropic(
            api_key=credential,
            timeout=self._timeout_sec,
            max_retries=0,
        )

    async def _send(
        self,
        client: Any,
        model: str,
        messages: list[ModelMessage],
        options: RequestOptions,
    ) -> ModelResponse:
        system, converted = to_claude_request(messages)
        request: dict[str, Any] = {
            "model": model,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "messages": converted,
        }
        if system:
            request["system"] = system

        response = await client.messages.create(**request)
        text_blocks = [block.text for block in response.content if block.type == "text"]
        if not text_blocks:
            raise ProviderCallError(
                f"{self.DISPLAY_NAME} returned no text content", provider_name=self.PROVIDER_ID
            )

        usage = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            )
        return ModelResponse(
            text="\n".join(text_blocks), usage=usage, provider=self.PROVIDER_ID, model=model
        )

    async def _probe(self, client: Any, credential: str) -> None:
        await client.messages.create(
            model=self.PROBE_MODEL,
            max_tokens=10,
            messages=[{"role": "user", "content": "Hello"}],
        )

    def _translate_error(self, exc: Exception) -> InterviewCoderError | None:
        if isinstance(exc, anthropic.APITimeoutError):
            return ServerError(
                f"{self.DISPLAY_NAME} request timed out after {self._timeout_sec:g}s",
                provider_name=self.PROVIDER_ID,
            )
        if isinstance(exc, anthropic.APIConnectionError):
            return ServerError(
                f"Could not reach {self.DISPLAY_NAME}: {exc}", provider_name=self.PROVIDER_ID
            )
        if isinstance(exc, anthropic.APIStatusError):
            return classify_status(exc.status_code, exc.message, self.PROVIDER_ID)
        if isinstance(exc, anthropic.APIError):
            return ProviderCallError(
                f"{self.DISPLAY_NAME} API error: {exc}", provider_name=self.PROVIDER_ID
            )
        return None
