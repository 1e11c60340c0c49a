"""Ollama model adapter.

Talks to a local Ollama server through its OpenAI-compatible ``/v1``
endpoint, reusing the OpenAI adapter's request translation.  The
"credential" for this provider is the server's base URL, e.g.
``http://localhost:11434``; an empty URL disables the adapter like an empty
API key does for the hosted providers.

Setup: install Ollama, then ``ollama pull llava`` (vision) and optionally
``ollama pull llama3.1`` for text-only solution passes.
"""

from __future__ import annotations

from typing import Any, ClassVar

import httpx
import openai

from interview_coder.interfaces.model_adapter import ModelSpec
from interview_coder.providers.llm.base_adapter import classify_status
from interview_coder.providers.llm.openai_provider import OpenAIModelAdapter
from interview_coder.utils.errors import InterviewCoderError, ServerError


class OllamaModelAdapter(OpenAIModelAdapter):
    """Adapter for a local Ollama server."""

    PROVIDER_ID: ClassVar[str] = "ollama"
    DISPLAY_NAME: ClassVar[str] = "Ollama"
    MODELS: ClassVar[dict[str, ModelSpec]] = {
        "llava": ModelSpec("llava", "LLaVA", "Local vision-language model", context_window=4_096),
        "llama3.2-vision": ModelSpec(
            "llama3.2-vision", "Llama 3.2 Vision", "Local vision model", context_window=128_000
        ),
        "llama3.1": ModelSpec(
            "llama3.1", "Llama 3.1", "Local text model", supports_vision=False,
            context_window=128_000,
        ),
    }
    DEFAULT_MODEL: ClassVar[str] = "llava"

    def masked_credential(self) -> str:
        # A base URL is not a secret.
        return self._credential

    def _build_client(self, credential: str) -> Any:
        return openai.AsyncOpenAI(
            base_url=f"{credential.rstrip('/')}/v1",
            # Ollama ignores the key but the SDK requires a non-empty one.
            api_key="ollama",
            timeout=openai.Timeout(self._timeout_sec, connect=5.0),
            max_retries=0,
        )

    async def _probe(self, client: Any, credential: str) -> None:
        async with httpx.AsyncClient(timeout=5.0) as http:
            response = await http.get(f"{credential.rstrip('/')}/api/tags")
            response.raise_for_status()

    def _translate_error(self, exc: Exception) -> InterviewCoderError | None:
        if isinstance(exc, httpx.HTTPStatusError):
            return classify_status(exc.response.status_code, str(exc), self.PROVIDER_ID)
        if isinstance(exc, httpx.RequestError):
            return ServerError(
                f"Ollama server not reachable at {self._credential or 'the configured URL'}",
                provider_name=self.PROVIDER_ID,
            )
        return super()._translate_error(exc)
