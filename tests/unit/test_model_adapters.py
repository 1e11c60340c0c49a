"""Unit tests for the OpenAI, Anthropic and Ollama model adapters.

Vendor SDK clients are patched out; no network calls are made.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import openai
import pytest

from interview_coder.models.messages import ImagePart, ModelMessage, RequestOptions
from interview_coder.providers.llm.anthropic_provider import (
    AnthropicModelAdapter,
    to_claude_request,
)
from interview_coder.providers.llm.ollama_provider import OllamaModelAdapter
from interview_coder.providers.llm.openai_provider import OpenAIModelAdapter, to_chat_messages
from interview_coder.utils.cancellation import CancellationToken
from interview_coder.utils.errors import (
    ErrorKind,
    NotConfiguredError,
    OperationCancelledError,
    ProviderCallError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
    UnsupportedCapabilityError,
)

OPENAI_PATCH = "interview_coder.providers.llm.openai_provider.openai.AsyncOpenAI"
ANTHROPIC_PATCH = "interview_coder.providers.llm.anthropic_provider.anthropic.AsyncAnthropic"
OLLAMA_HTTP_PATCH = "interview_coder.providers.llm.ollama_provider.httpx.AsyncClient"


def _messages(png_bytes: bytes | None = None) -> list[ModelMessage]:
    parts: list[str | ImagePart] = ["hello"]
    if png_bytes:
        parts.append(ImagePart.from_bytes(png_bytes))
    return [ModelMessage.system("sys"), ModelMessage.user(*parts)]


def _status_error(cls: type, status: int, url: str) -> Exception:
    response = httpx.Response(status, request=httpx.Request("POST", url))
    return cls(message=f"HTTP {status}", response=response, body=None)


def _openai_client(content: str | None = "answer") -> AsyncMock:
    mock_response = MagicMock()
    mock_response.choices = [MagicMock(message=MagicMock(content=content))]
    mock_response.usage = MagicMock(prompt_tokens=10, completion_tokens=5, total_tokens=15)

    mock_client = AsyncMock()
    mock_client.chat.completions.create = AsyncMock(return_value=mock_response)
    return mock_client


# ======================================================================
# Message translation
# ======================================================================


class TestMessageTranslation:
    def test_chat_messages_plain_text(self) -> None:
        assert to_chat_messages(_messages()) == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hello"},
        ]

    def test_chat_messages_keep_part_order(self, png_bytes: bytes) -> None:
        user = to_chat_messages(_messages(png_bytes))[1]

        assert [block["type"] for block in user["content"]] == ["text", "image_url"]
        assert user["content"][1]["image_url"]["url"].startswith("data:image/png;base64,")

    def test_claude_request_lifts_system(self, png_bytes: bytes) -> None:
        system, messages = to_claude_request(_messages(png_bytes))

        assert system == "sys"
        assert len(messages) == 1
        image_block = messages[0]["content"][1]
        assert image_block["type"] == "image"
        assert image_block["source"]["media_type"] == "image/png"
        assert image_block["source"]["type"] == "base64"


# ======================================================================
# OpenAI
# ======================================================================


class TestOpenAIModelAdapter:
    def test_model_selection(self) -> None:
        adapter = OpenAIModelAdapter("sk-test")

        assert adapter.provider_id == "openai"
        assert adapter.current_model() == "gpt-4o"
        assert "gpt-3.5-turbo" in adapter.list_models()
        assert adapter.set_model("gpt-4o-mini") == "gpt-4o-mini"
        assert adapter.set_model("gpt-9000") == "gpt-4o"

    def test_credential_state(self) -> None:
        adapter = OpenAIModelAdapter("  ")
        assert adapter.is_configured() is False

        adapter.set_credential("sk-abcdefghijkl")
        assert adapter.is_configured() is True
        assert adapter.masked_credential() == "sk-a...ijkl"

    @pytest.mark.asyncio
    async def test_complete_success(self) -> None:
        mock_client = _openai_client("LLM response text")

        with patch(OPENAI_PATCH, return_value=mock_client) as client_cls:
            adapter = OpenAIModelAdapter("sk-test")
            response = await adapter.complete(_messages())

        assert response.text == "LLM response text"
        assert response.usage is not None
        assert response.usage.total_tokens == 15
        assert response.provider == "openai"
        assert client_cls.call_args.kwargs["max_retries"] == 0
        mock_client.chat.completions.create.assert_awaited_once_with(
            model="gpt-4o",
            messages=[
                {"role": "system", "content": "sys"},
                {"role": "user", "content": "hello"},
            ],
            max_tokens=4000,
            temperature=0.7,
        )

    @pytest.mark.asyncio
    async def test_vision_sends_image_blocks(self, png_bytes: bytes) -> None:
        mock_client = _openai_client()

        with patch(OPENAI_PATCH, return_value=mock_client):
            adapter = OpenAIModelAdapter("sk-test")
            await adapter.vision(_messages(png_bytes), RequestOptions(temperature=0.2))

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.2
        assert kwargs["messages"][1]["content"][1]["type"] == "image_url"

    @pytest.mark.asyncio
    async def test_not_configured_fails_before_client(self) -> None:
        with patch(OPENAI_PATCH) as client_cls:
            adapter = OpenAIModelAdapter("")
            with pytest.raises(NotConfiguredError):
                await adapter.complete(_messages())

        client_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_vision_unsupported_on_text_model(self, png_bytes: bytes) -> None:
        mock_client = _openai_client()

        with patch(OPENAI_PATCH, return_value=mock_client):
            adapter = OpenAIModelAdapter("sk-test", model_id="gpt-3.5-turbo")
            assert adapter.supports_vision() is False
            with pytest.raises(UnsupportedCapabilityError):
                await adapter.vision(_messages(png_bytes))

        mock_client.chat.completions.create.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error_cls", "status", "expected"),
        [
            (openai.AuthenticationError, 401, UnauthorizedError),
            (openai.PermissionDeniedError, 403, UnauthorizedError),
            (openai.RateLimitError, 429, RateLimitError),
            (openai.InternalServerError, 500, ServerError),
        ],
    )
    async def test_status_errors_are_classified(
        self, error_cls: type, status: int, expected: type
    ) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=_status_error(error_cls, status, "https://api.openai.com/v1/chat")
        )

        with patch(OPENAI_PATCH, return_value=mock_client):
            adapter = OpenAIModelAdapter("sk-test")
            with pytest.raises(expected) as exc_info:
                await adapter.complete(_messages())

        assert exc_info.value.provider_name == "openai"
        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_timeout_is_server_error(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APITimeoutError(request=httpx.Request("POST", "https://x"))
        )

        with patch(OPENAI_PATCH, return_value=mock_client):
            adapter = OpenAIModelAdapter("sk-test", timeout_sec=5)
            with pytest.raises(ServerError, match="timed out after 5s"):
                await adapter.complete(_messages())

    @pytest.mark.asyncio
    async def test_empty_content_is_provider_error(self) -> None:
        with patch(OPENAI_PATCH, return_value=_openai_client(content=None)):
            adapter = OpenAIModelAdapter("sk-test")
            with pytest.raises(ProviderCallError) as exc_info:
                await adapter.complete(_messages())

        assert exc_info.value.kind == ErrorKind.UNKNOWN

    @pytest.mark.asyncio
    async def test_call_in_flight_keeps_model_and_client(self) -> None:
        release = asyncio.Event()
        mock_client = _openai_client()
        finished = mock_client.chat.completions.create.return_value

        async def slow_create(**kwargs):  # noqa: ANN003, ANN202
            await release.wait()
            return finished

        mock_client.chat.completions.create = AsyncMock(side_effect=slow_create)

        with patch(OPENAI_PATCH, return_value=mock_client) as client_cls:
            adapter = OpenAIModelAdapter("sk-first")
            task = asyncio.create_task(adapter.complete(_messages()))
            await asyncio.sleep(0)
            adapter.set_model("gpt-4o-mini")
            adapter.set_credential("sk-second")
            release.set()
            await task

        assert mock_client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o"
        assert client_cls.call_count == 1
        assert client_cls.call_args.kwargs["api_key"] == "sk-first"

    @pytest.mark.asyncio
    async def test_cancel_token_aborts_request(self) -> None:
        aborted = asyncio.Event()

        async def hang(**kwargs):  # noqa: ANN003, ANN202
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                aborted.set()
                raise

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(side_effect=hang)
        token = CancellationToken()

        with patch(OPENAI_PATCH, return_value=mock_client):
            adapter = OpenAIModelAdapter("sk-test")
            task = asyncio.create_task(
                adapter.complete(_messages(), RequestOptions(cancel_token=token))
            )
            await asyncio.sleep(0.01)
            token.cancel("user pressed reset")
            with pytest.raises(OperationCancelledError, match="user pressed reset"):
                await task

        assert aborted.is_set()

    @pytest.mark.asyncio
    async def test_probe_success(self) -> None:
        mock_client = AsyncMock()
        mock_client.models.list = AsyncMock(return_value=MagicMock())

        with patch(OPENAI_PATCH, return_value=mock_client):
            probe = await OpenAIModelAdapter().probe_credential("sk-candidate")

        assert probe.valid is True
        mock_client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_probe_unauthorized(self) -> None:
        mock_client = AsyncMock()
        mock_client.models.list = AsyncMock(
            side_effect=_status_error(openai.AuthenticationError, 401, "https://x/models")
        )

        with patch(OPENAI_PATCH, return_value=mock_client):
            probe = await OpenAIModelAdapter("sk-test").probe_credential()

        assert probe.valid is False
        assert probe.error_kind == ErrorKind.UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_probe_empty_credential(self) -> None:
        with patch(OPENAI_PATCH) as client_cls:
            probe = await OpenAIModelAdapter("sk-test").probe_credential("   ")

        assert probe.valid is False
        assert probe.error_kind == ErrorKind.NOT_CONFIGURED
        client_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_aclose_closes_cached_client(self) -> None:
        mock_client = _openai_client()

        with patch(OPENAI_PATCH, return_value=mock_client):
            adapter = OpenAIModelAdapter("sk-test")
            await adapter.complete(_messages())
            await adapter.aclose()

        mock_client.close.assert_awaited_once()


# ======================================================================
# Anthropic
# ======================================================================


def _anthropic_client(text: str = "claude answer") -> AsyncMock:
    mock_response = MagicMock()
    mock_response.content = [MagicMock(type="text", text=text)]
    mock_response.usage = MagicMock(input_tokens=7, output_tokens=3)

    mock_client = AsyncMock()
    mock_client.messages.create = AsyncMock(return_value=mock_response)
    return mock_client


class TestAnthropicModelAdapter:
    def test_defaults(self) -> None:
        adapter = AnthropicModelAdapter("sk-ant-test")

        assert adapter.provider_id == "claude"
        assert adapter.current_model() == "claude-sonnet-4-20250514"
        assert adapter.supports_vision() is True

    @pytest.mark.asyncio
    async def test_complete_success(self) -> None:
        mock_client = _anthropic_client()

        with patch(ANTHROPIC_PATCH, return_value=mock_client):
            adapter = AnthropicModelAdapter("sk-ant-test")
            response = await adapter.complete(_messages())

        assert response.text == "claude answer"
        assert response.usage is not None
        assert response.usage.total_tokens == 10
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["system"] == "sys"
        assert kwargs["messages"] == [{"role": "user", "content": "hello"}]
        assert kwargs["model"] == "claude-sonnet-4-20250514"

    @pytest.mark.asyncio
    async def test_vision_sends_base64_image(self, png_bytes: bytes) -> None:
        mock_client = _anthropic_client()

        with patch(ANTHROPIC_PATCH, return_value=mock_client):
            adapter = AnthropicModelAdapter("sk-ant-test")
            await adapter.vision(_messages(png_bytes))

        content = mock_client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert content[1]["type"] == "image"

    @pytest.mark.asyncio
    async def test_rate_limit_is_classified(self) -> None:
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(
            side_effect=_status_error(
                anthropic.RateLimitError, 429, "https://api.anthropic.com/v1/messages"
            )
        )

        with patch(ANTHROPIC_PATCH, return_value=mock_client):
            adapter = AnthropicModelAdapter("sk-ant-test")
            with pytest.raises(RateLimitError) as exc_info:
                await adapter.complete(_messages())

        assert exc_info.value.kind == ErrorKind.RATE_LIMITED
        assert exc_info.value.provider_name == "claude"

    @pytest.mark.asyncio
    async def test_no_text_blocks_is_provider_error(self) -> None:
        mock_client = _anthropic_client()
        mock_client.messages.create.return_value.content = [MagicMock(type="tool_use")]

        with patch(ANTHROPIC_PATCH, return_value=mock_client):
            adapter = AnthropicModelAdapter("sk-ant-test")
            with pytest.raises(ProviderCallError):
                await adapter.complete(_messages())

    @pytest.mark.asyncio
    async def test_probe_uses_cheap_model(self) -> None:
        mock_client = _anthropic_client()

        with patch(ANTHROPIC_PATCH, return_value=mock_client):
            probe = await AnthropicModelAdapter().probe_credential("sk-ant-candidate")

        assert probe.valid is True
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["model"] == AnthropicModelAdapter.PROBE_MODEL
        assert kwargs["max_tokens"] == 10


# ======================================================================
# Ollama
# ======================================================================


def _http_client(**get_kwargs) -> AsyncMock:  # noqa: ANN003
    mock_http_client = AsyncMock()
    mock_http_client.__aenter__ = AsyncMock(return_value=mock_http_client)
    mock_http_client.__aexit__ = AsyncMock(return_value=False)
    mock_http_client.get = AsyncMock(**get_kwargs)
    return mock_http_client


class TestOllamaModelAdapter:
    def test_text_model_has_no_vision(self) -> None:
        adapter = OllamaModelAdapter("http://localhost:11434", model_id="llama3.1")

        assert adapter.provider_id == "ollama"
        assert adapter.supports_vision() is False
        assert adapter.masked_credential() == "http://localhost:11434"

    @pytest.mark.asyncio
    async def test_complete_uses_v1_endpoint(self) -> None:
        mock_client = _openai_client("local answer")

        with patch(OPENAI_PATCH, return_value=mock_client) as client_cls:
            adapter = OllamaModelAdapter("http://localhost:11434/")
            response = await adapter.complete(_messages())

        assert response.text == "local answer"
        assert response.provider == "ollama"
        assert client_cls.call_args.kwargs["base_url"] == "http://localhost:11434/v1"
        assert mock_client.chat.completions.create.call_args.kwargs["model"] == "llava"

    @pytest.mark.asyncio
    async def test_probe_success(self) -> None:
        mock_http_client = _http_client(return_value=MagicMock(status_code=200))

        with patch(OPENAI_PATCH, return_value=AsyncMock()), patch(
            OLLAMA_HTTP_PATCH, return_value=mock_http_client
        ):
            probe = await OllamaModelAdapter().probe_credential("http://localhost:11434")

        assert probe.valid is True
        mock_http_client.get.assert_awaited_once_with("http://localhost:11434/api/tags")

    @pytest.mark.asyncio
    async def test_probe_unreachable(self) -> None:
        mock_http_client = _http_client(side_effect=httpx.ConnectError("Connection refused"))

        with patch(OPENAI_PATCH, return_value=AsyncMock()), patch(
            OLLAMA_HTTP_PATCH, return_value=mock_http_client
        ):
            probe = await OllamaModelAdapter().probe_credential("http://localhost:11434")

        assert probe.valid is False
        assert probe.error_kind == ErrorKind.SERVER_ERROR
