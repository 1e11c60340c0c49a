"""Provider-neutral wire models for model requests and responses.

A request is an ordered list of :class:`ModelMessage`, each a role plus an
ordered list of parts (text or inline image bytes with a MIME type).  Part
order is significant and every adapter preserves it when translating to the
vendor's own request shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from interview_coder.utils.cancellation import CancellationToken
from interview_coder.utils.media import detect_media_type, to_base64


class Role(str, Enum):  # noqa: UP042  (StrEnum requires Python 3.11+)
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class TextPart(BaseModel):
    """A plain-text content part."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    """An inline image content part.

    ``media_type`` is sniffed from the bytes when not given.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    data: bytes
    media_type: str = ""

    @classmethod
    def from_bytes(cls, data: bytes, media_type: str = "") -> ImagePart:
        return cls(data=data, media_type=media_type or detect_media_type(data))

    @property
    def mime(self) -> str:
        return self.media_type or detect_media_type(self.data)

    @property
    def base64(self) -> str:
        return to_base64(self.data)

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime};base64,{self.base64}"


ContentPart = Annotated[Union[TextPart, ImagePart], Field(discriminator="type")]


class ModelMessage(BaseModel):
    """One message of a model request."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: list[ContentPart] = Field(default_factory=list)

    @classmethod
    def system(cls, text: str) -> ModelMessage:
        return cls(role=Role.SYSTEM, content=[TextPart(text=text)])

    @classmethod
    def user(cls, *parts: str | ImagePart) -> ModelMessage:
        """Build a user message; plain strings become :class:`TextPart`."""
        content: list[TextPart | ImagePart] = [
            TextPart(text=part) if isinstance(part, str) else part for part in parts
        ]
        return cls(role=Role.USER, content=content)

    @property
    def text(self) -> str:
        """All text parts joined by blank lines."""
        return "\n\n".join(part.text for part in self.content if isinstance(part, TextPart))

    @property
    def has_images(self) -> bool:
        return any(isinstance(part, ImagePart) for part in self.content)


class TokenUsage(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ModelResponse(BaseModel):
    """Text returned by a model plus optional token accounting."""

    model_config = ConfigDict(frozen=True)

    text: str
    usage: TokenUsage | None = None
    provider: str = ""
    model: str = ""


@dataclass(frozen=True)
class RequestOptions:
    """Per-call knobs: token budget, sampling temperature, cancellation."""

    max_tokens: int = 4000
    temperature: float = 0.7
    cancel_token: CancellationToken | None = None
