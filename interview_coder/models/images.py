"""Captured screenshot model handed to the core by an image source."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from interview_coder.models.messages import ImagePart
from interview_coder.utils.media import detect_media_type


class CapturedImage(BaseModel):
    """One captured image: a stable identifier (usually a path) and its bytes."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    data: bytes
    media_type: str = ""

    @property
    def mime(self) -> str:
        return self.media_type or detect_media_type(self.data)

    def to_part(self) -> ImagePart:
        return ImagePart(data=self.data, media_type=self.mime)
