"""Image media-type detection from magic bytes."""

from __future__ import annotations

import base64

DEFAULT_MEDIA_TYPE = "image/png"


def detect_media_type(image_bytes: bytes) -> str:
    """Detect the MIME type of an image from its magic bytes.

    Magic bytes are more reliable than file extensions, and the vision APIs
    need the correct MIME type alongside the base64 payload.

    PNG starts with: 89 50 4E 47 0D 0A 1A 0A
    WEBP starts with: RIFF....WEBP
    JPEG starts with: FF D8
    GIF starts with: GIF87a / GIF89a
    """
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:2] == b"\xff\xd8":
        return "image/jpeg"
    if image_bytes[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    # Screenshots are PNG.
    return DEFAULT_MEDIA_TYPE


def to_base64(image_bytes: bytes) -> str:
    return base64.b64encode(image_bytes).decode("utf-8")
