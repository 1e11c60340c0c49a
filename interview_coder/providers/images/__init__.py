"""Image sources feeding screenshots to the orchestrator."""

from interview_coder.providers.images.file_image_source import (
    ALLOWED_EXTENSIONS,
    MAX_FILE_SIZE,
    FileImageSource,
    InMemoryImageSource,
    validate_image_bytes,
)

__all__ = [
    "ALLOWED_EXTENSIONS",
    "MAX_FILE_SIZE",
    "FileImageSource",
    "InMemoryImageSource",
    "validate_image_bytes",
]
