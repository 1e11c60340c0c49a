"""Image sources backed by files on disk or by bytes held in memory.

Both keep one ordered list per :class:`QueueKind`.  Files are validated with
Pillow when they are added: unreadable, oversized or unsupported images are
rejected up front instead of failing later inside a model call.
"""

from __future__ import annotations

import io
from collections.abc import Iterable
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from interview_coder.interfaces.image_source import IImageSource
from interview_coder.models.images import CapturedImage
from interview_coder.models.pipeline import QueueKind
from interview_coder.utils.errors import InvalidImageError
from interview_coder.utils.logging import get_logger

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

_FORMAT_TO_MEDIA_TYPE = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}

logger = get_logger(__name__)


def validate_image_bytes(data: bytes, identifier: str) -> str:
    """Return the media type of *data* after checking Pillow can read it.

    Raises
    ------
    InvalidImageError
        If the bytes are empty, too large, undecodable, or not PNG/JPEG/WEBP.
    """
    if not data:
        raise InvalidImageError(f"Image is empty: {identifier}")
    if len(data) > MAX_FILE_SIZE:
        raise InvalidImageError(
            f"Image exceeds {MAX_FILE_SIZE // (1024 * 1024)} MB: {identifier}"
        )
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format or ""
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise InvalidImageError(f"Cannot read image {identifier}: {exc}") from exc

    media_type = _FORMAT_TO_MEDIA_TYPE.get(image_format.upper())
    if media_type is None:
        raise InvalidImageError(f"Unsupported image format {image_format!r}: {identifier}")
    return media_type


class InMemoryImageSource(IImageSource):
    """Image source for callers that already hold the bytes (tests, UIs)."""

    def __init__(
        self,
        primary: Iterable[CapturedImage] = (),
        secondary: Iterable[CapturedImage] = (),
    ) -> None:
        self._queues: dict[QueueKind, list[CapturedImage]] = {
            QueueKind.PRIMARY: list(primary),
            QueueKind.SECONDARY: list(secondary),
        }

    def add(self, queue_kind: QueueKind, image: CapturedImage) -> None:
        self._queues[queue_kind].append(image)

    def clear(self, queue_kind: QueueKind | None = None) -> None:
        kinds = [queue_kind] if queue_kind else list(QueueKind)
        for kind in kinds:
            self._queues[kind].clear()

    def list_images(self, queue_kind: QueueKind) -> list[CapturedImage]:
        return list(self._queues[queue_kind])


class FileImageSource(InMemoryImageSource):
    """Screenshot files on disk, read and validated when added."""

    def __init__(
        self,
        primary_paths: Iterable[str | Path] = (),
        secondary_paths: Iterable[str | Path] = (),
    ) -> None:
        super().__init__()
        for path in primary_paths:
            self.add_file(QueueKind.PRIMARY, path)
        for path in secondary_paths:
            self.add_file(QueueKind.SECONDARY, path)

    def add_file(self, queue_kind: QueueKind, path: str | Path) -> CapturedImage:
        """Read, validate and enqueue one image file.

        Raises
        ------
        InvalidImageError
            If the file is missing, has a disallowed extension, or fails
            :func:`validate_image_bytes`.
        """
        image_path = Path(path)
        if not image_path.is_file():
            raise InvalidImageError(f"File not found: {image_path}")
        if image_path.suffix.lower() not in ALLOWED_EXTENSIONS:
            raise InvalidImageError(
                f"Unsupported file type {image_path.suffix!r}. "
                f"Accepted: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )

        data = image_path.read_bytes()
        media_type = validate_image_bytes(data, str(image_path))
        image = CapturedImage(identifier=str(image_path), data=data, media_type=media_type)
        self.add(queue_kind, image)
        logger.debug(
            "image_enqueued",
            queue=queue_kind.value,
            path=str(image_path),
            media_type=media_type,
            size=len(data),
        )
        return image
