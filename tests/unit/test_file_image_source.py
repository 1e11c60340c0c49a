"""Unit tests for the file-backed and in-memory image sources."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from conftest import make_png
from interview_coder.models.images import CapturedImage
from interview_coder.models.pipeline import QueueKind
from interview_coder.providers.images import file_image_source
from interview_coder.providers.images.file_image_source import (
    FileImageSource,
    InMemoryImageSource,
    validate_image_bytes,
)
from interview_coder.utils.errors import InvalidImageError


def _save(tmp_path: Path, name: str, data: bytes) -> Path:
    path = tmp_path / name
    path.write_bytes(data)
    return path


def _jpeg() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color="red").save(buf, format="JPEG")
    return buf.getvalue()


class TestFileImageSource:
    def test_queues_keep_order(self, tmp_path: Path) -> None:
        first = _save(tmp_path, "a.png", make_png(color="white"))
        second = _save(tmp_path, "b.jpg", _jpeg())
        debug = _save(tmp_path, "attempt.png", make_png(color="black"))

        source = FileImageSource([first, second], [debug])

        primary = source.list_images(QueueKind.PRIMARY)
        assert [img.identifier for img in primary] == [str(first), str(second)]
        assert [img.media_type for img in primary] == ["image/png", "image/jpeg"]
        assert len(source.list_images(QueueKind.SECONDARY)) == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidImageError, match="not found"):
            FileImageSource([tmp_path / "nope.png"])

    def test_disallowed_extension(self, tmp_path: Path) -> None:
        path = _save(tmp_path, "problem.bmp", make_png())
        with pytest.raises(InvalidImageError, match="Unsupported file type"):
            FileImageSource([path])

    def test_corrupt_image(self, tmp_path: Path) -> None:
        path = _save(tmp_path, "broken.png", b"definitely not an image")
        with pytest.raises(InvalidImageError, match="Cannot read image"):
            FileImageSource([path])

    def test_unsupported_format_behind_allowed_extension(self, tmp_path: Path) -> None:
        buf = io.BytesIO()
        Image.new("RGB", (4, 4)).save(buf, format="GIF")
        path = _save(tmp_path, "animated.png", buf.getvalue())

        with pytest.raises(InvalidImageError, match="Unsupported image format"):
            FileImageSource([path])


class TestValidateImageBytes:
    def test_empty(self) -> None:
        with pytest.raises(InvalidImageError, match="empty"):
            validate_image_bytes(b"", "x.png")

    def test_oversized(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(file_image_source, "MAX_FILE_SIZE", 16)
        with pytest.raises(InvalidImageError, match="exceeds"):
            validate_image_bytes(make_png(), "big.png")

    def test_valid_png(self, png_bytes: bytes) -> None:
        assert validate_image_bytes(png_bytes, "ok.png") == "image/png"


class TestInMemoryImageSource:
    def test_list_returns_copy(self, captured_image: CapturedImage) -> None:
        source = InMemoryImageSource(primary=[captured_image])

        listed = source.list_images(QueueKind.PRIMARY)
        listed.clear()

        assert source.list_images(QueueKind.PRIMARY) == [captured_image]

    def test_add_and_clear(self, captured_image: CapturedImage) -> None:
        source = InMemoryImageSource()
        source.add(QueueKind.SECONDARY, captured_image)
        assert source.list_images(QueueKind.SECONDARY) == [captured_image]

        source.clear(QueueKind.SECONDARY)
        assert source.list_images(QueueKind.SECONDARY) == []
