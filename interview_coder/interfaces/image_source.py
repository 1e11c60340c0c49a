"""Abstract read-only source of captured images, one ordered list per queue."""

from __future__ import annotations

from abc import ABC, abstractmethod

from interview_coder.models.images import CapturedImage
from interview_coder.models.pipeline import QueueKind


# Concrete implementations: FileImageSource, InMemoryImageSource
# Located in: interview_coder/providers/images/
class IImageSource(ABC):
    """Contract for whatever captures and stores screenshots."""

    @abstractmethod
    def list_images(self, queue_kind: QueueKind) -> list[CapturedImage]:
        """Return the images queued for *queue_kind*, oldest first."""
