"""Abstract receiver for pipeline events."""

from __future__ import annotations

from abc import ABC, abstractmethod

from interview_coder.models.events import PipelineEvent


# Concrete implementations: EventBroadcaster, QueueEventSink
# Located in: interview_coder/pipeline/event_broadcaster.py
class IEventSink(ABC):
    @abstractmethod
    def emit(self, event: PipelineEvent) -> None:
        """Deliver *event*.  Must not block and must not raise."""
