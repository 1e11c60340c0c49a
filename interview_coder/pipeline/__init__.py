"""Pipeline orchestration: the processing orchestrator and its event sinks."""

from interview_coder.pipeline.event_broadcaster import (
    EventBroadcaster,
    QueueEventSink,
    is_terminal_event,
)
from interview_coder.pipeline.orchestrator import AdapterFactory, ProcessingOrchestrator

__all__ = [
    "AdapterFactory",
    "EventBroadcaster",
    "ProcessingOrchestrator",
    "QueueEventSink",
    "is_terminal_event",
]
