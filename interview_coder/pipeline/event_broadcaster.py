"""Event sinks that deliver orchestrator events to the outside world.

Two implementations of :class:`IEventSink`:

- :class:`EventBroadcaster` fans every event out to registered callbacks
  (the observer shape a UI controller subscribes to).
- :class:`QueueEventSink` pushes events onto an :class:`asyncio.Queue` so a
  consumer can ``await`` them as a channel, e.g. the CLI waiting for the
  terminal event of one run.

In both, ``emit`` never blocks and never raises.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable

import structlog

from interview_coder.interfaces.event_sink import IEventSink
from interview_coder.models.events import (
    PipelineEvent,
    RunCancelledEvent,
    RunFailedEvent,
    RunSucceededEvent,
)
from interview_coder.utils.logging import get_logger

EventListener = Callable[[PipelineEvent], None]

TERMINAL_EVENTS = (RunSucceededEvent, RunFailedEvent, RunCancelledEvent)


def is_terminal_event(event: PipelineEvent) -> bool:
    return isinstance(event, TERMINAL_EVENTS)


class EventBroadcaster(IEventSink):
    """Broadcasts pipeline events to registered listener callbacks.

    Listeners receive every event for every run; filtering by ``run_id`` or
    ``queue_kind`` is the listener's job.
    """

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register *listener* and return a callable that removes it again.

        Registering the same callable twice is a no-op.
        """
        if listener not in self._listeners:
            self._listeners.append(listener)
            self._logger.debug("listener_registered", total_listeners=len(self._listeners))
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
            self._logger.debug(
                "listener_unregistered", remaining_listeners=len(self._listeners)
            )

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, event: PipelineEvent) -> None:
        """Deliver *event* to every listener.

        Listeners that raise are logged and skipped so the remaining
        listeners still see the event.
        """
        self._logger.debug(
            "pipeline_event",
            event_type=event.event_type,
            run_id=event.run_id,
            queue=event.queue_kind.value,
        )
        # Copy: a listener may unsubscribe itself while being notified.
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    run_id=event.run_id,
                    event_type=event.event_type,
                    error=str(exc),
                    callback=getattr(listener, "__name__", repr(listener)),
                )


class QueueEventSink(IEventSink):
    """Channel-style sink backed by an unbounded :class:`asyncio.Queue`."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[PipelineEvent] = asyncio.Queue()

    def emit(self, event: PipelineEvent) -> None:
        self._queue.put_nowait(event)

    async def get(self) -> PipelineEvent:
        return await self._queue.get()

    def drain(self) -> list[PipelineEvent]:
        """Return and remove every event currently queued, oldest first."""
        events: list[PipelineEvent] = []
        while not self._queue.empty():
            events.append(self._queue.get_nowait())
        return events

    async def until_terminal(self, run_id: str) -> AsyncIterator[PipelineEvent]:
        """Yield events of *run_id* up to and including its terminal event.

        Events of other runs are consumed and dropped.
        """
        while True:
            event = await self._queue.get()
            if event.run_id != run_id:
                continue
            yield event
            if is_terminal_event(event):
                return
