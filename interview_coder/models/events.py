"""Events emitted by the orchestrator to an :class:`IEventSink`.

Every event carries the ``run_id`` and ``queue_kind`` of the run that
produced it.  For a single run, events are emitted in causal order and
nothing follows a :class:`RunCancelledEvent`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from interview_coder.models.pipeline import QueueKind
from interview_coder.models.problem import ProblemInfo, SolutionResult
from interview_coder.utils.errors import ErrorKind


class RunEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    run_id: str
    queue_kind: QueueKind
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )


class ProgressEvent(RunEvent):
    event_type: Literal["progress"] = "progress"
    message: str
    percent: int = Field(ge=0, le=100)


class ExtractionSucceededEvent(RunEvent):
    event_type: Literal["extraction_succeeded"] = "extraction_succeeded"
    problem_info: ProblemInfo


class RunSucceededEvent(RunEvent):
    event_type: Literal["run_succeeded"] = "run_succeeded"
    result: SolutionResult


class RunFailedEvent(RunEvent):
    event_type: Literal["run_failed"] = "run_failed"
    error_kind: ErrorKind
    message: str


class RunCancelledEvent(RunEvent):
    event_type: Literal["run_cancelled"] = "run_cancelled"


PipelineEvent = Union[
    ProgressEvent,
    ExtractionSucceededEvent,
    RunSucceededEvent,
    RunFailedEvent,
    RunCancelledEvent,
]
