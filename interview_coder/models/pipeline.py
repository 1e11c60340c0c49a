"""Pipeline session state for the processing orchestrator.

Defines the per-queue state machine and the immutable session record.
State transitions produce new :class:`PipelineSession` instances via
:meth:`PipelineSession.advance`, which rejects edges the machine does not
allow.

Primary queue::

    IDLE -> EXTRACTING -> SOLVING -> SUCCEEDED
    IDLE | EXTRACTING | SOLVING -> CANCELLED | FAILED

Secondary (debug) queue::

    IDLE -> DEBUGGING -> SUCCEEDED | FAILED | CANCELLED
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from interview_coder.models.problem import ProblemInfo, SolutionResult
from interview_coder.utils.errors import ErrorKind, PipelineError


class QueueKind(str, Enum):  # noqa: UP042  (StrEnum requires Python 3.11+)
    """Processing lane: the initial problem or a debug/follow-up pass."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


class RunState(str, Enum):  # noqa: UP042  (StrEnum requires Python 3.11+)
    IDLE = "IDLE"
    EXTRACTING = "EXTRACTING"
    SOLVING = "SOLVING"
    DEBUGGING = "DEBUGGING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({RunState.SUCCEEDED, RunState.FAILED, RunState.CANCELLED})

_TRANSITIONS: dict[QueueKind, dict[RunState, frozenset[RunState]]] = {
    QueueKind.PRIMARY: {
        RunState.IDLE: frozenset({RunState.EXTRACTING, RunState.FAILED, RunState.CANCELLED}),
        RunState.EXTRACTING: frozenset({RunState.SOLVING, RunState.FAILED, RunState.CANCELLED}),
        RunState.SOLVING: frozenset({RunState.SUCCEEDED, RunState.FAILED, RunState.CANCELLED}),
    },
    QueueKind.SECONDARY: {
        RunState.IDLE: frozenset({RunState.DEBUGGING, RunState.FAILED, RunState.CANCELLED}),
        RunState.DEBUGGING: frozenset({RunState.SUCCEEDED, RunState.FAILED, RunState.CANCELLED}),
    },
}


def can_transition(queue_kind: QueueKind, current: RunState, target: RunState) -> bool:
    return target in _TRANSITIONS[queue_kind].get(current, frozenset())


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class PipelineSession(BaseModel):
    """Immutable snapshot of one run on one queue."""

    model_config = ConfigDict(frozen=True)

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    queue_kind: QueueKind
    state: RunState = RunState.IDLE
    has_debugged: bool = False
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: datetime | None = None
    error_kind: ErrorKind | None = None
    error_message: str = ""
    raw_response: str = ""

    @property
    def is_active(self) -> bool:
        return not self.state.is_terminal

    def advance(self, state: RunState, **updates: object) -> PipelineSession:
        """Return a copy in *state*, validating the edge first.

        Raises
        ------
        PipelineError
            If the state machine does not allow ``self.state -> state``.
        """
        if not can_transition(self.queue_kind, self.state, state):
            raise PipelineError(
                f"Invalid {self.queue_kind.value} transition "
                f"{self.state.value} -> {state.value}"
            )
        changes: dict[str, object] = {"state": state, **updates}
        if state.is_terminal:
            changes.setdefault("finished_at", _utcnow())
        return self.model_copy(update=changes)


class RunOutcome(BaseModel):
    """Value the task of a run resolves to: the per-run result channel."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    queue_kind: QueueKind
    state: RunState
    problem_info: ProblemInfo | None = None
    result: SolutionResult | None = None
    error_kind: ErrorKind | None = None
    error_message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.SUCCEEDED

    @property
    def cancelled(self) -> bool:
        return self.state == RunState.CANCELLED
