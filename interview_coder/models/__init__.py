"""Pydantic v2 data models for interview-coder.

- **messages** -- provider-neutral request/response wire shapes.
- **images** -- captured screenshots handed in by an image source.
- **problem** -- interview modes, ProblemInfo and SolutionResult.
- **pipeline** -- queue kinds, the run state machine and run outcomes.
- **events** -- progress/result/error/cancel events for an event sink.
- **config** -- the AppConfig record held by the config store.
"""

from interview_coder.models.config import AppConfig, ProviderConfig
from interview_coder.models.events import (
    ExtractionSucceededEvent,
    PipelineEvent,
    ProgressEvent,
    RunCancelledEvent,
    RunEvent,
    RunFailedEvent,
    RunSucceededEvent,
)
from interview_coder.models.images import CapturedImage
from interview_coder.models.messages import (
    ImagePart,
    ModelMessage,
    ModelResponse,
    RequestOptions,
    Role,
    TextPart,
    TokenUsage,
)
from interview_coder.models.pipeline import PipelineSession, QueueKind, RunOutcome, RunState
from interview_coder.models.problem import InterviewMode, ProblemInfo, SolutionResult

__all__ = [
    "AppConfig",
    "CapturedImage",
    "ExtractionSucceededEvent",
    "ImagePart",
    "InterviewMode",
    "ModelMessage",
    "ModelResponse",
    "PipelineEvent",
    "PipelineSession",
    "ProblemInfo",
    "ProgressEvent",
    "ProviderConfig",
    "QueueKind",
    "RequestOptions",
    "Role",
    "RunCancelledEvent",
    "RunEvent",
    "RunFailedEvent",
    "RunOutcome",
    "RunState",
    "RunSucceededEvent",
    "SolutionResult",
    "TextPart",
    "TokenUsage",
]
