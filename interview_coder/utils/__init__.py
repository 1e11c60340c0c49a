"""Utility modules for interview-coder.

- **errors** -- exception hierarchy rooted at InterviewCoderError, each
  class tagged with the normalized ErrorKind reported to callers.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **cancellation** -- the per-run CancellationToken threaded into adapter
  calls.
- **media** -- image MIME detection from magic bytes.
"""

from interview_coder.utils.cancellation import CancellationToken
from interview_coder.utils.errors import (
    ConfigurationError,
    ErrorKind,
    InterviewCoderError,
    InvalidImageError,
    MissingProblemInfoError,
    NoImagesError,
    NotConfiguredError,
    OperationCancelledError,
    ParseError,
    PipelineError,
    ProviderCallError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
    UnsupportedCapabilityError,
    error_kind_of,
)
from interview_coder.utils.logging import configure_logging, get_logger
from interview_coder.utils.media import detect_media_type

__all__ = [
    "CancellationToken",
    "ConfigurationError",
    "ErrorKind",
    "InterviewCoderError",
    "InvalidImageError",
    "MissingProblemInfoError",
    "NoImagesError",
    "NotConfiguredError",
    "OperationCancelledError",
    "ParseError",
    "PipelineError",
    "ProviderCallError",
    "RateLimitError",
    "ServerError",
    "UnauthorizedError",
    "UnsupportedCapabilityError",
    "configure_logging",
    "detect_media_type",
    "error_kind_of",
    "get_logger",
]
