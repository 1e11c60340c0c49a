"""Custom exception hierarchy for interview-coder.

All application exceptions inherit from :class:`InterviewCoderError`, which
carries an optional ``provider_name`` so error handlers can identify which
model vendor (e.g. "openai", "claude", "ollama") caused the failure, and an
:class:`ErrorKind` tag that is the only thing the orchestrator and its
callers ever branch on.

The hierarchy is organized by where the failure is detected:

    InterviewCoderError  (base -- catch-all for any interview-coder error)
    +-- NotConfiguredError          (no usable credential)
    +-- ConfigurationError          (unknown provider / invalid config)
    +-- UnsupportedCapabilityError  (vision on a text-only model)
    +-- ProviderCallError           (vendor call failed, unclassified)
    |   +-- UnauthorizedError       (401/403)
    |   +-- RateLimitError          (429)
    |   +-- ServerError             (5xx, timeouts, connection failures)
    +-- ParseError                  (extraction output not recoverable)
    +-- PipelineError               (orchestration preconditions)
        +-- NoImagesError
        +-- InvalidImageError
        +-- MissingProblemInfoError

Vendor SDK exceptions are translated into this hierarchy inside each
adapter, so nothing above the provider layer ever imports ``openai`` or
``anthropic`` to catch errors.

:class:`OperationCancelledError` sits outside the hierarchy on purpose: a
cancelled run is not a failed run and must never be reported as one.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):  # noqa: UP042  (StrEnum requires Python 3.11+)
    """Normalized failure categories reported in ``RunFailedEvent``."""

    NOT_CONFIGURED = "NotConfigured"
    CONFIGURATION_ERROR = "ConfigurationError"
    UNAUTHORIZED = "Unauthorized"
    RATE_LIMITED = "RateLimited"
    SERVER_ERROR = "ServerError"
    UNSUPPORTED_CAPABILITY = "UnsupportedCapability"
    PARSE_ERROR = "ParseError"
    NO_IMAGES = "NoImages"
    NO_PROBLEM_INFO = "NoProblemInfo"
    UNKNOWN = "Unknown"


class InterviewCoderError(Exception):
    """Base exception for all interview-coder errors.

    Every subclass carries a human-readable ``message``, an optional
    ``provider_name`` and a class-level :class:`ErrorKind`.  The
    ``__str__`` method prefixes the provider name in brackets for log
    output, e.g. ``[openai] Rate limit exceeded``.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class NotConfiguredError(InterviewCoderError):
    """Raised when an adapter has no usable credential."""

    kind = ErrorKind.NOT_CONFIGURED

    def __init__(
        self,
        message: str = "API key not configured. Please add your API key in settings.",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(InterviewCoderError):
    """Raised when configuration is invalid, e.g. an unknown provider id."""

    kind = ErrorKind.CONFIGURATION_ERROR

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnsupportedCapabilityError(InterviewCoderError):
    """Raised when vision is requested on a model without image support.

    Always raised before any network interaction.
    """

    kind = ErrorKind.UNSUPPORTED_CAPABILITY

    def __init__(
        self,
        message: str = "The selected model does not support image input",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Provider call errors
# ---------------------------------------------------------------------------

class ProviderCallError(InterviewCoderError):
    """Raised when a vendor API call fails for an unclassified reason."""

    kind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str = "Model API call failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._status_code = status_code

    @property
    def status_code(self) -> int | None:
        return self._status_code


class UnauthorizedError(ProviderCallError):
    """Raised on 401/403 responses. Callers should prompt for a new key."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(
        self,
        message: str = "Invalid API key",
        provider_name: str | None = None,
        status_code: int | None = 401,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class RateLimitError(ProviderCallError):
    """Raised when the provider rate limit is exceeded.

    No automatic retry happens anywhere in the core; retrying is a
    caller decision.
    """

    kind = ErrorKind.RATE_LIMITED

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
        status_code: int | None = 429,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class ServerError(ProviderCallError):
    """Raised on 5xx responses, timeouts and connection failures (transient)."""

    kind = ErrorKind.SERVER_ERROR

    def __init__(
        self,
        message: str = "Model provider server error",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


# ---------------------------------------------------------------------------
# Parsing / orchestration errors
# ---------------------------------------------------------------------------

class ParseError(InterviewCoderError):
    """Raised when model output cannot be turned into the expected record.

    The raw response is kept for diagnostics.
    """

    kind = ErrorKind.PARSE_ERROR

    def __init__(
        self,
        message: str = (
            "Failed to parse problem information. "
            "Please try again or use clearer screenshots."
        ),
        provider_name: str | None = None,
        raw_response: str = "",
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._raw_response = raw_response

    @property
    def raw_response(self) -> str:
        return self._raw_response


class PipelineError(InterviewCoderError):
    """Raised when a run cannot start or proceed (precondition failure)."""

    kind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str = "Pipeline orchestration failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NoImagesError(PipelineError):
    """Raised when a run is started with an empty image batch."""

    kind = ErrorKind.NO_IMAGES

    def __init__(
        self,
        message: str = "No screenshots to process",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidImageError(PipelineError):
    """Raised by an image source for unreadable, oversized or unsupported files."""

    def __init__(
        self,
        message: str = "Unsupported or unreadable image",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MissingProblemInfoError(PipelineError):
    """Raised when a debug run starts before any problem was extracted."""

    kind = ErrorKind.NO_PROBLEM_INFO

    def __init__(
        self,
        message: str = "No problem information available. Process the problem screenshots first.",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------

class OperationCancelledError(Exception):
    """Raised when an in-flight call is aborted through its cancellation token."""

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message)


def error_kind_of(exc: BaseException) -> ErrorKind:
    """Return the normalized :class:`ErrorKind` for any exception."""
    if isinstance(exc, InterviewCoderError):
        return exc.kind
    return ErrorKind.UNKNOWN
