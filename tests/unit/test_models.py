"""Unit tests for the pydantic models and the run state machine."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from interview_coder.models.config import AppConfig
from interview_coder.models.events import ProgressEvent
from interview_coder.models.images import CapturedImage
from interview_coder.models.messages import ImagePart, ModelMessage, Role, TextPart
from interview_coder.models.pipeline import PipelineSession, QueueKind, RunState
from interview_coder.models.problem import InterviewMode, ProblemInfo, SolutionResult
from interview_coder.utils.errors import (
    ErrorKind,
    InterviewCoderError,
    MissingProblemInfoError,
    OperationCancelledError,
    PipelineError,
    RateLimitError,
    error_kind_of,
)
from interview_coder.utils.media import detect_media_type

# ======================================================================
# Interview modes and problem records
# ======================================================================


class TestInterviewMode:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("coding", InterviewMode.CODING),
            ("System Design", InterviewMode.SYSTEM_DESIGN),
            ("system-design", InterviewMode.SYSTEM_DESIGN),
            ("SQL", InterviewMode.SQL),
            ("", InterviewMode.CODING),
            (None, InterviewMode.CODING),
            ("astrology", InterviewMode.CODING),
        ],
    )
    def test_resolve(self, raw: str | None, expected: InterviewMode) -> None:
        assert InterviewMode.resolve(raw) is expected


class TestProblemInfo:
    def test_from_record_flattens_values(self) -> None:
        problem = ProblemInfo.from_record(
            {"problem_statement": " Sum ", "examples": ["1 2", "3 4"], "n": 5, "ok": True},
            InterviewMode.CODING,
        )

        assert problem.problem_statement == "Sum"
        assert problem.get("examples") == "1 2\n3 4"
        assert problem.get("n") == "5"
        assert problem.get("ok") == "true"
        assert problem.get("missing", "fallback") == "fallback"

    def test_is_frozen(self) -> None:
        problem = ProblemInfo(fields={"problem_statement": "x"})
        with pytest.raises(ValidationError):
            problem.mode = InterviewMode.SQL  # type: ignore[misc]


class TestSolutionResult:
    def test_to_payload_skips_empty_extras(self) -> None:
        result = SolutionResult(
            code="print(1)",
            thoughts=["simple"],
            time_complexity="O(1) - constant",
            space_complexity="O(1) - constant",
            extras={"diagram": "", "scalability": "shard"},
        )
        payload = result.to_payload()

        assert payload["code"] == "print(1)"
        assert payload["scalability"] == "shard"
        assert "diagram" not in payload
        assert "is_debug" not in payload

    def test_debug_payload_flagged(self) -> None:
        payload = SolutionResult(code="x", is_debug=True).to_payload()
        assert payload["is_debug"] is True


# ======================================================================
# Messages and images
# ======================================================================


class TestMessages:
    def test_user_message_mixes_parts(self, png_bytes: bytes) -> None:
        message = ModelMessage.user("look at this", ImagePart.from_bytes(png_bytes), "thanks")

        assert message.role == Role.USER
        assert isinstance(message.content[0], TextPart)
        assert message.has_images is True
        assert message.text == "look at this\n\nthanks"

    def test_image_part_data_uri(self, png_bytes: bytes) -> None:
        part = ImagePart(data=png_bytes)
        assert part.mime == "image/png"
        assert part.data_uri.startswith("data:image/png;base64,")

    def test_captured_image_to_part(self, captured_image: CapturedImage) -> None:
        part = captured_image.to_part()
        assert part.data == captured_image.data
        assert part.media_type == "image/png"


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"\x89PNG\r\n\x1a\n0000", "image/png"),
        (b"\xff\xd8\xff\xe0", "image/jpeg"),
        (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
        (b"GIF89a", "image/gif"),
        (b"unknown", "image/png"),
    ],
)
def test_detect_media_type(data: bytes, expected: str) -> None:
    assert detect_media_type(data) == expected


# ======================================================================
# Run state machine
# ======================================================================


class TestPipelineSession:
    def test_primary_happy_path(self) -> None:
        session = PipelineSession(queue_kind=QueueKind.PRIMARY)
        session = session.advance(RunState.EXTRACTING).advance(RunState.SOLVING)
        done = session.advance(RunState.SUCCEEDED)

        assert done.state == RunState.SUCCEEDED
        assert done.finished_at is not None
        assert done.run_id == session.run_id
        assert session.finished_at is None

    def test_secondary_path(self) -> None:
        session = PipelineSession(queue_kind=QueueKind.SECONDARY).advance(RunState.DEBUGGING)
        done = session.advance(RunState.SUCCEEDED, has_debugged=True)
        assert done.has_debugged is True

    @pytest.mark.parametrize(
        ("queue_kind", "path"),
        [
            (QueueKind.PRIMARY, [RunState.SOLVING]),
            (QueueKind.PRIMARY, [RunState.DEBUGGING]),
            (QueueKind.SECONDARY, [RunState.EXTRACTING]),
            (QueueKind.PRIMARY, [RunState.CANCELLED, RunState.FAILED]),
        ],
    )
    def test_invalid_transitions(self, queue_kind: QueueKind, path: list[RunState]) -> None:
        session = PipelineSession(queue_kind=queue_kind)
        with pytest.raises(PipelineError):
            for state in path:
                session = session.advance(state)

    def test_failure_records_error(self) -> None:
        failed = PipelineSession(queue_kind=QueueKind.PRIMARY).advance(
            RunState.FAILED, error_kind=ErrorKind.RATE_LIMITED, error_message="slow down"
        )
        assert failed.state.is_terminal is True
        assert failed.is_active is False
        assert failed.error_kind == ErrorKind.RATE_LIMITED


def test_progress_percent_bounds() -> None:
    with pytest.raises(ValidationError):
        ProgressEvent(run_id="r", queue_kind=QueueKind.PRIMARY, message="x", percent=101)


# ======================================================================
# Config record and errors
# ======================================================================


class TestAppConfig:
    def test_provider_ids_filled_from_keys(self) -> None:
        config = AppConfig(providers={"openai": {"api_key": " sk-x "}})
        provider = config.provider_config("openai")

        assert provider.provider_id == "openai"
        assert provider.api_key == "sk-x"

    def test_unknown_provider_config_is_empty(self) -> None:
        provider = AppConfig().provider_config("ollama")
        assert provider.provider_id == "ollama"
        assert provider.api_key == ""

    def test_blank_language_defaults_to_python(self) -> None:
        assert AppConfig(language="  ").language == "python"

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(request_timeout_sec=0)


class TestErrors:
    def test_provider_prefix_in_str(self) -> None:
        exc = RateLimitError(provider_name="openai")
        assert str(exc) == "[openai] Rate limit exceeded"
        assert exc.status_code == 429

    def test_error_kind_of(self) -> None:
        assert error_kind_of(MissingProblemInfoError()) == ErrorKind.NO_PROBLEM_INFO
        assert error_kind_of(ValueError("x")) == ErrorKind.UNKNOWN

    def test_cancellation_is_not_a_failure(self) -> None:
        assert not issubclass(OperationCancelledError, InterviewCoderError)
