"""Interview modes and the two artifacts of a run.

:class:`ProblemInfo` is produced by the extraction pass and is immutable
afterwards; :class:`SolutionResult` is the terminal artifact of a solution
or debug pass.  Both are frozen pydantic models; the orchestrator replaces
them wholesale rather than mutating them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class InterviewMode(str, Enum):  # noqa: UP042  (StrEnum requires Python 3.11+)
    """Problem category selecting prompt templates and parsing rules."""

    CODING = "coding"
    SYSTEM_DESIGN = "system_design"
    REACT = "react"
    SQL = "sql"
    LINUX = "linux"
    CERTIFICATION = "certification"

    @classmethod
    def resolve(cls, value: str | InterviewMode | None) -> InterviewMode:
        """Map any input to a mode; unrecognized values become ``CODING``."""
        if isinstance(value, InterviewMode):
            return value
        normalized = (value or "").strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(normalized)
        except ValueError:
            return cls.CODING


def _flatten(value: Any) -> str:
    """Render one extracted JSON value as a display string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return "\n".join(item for item in (_flatten(v) for v in value) if item)
    if isinstance(value, dict):
        return "\n".join(f"{k}: {_flatten(v)}" for k, v in value.items())
    return str(value)


class ProblemInfo(BaseModel):
    """Named string fields extracted from the problem screenshots."""

    model_config = ConfigDict(frozen=True)

    mode: InterviewMode = InterviewMode.CODING
    fields: dict[str, str] = Field(default_factory=dict)
    raw_response: str = ""

    @classmethod
    def from_record(
        cls, record: dict[str, Any], mode: InterviewMode, raw_response: str = ""
    ) -> ProblemInfo:
        """Build from a decoded JSON object, flattening lists and nested objects."""
        fields = {str(key): _flatten(value) for key, value in record.items()}
        return cls(mode=mode, fields=fields, raw_response=raw_response)

    def get(self, name: str, default: str = "") -> str:
        return self.fields.get(name) or default

    @property
    def problem_statement(self) -> str:
        return self.get("problem_statement") or self.get("question_text")


class SolutionResult(BaseModel):
    """Structured solution (or debug feedback) for one problem."""

    model_config = ConfigDict(frozen=True)

    mode: InterviewMode = InterviewMode.CODING
    code: str
    thoughts: list[str] = Field(default_factory=list)
    time_complexity: str = ""
    space_complexity: str = ""
    extras: dict[str, str] = Field(default_factory=dict)
    is_debug: bool = False
    raw_response: str = ""

    def to_payload(self) -> dict[str, Any]:
        """Flatten to the dictionary shape rendered by UIs and the JSON CLI."""
        payload: dict[str, Any] = {
            "mode": self.mode.value,
            "code": self.code,
            "thoughts": list(self.thoughts),
            "time_complexity": self.time_complexity,
            "space_complexity": self.space_complexity,
        }
        for key, value in self.extras.items():
            if value:
                payload[key] = value
        if self.is_debug:
            payload["is_debug"] = True
        return payload
