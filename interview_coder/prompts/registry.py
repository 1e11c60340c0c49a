"""Prompt Template Registry: interview mode -> extraction/solution/debug prompts.

Lookup never fails.  Any mode string the registry does not recognize,
including an empty one, resolves to the coding templates.
"""

from __future__ import annotations

from dataclasses import dataclass

from interview_coder.models.problem import InterviewMode, ProblemInfo
from interview_coder.prompts.templates import (
    EXTRACTION_USER_PROMPT,
    MODE_DEFINITIONS,
    SOLUTION_SYSTEM_PROMPT,
    DebugSection,
    ModeDefinition,
)


@dataclass(frozen=True)
class PromptTemplates:
    """Concrete prompts for one mode, built from its :class:`ModeDefinition`."""

    definition: ModeDefinition

    @property
    def mode(self) -> InterviewMode:
        return self.definition.mode

    @property
    def extraction_fields(self) -> tuple[str, ...]:
        return self.definition.extraction_fields

    @property
    def debug_sections(self) -> tuple[DebugSection, ...]:
        return self.definition.debug_sections

    # ------------------------------------------------------------------
    # Extraction pass
    # ------------------------------------------------------------------

    @property
    def extraction_system_prompt(self) -> str:
        d = self.definition
        parts = [
            d.assistant_role,
            f"Analyze the screenshots of the {d.subject} and extract all relevant information.",
        ]
        if d.extraction_note:
            parts.append(d.extraction_note)
        parts.append(
            "Return the information in JSON format with these fields: "
            f"{', '.join(d.extraction_fields)}."
        )
        parts.append("Just return the structured JSON without any other text.")
        return " ".join(parts)

    def extraction_user_prompt(self, language: str) -> str:
        return EXTRACTION_USER_PROMPT.format(language=language)

    # ------------------------------------------------------------------
    # Solution pass
    # ------------------------------------------------------------------

    @property
    def solution_system_prompt(self) -> str:
        return SOLUTION_SYSTEM_PROMPT

    def solution_prompt(self, problem: ProblemInfo, language: str) -> str:
        d = self.definition
        lines = [f"Generate a detailed solution for the following {d.subject}:", ""]
        for field in d.problem_fields:
            lines.append(f"{field.heading}:")
            lines.append(problem.get(field.key) or field.fallback or "Not provided.")
            lines.append("")
        lines.append(f"LANGUAGE: {language}")
        lines.append("")
        lines.append("I need the response in the following format:")
        for index, item in enumerate(d.answer_format, start=1):
            lines.append(f"{index}. {item.format(language=language)}")
        lines.append("")
        lines.append(d.closing)
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Debug pass
    # ------------------------------------------------------------------

    def debug_system_prompt(self, language: str = "python") -> str:
        d = self.definition
        lines = [
            d.debug_role,
            "",
            "Your response MUST follow this exact structure with these section headers "
            "(use ### for headers):",
        ]
        for section in d.debug_sections:
            lines.append(f"### {section.title}")
            lines.append(f"- {section.instruction}")
            lines.append("")
        if d.code_fence_hint:
            hint = d.code_fence_hint.format(language=language)
            lines.append(
                "If you include code examples, use proper markdown code blocks with "
                f"language specification (e.g. ```{hint})."
            )
        else:
            lines.append("Ensure your explanations are clear, accurate, and educational.")
        return "\n".join(lines)

    def debug_user_prompt(self, problem: ProblemInfo, language: str) -> str:
        d = self.definition
        statement = problem.get(d.statement_field) or problem.problem_statement
        lines = [
            d.debug_request.format(statement=statement, language=language)
            + " Please provide a detailed analysis with:"
        ]
        for index, ask in enumerate(d.debug_asks, start=1):
            lines.append(f"{index}. {ask}")
        return "\n".join(lines)


_TEMPLATES: dict[InterviewMode, PromptTemplates] = {
    mode: PromptTemplates(definition) for mode, definition in MODE_DEFINITIONS.items()
}


def get_templates(mode: str | InterviewMode | None) -> PromptTemplates:
    """Return the templates for *mode*, falling back to coding."""
    return _TEMPLATES[InterviewMode.resolve(mode)]


def available_modes() -> list[dict[str, str]]:
    """Return ``{"id", "name", "description"}`` for every mode, in display order."""
    return [
        {"id": d.mode.value, "name": d.name, "description": d.description}
        for d in MODE_DEFINITIONS.values()
    ]
