"""Unit tests for the prompt template registry."""

from __future__ import annotations

import pytest

from interview_coder.models.problem import InterviewMode, ProblemInfo
from interview_coder.prompts.registry import available_modes, get_templates


def _problem(**fields: str) -> ProblemInfo:
    return ProblemInfo(mode=InterviewMode.CODING, fields=fields)


class TestGetTemplates:
    @pytest.mark.parametrize("mode", list(InterviewMode))
    def test_every_mode_registered(self, mode: InterviewMode) -> None:
        templates = get_templates(mode.value)
        assert templates.mode is mode
        assert templates.extraction_fields
        assert templates.debug_sections

    @pytest.mark.parametrize("mode", ["", None, "unknown", "Quantum"])
    def test_unknown_mode_falls_back_to_coding(self, mode: str | None) -> None:
        assert get_templates(mode).mode is InterviewMode.CODING


class TestExtractionPrompts:
    def test_system_prompt_lists_fields(self) -> None:
        prompt = get_templates("coding").extraction_system_prompt

        assert "problem_statement, constraints, example_input, example_output" in prompt
        assert "JSON" in prompt

    def test_user_prompt_names_language(self) -> None:
        assert "Preferred coding language is rust." in (
            get_templates("coding").extraction_user_prompt("rust")
        )


class TestSolutionPrompt:
    def test_includes_problem_and_format(self) -> None:
        prompt = get_templates("coding").solution_prompt(
            _problem(problem_statement="Sum two numbers", constraints="small ints"), "python"
        )

        assert "PROBLEM STATEMENT:\nSum two numbers" in prompt
        assert "CONSTRAINTS:\nsmall ints" in prompt
        assert "No example input provided." in prompt
        assert "LANGUAGE: python" in prompt
        assert "1. Code: A clean, optimized implementation in python" in prompt
        assert "Time complexity: O(X)" in prompt

    def test_missing_statement_has_placeholder(self) -> None:
        prompt = get_templates("coding").solution_prompt(_problem(), "python")
        assert "PROBLEM STATEMENT:\nNot provided." in prompt


class TestDebugPrompts:
    def test_system_prompt_lists_section_headers(self) -> None:
        prompt = get_templates("coding").debug_system_prompt("java")

        for title in (
            "Issues Identified",
            "Specific Improvements and Corrections",
            "Optimizations",
            "Explanation of Changes Needed",
            "Key Points",
        ):
            assert f"### {title}" in prompt
        assert "```java" in prompt

    def test_user_prompt_quotes_statement(self) -> None:
        prompt = get_templates("coding").debug_user_prompt(
            _problem(problem_statement="Sum two numbers"), "go"
        )

        assert '"Sum two numbers" in go' in prompt
        assert "1. What issues you found in my code" in prompt

    def test_certification_uses_question_text(self) -> None:
        templates = get_templates("certification")
        prompt = templates.debug_user_prompt(
            ProblemInfo(
                mode=InterviewMode.CERTIFICATION, fields={"question_text": "Which port is SSH?"}
            ),
            "python",
        )

        assert "Which port is SSH?" in prompt
        assert "### Answer Analysis" in templates.debug_system_prompt()


def test_available_modes_in_display_order() -> None:
    modes = available_modes()

    assert [mode["id"] for mode in modes] == [mode.value for mode in InterviewMode]
    assert modes[0] == {
        "id": "coding",
        "name": "Coding Algorithms",
        "description": "Standard coding algorithm problems",
    }
