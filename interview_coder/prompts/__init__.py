"""Prompt Template Registry for the six interview modes."""

from interview_coder.prompts.registry import PromptTemplates, available_modes, get_templates
from interview_coder.prompts.templates import DebugSection, ModeDefinition, ProblemField

__all__ = [
    "DebugSection",
    "ModeDefinition",
    "ProblemField",
    "PromptTemplates",
    "available_modes",
    "get_templates",
]
