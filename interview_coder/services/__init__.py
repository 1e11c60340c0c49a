"""Pure services used by the orchestrator: response parsing."""

from interview_coder.services.response_parser import (
    MODE_RULES,
    ResponseParser,
    normalize_complexity,
    split_items,
)

__all__ = ["MODE_RULES", "ResponseParser", "normalize_complexity", "split_items"]
