"""Heuristic extraction of structured fields from free-form model output.

Models are asked for a fixed layout but rarely follow it exactly: headings
arrive as ``### Time Complexity``, ``**Time complexity:**``, ``3. Time
complexity -`` or inline in a sentence; code may or may not be fenced; a
section may be missing entirely.  Every rule here is therefore a fallback
chain rather than one regular expression:

    code        first fenced block  ->  whole response verbatim
    section     line-anchored heading  ->  inline ``Label:``  ->  absent
    items       bullet/numbered items  ->  non-empty lines  ->  fallback sentence
    complexity  labelled text (normalized)  ->  deterministic default

Only two things ever raise :class:`ParseError`: an extraction response that
is not a JSON object after fence stripping, and a solution/debug response
with no text at all.  A missing optional section never does.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from interview_coder.models.problem import InterviewMode, ProblemInfo, SolutionResult
from interview_coder.prompts.registry import get_templates
from interview_coder.utils.errors import ParseError
from interview_coder.utils.logging import get_logger

# ---------------------------------------------------------------------------
# Per-mode rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SectionRule:
    key: str
    labels: tuple[str, ...]


@dataclass(frozen=True)
class ComplexityRule:
    """How to read one complexity-like annotation.

    A rule without labels always yields ``default``.  With
    ``require_notation`` set, text lacking an order-notation token gets one
    synthesized, and a bare notation gets a ``" - "`` separator.
    """

    labels: tuple[str, ...]
    default: str
    require_notation: bool = True


@dataclass(frozen=True)
class ModeRules:
    thoughts: tuple[SectionRule, ...]
    fallback_thought: str
    time: ComplexityRule
    space: ComplexityRule
    extras: tuple[SectionRule, ...] = field(default_factory=tuple)


CODE_LABELS = (
    "Code", "Solution Code", "Implementation", "SQL Query", "Query",
    "Solution Commands", "Commands",
)

_TIME_LABELS = ("Time complexity", "Runtime complexity")
_SPACE_LABELS = ("Space complexity", "Memory complexity", "Auxiliary space")
_EXPLANATION_LABELS = ("Explanation", "Step-by-step explanation", "How it works")

DEFAULT_TIME_COMPLEXITY = (
    "O(n) - Linear time complexity because the input is processed in a single pass. "
    "Each element is handled a constant number of times."
)
DEFAULT_SPACE_COMPLEXITY = (
    "O(n) - Linear space complexity because auxiliary storage grows with the input. "
    "In the worst case every element is stored once."
)
MISSING_EXPLANATION = "No further explanation was provided."

DEBUG_COMPLEXITY = "N/A - Debug mode"
DEBUG_FALLBACK_THOUGHT = "Debug analysis based on your screenshots"
EMPTY_SOLUTION_CODE = "// No solution text was returned by the model"


def _not_applicable(text: str) -> ComplexityRule:
    return ComplexityRule(labels=(), default=text, require_notation=False)


MODE_RULES: dict[InterviewMode, ModeRules] = {
    InterviewMode.CODING: ModeRules(
        thoughts=(
            SectionRule(
                "thoughts",
                ("Your Thoughts", "Thoughts", "Key Insights", "Reasoning", "Approach",
                 "Intuition", "Explanation"),
            ),
        ),
        fallback_thought="Solution approach based on efficiency and readability",
        time=ComplexityRule(_TIME_LABELS, DEFAULT_TIME_COMPLEXITY),
        space=ComplexityRule(_SPACE_LABELS, DEFAULT_SPACE_COMPLEXITY),
    ),
    InterviewMode.SYSTEM_DESIGN: ModeRules(
        thoughts=(SectionRule("components", ("Key Components", "Major Components", "Components")),),
        fallback_thought="System design approach based on requirements",
        time=_not_applicable("N/A for system design"),
        space=_not_applicable("N/A for system design"),
        extras=(
            SectionRule(
                "architecture",
                ("System Architecture", "High-level Architecture", "High-level design",
                 "Architecture"),
            ),
            SectionRule("data_model", ("Data Model", "Data Schema", "Storage")),
            SectionRule("scalability", ("Scalability Considerations", "Scalability")),
            SectionRule("tradeoffs", ("Tradeoffs", "Trade-offs", "Trade offs")),
        ),
    ),
    InterviewMode.REACT: ModeRules(
        thoughts=(
            SectionRule("component_structure", ("Component Structure", "Component Hierarchy")),
            SectionRule("key_features", ("Key Features", "Features")),
        ),
        fallback_thought="React component design based on requirements",
        time=_not_applicable("N/A for React components"),
        space=_not_applicable("N/A for React components"),
        extras=(
            SectionRule("component_structure", ("Component Structure", "Component Hierarchy")),
            SectionRule("state_management", ("State Management", "State Handling")),
            SectionRule("key_features", ("Key Features", "Features")),
            SectionRule("potential_improvements", ("Potential Improvements", "Improvements")),
        ),
    ),
    InterviewMode.SQL: ModeRules(
        thoughts=(SectionRule("explanation", _EXPLANATION_LABELS),),
        fallback_thought="SQL query design based on requirements",
        time=ComplexityRule(
            ("Performance Considerations", "Performance"),
            "Depends on database indexes and query execution plan",
            require_notation=False,
        ),
        space=_not_applicable("Depends on result set size and temporary tables used"),
        extras=(SectionRule("alternatives", ("Alternative Approaches", "Alternatives")),),
    ),
    InterviewMode.LINUX: ModeRules(
        thoughts=(SectionRule("explanation", _EXPLANATION_LABELS),),
        fallback_thought="Linux commands based on requirements",
        time=_not_applicable("N/A for Linux commands"),
        space=_not_applicable("N/A for Linux commands"),
        extras=(
            SectionRule("commands", ("Solution Commands", "Commands", "Command")),
            SectionRule("verification", ("Verification", "Verify")),
            SectionRule(
                "alternatives", ("Alternative Approaches", "Alternative Commands", "Alternatives")
            ),
        ),
    ),
    InterviewMode.CERTIFICATION: ModeRules(
        thoughts=(SectionRule("explanation", ("Explanation", "Rationale", "Reasoning")),),
        fallback_thought="Certification answer based on knowledge",
        time=_not_applicable("N/A for certification exam"),
        space=_not_applicable("N/A for certification exam"),
        extras=(
            SectionRule("answer", ("Correct Answer", "Answer")),
            SectionRule("additional_context", ("Additional Context", "Context")),
        ),
    ),
}

_DEBUG_SYNONYMS: dict[str, tuple[str, ...]] = {
    "key_points": ("Key Points", "Key Takeaways", "Summary"),
}


# ---------------------------------------------------------------------------
# Text primitives
# ---------------------------------------------------------------------------

# Opening fence, optional info string, then body up to a closing fence of
# the same length, so a four-backtick fence may wrap code containing ```.
_FENCE_RE = re.compile(
    r"(?P<ticks>`{3,})(?!`)(?P<info>[^\n`]*)(?P<newline>\n?)(?P<body>.*?)(?P=ticks)", re.DOTALL
)
_MARKDOWN_HEADING_RE = re.compile(r"^[ \t]*#{1,6}[ \t]+\S", re.MULTILINE)
_BULLET_RE = re.compile(r"^\s*(?:[-*•+]|\d+[.)])\s+(.*\S)\s*$")
_NOTATION_RE = re.compile(r"(?<![A-Za-z])[OΘΩ]\s*\((?:[^()]|\([^()]*\))+\)")
_SEPARATOR_RE = re.compile(r"^\s*(?:[-–—:=]|because\b|since\b|as\b)", re.IGNORECASE)
_EMPHASIS_RE = re.compile(r"\*\*|__|`")


@dataclass(frozen=True)
class _Fence:
    start: int
    end: int
    body: str


def _find_fences(text: str) -> list[_Fence]:
    fences: list[_Fence] = []
    last_end = 0
    for match in _FENCE_RE.finditer(text):
        if match.group("newline"):
            body = match.group("body")
        else:
            # Single-line fence: everything between the backticks is code.
            body = match.group("info") + match.group("body")
        fences.append(_Fence(match.start(), match.end(), body))
        last_end = match.end()

    # An unclosed fence runs to the end of the response.
    dangling = text.find("```", last_end)
    if dangling != -1:
        newline = text.find("\n", dangling)
        body = text[newline + 1:] if newline != -1 else text[dangling + 3:]
        fences.append(_Fence(dangling, len(text), body))
    return fences


def _inside(position: int, fences: list[_Fence]) -> bool:
    return any(f.start <= position < f.end for f in fences)


def _clean_code(body: str) -> str:
    return body.strip("\r\n").rstrip()


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text)


def split_items(content: str) -> list[str]:
    """Split a section into bullet items, or into non-empty lines when unbulleted."""
    lines = _strip_fences(content).splitlines()
    bullets: list[str] = []
    for line in lines:
        match = _BULLET_RE.match(line)
        if match:
            bullets.append(match.group(1).strip())
    if bullets:
        return bullets
    return [line.strip() for line in lines if line.strip()]


def normalize_complexity(text: str, require_notation: bool = True) -> str:
    """Make a complexity statement read ``O(x) - explanation``.

    - no order notation: ``"O(n) - "`` is prefixed
    - notation not followed by a separator: rewritten as
      ``"<notation> - <rest>"``
    """
    text = " ".join(_EMPHASIS_RE.sub("", text).split())
    if not require_notation:
        return text

    match = _NOTATION_RE.search(text)
    if match is None:
        return f"O(n) - {text}" if text else DEFAULT_TIME_COMPLEXITY

    notation = match.group(0)
    if _SEPARATOR_RE.match(text[match.end():]) or re.search(r"\bbecause\b", text, re.I):
        return text

    rest = (text[: match.start()] + text[match.end():]).strip()
    rest = rest.lstrip(",;.)").strip()
    return f"{notation} - {rest or MISSING_EXPLANATION}"


# ---------------------------------------------------------------------------
# Heading matching
# ---------------------------------------------------------------------------

_PREFIX = (
    r"^[ \t]*(?P<hashes>\#{1,6}[ \t]*)?"
    r"(?P<num>\d+[.)][ \t]+)?"
    r"(?P<bullet>[-*•+][ \t]+)?"
    r"(?P<bold>\*\*|__)?[ \t]*"
)


def _alternation(labels: tuple[str, ...]) -> str:
    ordered = sorted(set(labels), key=len, reverse=True)
    return "|".join(
        r"[ \t]+".join(re.escape(word) for word in label.split()) for label in ordered
    )


@dataclass(frozen=True)
class _LabelMatcher:
    """Finds one section's heading by any of its synonyms."""

    with_colon: re.Pattern[str]
    bare: re.Pattern[str]
    inline: re.Pattern[str]
    loose: re.Pattern[str]

    @classmethod
    def build(cls, labels: tuple[str, ...]) -> _LabelMatcher:
        alt = _alternation(labels)
        head = _PREFIX + rf"(?:{alt})\b(?P<tail>[^\n:]{{0,40}}?)[ \t]*(?:\*\*|__)?[ \t]*"
        flags = re.IGNORECASE | re.MULTILINE
        return cls(
            with_colon=re.compile(head + r":(?:[ \t]*(?:\*\*|__))?[ \t]*", flags),
            bare=re.compile(head + r"$", flags),
            inline=re.compile(rf"\b(?:{alt})\b[^\n:]{{0,20}}?:[ \t]*", re.IGNORECASE),
            loose=re.compile(
                _PREFIX + rf"(?:{alt})\b(?:\*\*|__)?[ \t]*(?:[-–—=]|is\b)?[ \t]*(?=\S)", flags
            ),
        )

    def line_matches(self, text: str, fences: list[_Fence]) -> list[re.Match[str]]:
        found = [
            m for m in self.with_colon.finditer(text)
            if not _inside(m.start(), fences)
            # "- Time to look up: O(1)" is a list item, not a heading.
            and not (m.group("bullet") and m.group("tail").strip())
        ]
        for m in self.bare.finditer(text):
            if _inside(m.start(), fences):
                continue
            # A bare label line only counts when it is styled as a heading.
            styled = m.group("hashes") or m.group("bold")
            plain = not m.group("bullet") and not m.group("tail").strip()
            if styled or plain:
                found.append(m)
        return sorted(found, key=lambda m: m.start())

    def inline_matches(self, text: str, fences: list[_Fence]) -> list[re.Match[str]]:
        return [m for m in self.inline.finditer(text) if not _inside(m.start(), fences)]

    def find(self, text: str, fences: list[_Fence]) -> int | None:
        """Return where the content of the first occurrence starts.

        Tries, in order: a heading line (``Label:`` or a styled bare label),
        an inline ``Label:``, then a line starting with the label and no
        colon at all (``Time complexity is O(n)``).
        """
        for candidates in (
            self.line_matches(text, fences),
            self.inline_matches(text, fences),
            [m for m in self.loose.finditer(text) if not _inside(m.start(), fences)],
        ):
            if candidates:
                return candidates[0].end()
        return None


@lru_cache(maxsize=256)
def _matcher(labels: tuple[str, ...]) -> _LabelMatcher:
    return _LabelMatcher.build(labels)


class _Document:
    """A response plus its fence map, with section lookup by label set."""

    def __init__(self, text: str, known_labels: tuple[tuple[str, ...], ...]) -> None:
        self.text = text
        self.fences = _find_fences(text)
        self._known = known_labels

    @property
    def first_code_block(self) -> str | None:
        for fence in self.fences:
            code = _clean_code(fence.body)
            if code:
                return code
        return None

    def section(self, labels: tuple[str, ...], stop_at_fence: bool = False) -> str | None:
        """Return the text under the first heading matching *labels*.

        The section ends at the next heading line of any other known label,
        at the next markdown heading, or at another inline ``Label:`` on the
        same line (``Time complexity: O(n). Space complexity: O(1).``).
        With *stop_at_fence* it also ends where the next code fence opens.
        ``None`` means the heading is absent.
        """
        if not labels:
            return None
        content_start = _matcher(labels).find(self.text, self.fences)
        if content_start is None:
            return None

        line_end = self.text.find("\n", content_start)
        if line_end == -1:
            line_end = len(self.text)

        own = {label.lower() for label in labels}
        ends = [len(self.text)]
        for other in self._known:
            if {label.lower() for label in other} & own:
                continue
            matcher = _matcher(other)
            ends.extend(
                m.start() for m in matcher.line_matches(self.text, self.fences)
                if m.start() >= content_start
            )
            ends.extend(
                m.start() for m in matcher.inline_matches(self.text, self.fences)
                if content_start <= m.start() < line_end
            )
        ends.extend(
            m.start()
            for m in _MARKDOWN_HEADING_RE.finditer(self.text)
            if m.start() >= content_start and not _inside(m.start(), self.fences)
        )
        if stop_at_fence:
            ends.extend(f.start for f in self.fences if f.start >= content_start)
        return self.text[content_start:min(ends)].strip()

    def bullets(self, limit: int) -> list[str]:
        items: list[str] = []
        for line in _strip_fences(self.text).splitlines():
            match = _BULLET_RE.match(line)
            if match:
                items.append(match.group(1).strip())
                if len(items) == limit:
                    break
        return items


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

# Matches markdown code fences (```json ... ``` or ``` ... ```) that models
# frequently wrap around JSON output despite being asked not to.
_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL | re.IGNORECASE)
_OUTER_FENCE_RE = re.compile(r"^\s*```[\w-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


class ResponseParser:
    """Turns raw model text into :class:`ProblemInfo` / :class:`SolutionResult`.

    Stateless; one instance is shared by every run.
    """

    def __init__(self) -> None:
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Extraction pass
    # ------------------------------------------------------------------

    def parse_problem_info(self, text: str, mode: str | InterviewMode) -> ProblemInfo:
        """Decode the extraction response into :class:`ProblemInfo`.

        Raises
        ------
        ParseError
            If no non-empty JSON object can be recovered, even after
            stripping code fences and slicing the outermost braces.
        """
        resolved = InterviewMode.resolve(mode)
        record = self._decode_json_object(text or "")
        if not record:
            self._logger.warning(
                "problem_info_parse_failed",
                mode=resolved.value,
                response_preview=(text or "")[:200],
            )
            raise ParseError(raw_response=text or "")

        problem = ProblemInfo.from_record(record, resolved, raw_response=text)
        self._logger.debug("problem_info_parsed", mode=resolved.value, fields=sorted(problem.fields))
        return problem

    def _decode_json_object(self, text: str) -> dict[str, Any] | None:
        candidates: list[str] = []
        outer = _OUTER_FENCE_RE.match(text)
        candidates.append(outer.group(1) if outer else text)
        # Marker stripping for fences that are not the whole response.
        candidates.append(re.sub(r"```(?:json)?", "", text, flags=re.IGNORECASE))
        fenced = _JSON_FENCE_RE.search(text)
        if fenced:
            candidates.append(fenced.group(1))
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            candidates.append(text[start:end + 1])

        for candidate in candidates:
            try:
                decoded = json.loads(candidate.strip())
            except (json.JSONDecodeError, ValueError):
                continue
            if isinstance(decoded, dict) and decoded:
                return decoded
        return None

    # ------------------------------------------------------------------
    # Solution pass
    # ------------------------------------------------------------------

    def parse_solution(self, text: str, mode: str | InterviewMode) -> SolutionResult:
        """Extract code, thoughts, complexity and mode extras.

        Raises
        ------
        ParseError
            Only when *text* is empty or whitespace; missing sections fall
            back to deterministic defaults.
        """
        resolved = InterviewMode.resolve(mode)
        if not text or not text.strip():
            raise ParseError("Model returned an empty solution", raw_response=text or "")

        rules = MODE_RULES[resolved]
        doc = _Document(text, self._known_labels(rules))

        code = doc.first_code_block
        if code is None:
            code = text

        thoughts: list[str] = []
        for rule in rules.thoughts:
            content = doc.section(rule.labels)
            if content:
                thoughts = split_items(content)
            if thoughts:
                break

        extras: dict[str, str] = {}
        for rule in rules.extras:
            extras[rule.key] = doc.section(rule.labels) or ""
        if resolved == InterviewMode.SYSTEM_DESIGN:
            extras["diagram"] = doc.first_code_block or extras.get("architecture", "")

        result = SolutionResult(
            mode=resolved,
            code=code,
            thoughts=thoughts or [rules.fallback_thought],
            time_complexity=self._complexity(doc, rules.time),
            space_complexity=self._complexity(doc, rules.space),
            extras=extras,
            raw_response=text,
        )
        self._logger.debug(
            "solution_parsed",
            mode=resolved.value,
            fenced_code=code is not text,
            thoughts=len(result.thoughts),
        )
        return result

    def _complexity(self, doc: _Document, rule: ComplexityRule) -> str:
        content = doc.section(rule.labels, stop_at_fence=True)
        if not content:
            return rule.default
        first_paragraph = re.split(r"\n\s*\n", content, maxsplit=1)[0]
        return normalize_complexity(first_paragraph, rule.require_notation) or rule.default

    @staticmethod
    def _known_labels(rules: ModeRules) -> tuple[tuple[str, ...], ...]:
        groups = [CODE_LABELS, _TIME_LABELS, _SPACE_LABELS]
        groups += [r.labels for r in rules.thoughts]
        groups += [r.labels for r in rules.extras]
        groups += [rules.time.labels, rules.space.labels]
        return tuple(dict.fromkeys(g for g in groups if g))

    # ------------------------------------------------------------------
    # Debug pass
    # ------------------------------------------------------------------

    def parse_debug(self, text: str, mode: str | InterviewMode) -> SolutionResult:
        """Parse a debug answer into a debug-flavoured :class:`SolutionResult`.

        Every ``###`` section the debug prompt asked for is copied into
        ``extras`` under its key; the whole answer is kept as
        ``extras["debug_analysis"]``.
        """
        resolved = InterviewMode.resolve(mode)
        if not text or not text.strip():
            raise ParseError("Model returned an empty debug analysis", raw_response=text or "")

        sections = get_templates(resolved).debug_sections
        label_sets = {
            s.key: _DEBUG_SYNONYMS.get(s.key, ()) + (s.title,) for s in sections
        }
        doc = _Document(text, tuple(label_sets.values()) + (CODE_LABELS,))

        code = doc.first_code_block
        if code is None:
            code = text

        extras: dict[str, str] = {}
        for key, labels in label_sets.items():
            extras[key] = doc.section(labels) or ""
        extras["debug_analysis"] = text

        thoughts: list[str] = []
        for key in ("key_points", "key_concepts"):
            if extras.get(key):
                thoughts = split_items(extras[key])
            if thoughts:
                break
        if not thoughts:
            thoughts = doc.bullets(limit=5)

        return SolutionResult(
            mode=resolved,
            code=code,
            thoughts=thoughts or [DEBUG_FALLBACK_THOUGHT],
            time_complexity=DEBUG_COMPLEXITY,
            space_complexity=DEBUG_COMPLEXITY,
            extras=extras,
            is_debug=True,
            raw_response=text,
        )

    # ------------------------------------------------------------------
    # Best effort
    # ------------------------------------------------------------------

    def fallback_solution(
        self, text: str, mode: str | InterviewMode, is_debug: bool = False
    ) -> SolutionResult:
        """Build a result from defaults when a solution/debug parse failed."""
        resolved = InterviewMode.resolve(mode)
        rules = MODE_RULES[resolved]
        body = (text or "").strip()
        extras = {"debug_analysis": body} if is_debug and body else {}
        return SolutionResult(
            mode=resolved,
            code=body or EMPTY_SOLUTION_CODE,
            thoughts=[DEBUG_FALLBACK_THOUGHT if is_debug else rules.fallback_thought],
            time_complexity=DEBUG_COMPLEXITY if is_debug else rules.time.default,
            space_complexity=DEBUG_COMPLEXITY if is_debug else rules.space.default,
            extras=extras,
            is_debug=is_debug,
            raw_response=text or "",
        )
