"""Prompt text for every interview mode.

Each mode is described once, as data: who the model should act as, which
JSON fields the extraction pass must return, how the solution prompt lays
out the extracted problem, which headings the answer must use, and the
``###`` sections a debug answer must contain.  The registry turns these
definitions into concrete prompts; the response parser reuses the debug
section titles to find them again in the answer.
"""

from __future__ import annotations

from dataclasses import dataclass

from interview_coder.models.problem import InterviewMode

SOLUTION_SYSTEM_PROMPT = (
    "You are an expert coding interview assistant. "
    "Provide clear, optimal solutions with detailed explanations."
)

EXTRACTION_USER_PROMPT = (
    "Extract the problem details from these screenshots. Return in JSON format. "
    "Preferred coding language is {language}."
)


@dataclass(frozen=True)
class ProblemField:
    """One extracted field as it is quoted back in the solution prompt."""

    key: str
    heading: str
    fallback: str = ""


@dataclass(frozen=True)
class DebugSection:
    key: str
    title: str
    instruction: str


@dataclass(frozen=True)
class ModeDefinition:
    mode: InterviewMode
    name: str
    description: str
    assistant_role: str
    subject: str
    extraction_fields: tuple[str, ...]
    problem_fields: tuple[ProblemField, ...]
    answer_format: tuple[str, ...]
    closing: str
    debug_role: str
    debug_sections: tuple[DebugSection, ...]
    debug_request: str
    debug_asks: tuple[str, ...]
    statement_field: str = "problem_statement"
    extraction_note: str = ""
    code_fence_hint: str = ""


_KEY_POINTS = DebugSection(
    "key_points", "Key Points", "Summary bullet points of the most important takeaways"
)

_COMPLEXITY_GUIDANCE = (
    "For complexity explanations, be thorough. For example: \"Time complexity: O(n) "
    "because we iterate through the array only once. This is optimal as every element "
    "must be examined at least once.\" or \"Space complexity: O(n) because in the worst "
    "case all elements are stored in the hashmap.\""
)


MODE_DEFINITIONS: dict[InterviewMode, ModeDefinition] = {
    InterviewMode.CODING: ModeDefinition(
        mode=InterviewMode.CODING,
        name="Coding Algorithms",
        description="Standard coding algorithm problems",
        assistant_role="You are a coding challenge interpreter.",
        subject="coding problem",
        extraction_fields=("problem_statement", "constraints", "example_input", "example_output"),
        problem_fields=(
            ProblemField("problem_statement", "PROBLEM STATEMENT"),
            ProblemField("constraints", "CONSTRAINTS", "No specific constraints provided."),
            ProblemField("example_input", "EXAMPLE INPUT", "No example input provided."),
            ProblemField("example_output", "EXAMPLE OUTPUT", "No example output provided."),
        ),
        answer_format=(
            "Code: A clean, optimized implementation in {language}",
            "Your Thoughts: A list of key insights and reasoning behind your approach",
            "Time complexity: O(X) with a detailed explanation (at least 2 sentences)",
            "Space complexity: O(X) with a detailed explanation (at least 2 sentences)",
        ),
        closing=(
            f"{_COMPLEXITY_GUIDANCE}\n\n"
            "Your solution should be efficient, well-commented, and handle edge cases."
        ),
        debug_role=(
            "You are a coding interview assistant helping debug and improve solutions. "
            "Analyze these screenshots which include either error messages, incorrect "
            "outputs, or test cases, and provide detailed debugging help."
        ),
        debug_sections=(
            DebugSection(
                "issues", "Issues Identified",
                "List each issue as a bullet point with clear explanation",
            ),
            DebugSection(
                "improvements", "Specific Improvements and Corrections",
                "List specific code changes needed as bullet points",
            ),
            DebugSection(
                "optimizations", "Optimizations",
                "List any performance optimizations if applicable",
            ),
            DebugSection(
                "explanation", "Explanation of Changes Needed",
                "Explain clearly why the changes are needed",
            ),
            _KEY_POINTS,
        ),
        debug_request=(
            'I\'m solving this coding problem: "{statement}" in {language}. I need help '
            "with debugging or improving my solution. Here are screenshots of my code, "
            "the errors or test cases."
        ),
        debug_asks=(
            "What issues you found in my code",
            "Specific improvements and corrections",
            "Any optimizations that would make the solution better",
            "A clear explanation of the changes needed",
        ),
        code_fence_hint="{language}",
    ),
    InterviewMode.SYSTEM_DESIGN: ModeDefinition(
        mode=InterviewMode.SYSTEM_DESIGN,
        name="System Design",
        description="System architecture and design questions",
        assistant_role="You are a system design interview assistant.",
        subject="system design problem",
        extraction_fields=(
            "problem_statement", "requirements", "constraints", "scale", "additional_context",
        ),
        problem_fields=(
            ProblemField("problem_statement", "PROBLEM STATEMENT"),
            ProblemField("requirements", "REQUIREMENTS", "No specific requirements provided."),
            ProblemField("constraints", "CONSTRAINTS", "No specific constraints provided."),
            ProblemField("scale", "SCALE", "No specific scale information provided."),
            ProblemField(
                "additional_context", "ADDITIONAL CONTEXT", "No additional context provided."
            ),
        ),
        answer_format=(
            "System Architecture: High-level architecture with key components",
            "Key Components: List each major component and its responsibility",
            "Data Model: Describe the data schemas and storage choices",
            "Scalability Considerations: How this design scales to handle growth",
            "Tradeoffs: List of the key tradeoffs in your design",
        ),
        closing=(
            "If a diagram helps, include it as a fenced code block (ASCII art or mermaid). "
            "Your solution should be clear, efficient, and address all the requirements "
            "and constraints."
        ),
        debug_role=(
            "You are a system design interview assistant helping improve design solutions. "
            "Analyze these screenshots which include either system design diagrams, "
            "potential issues, or requirements, and provide detailed improvement suggestions."
        ),
        debug_sections=(
            DebugSection(
                "issues", "Design Issues Identified",
                "List each issue as a bullet point with clear explanation",
            ),
            DebugSection(
                "improvements", "Architecture Improvements",
                "List specific architecture changes needed as bullet points",
            ),
            DebugSection(
                "scalability", "Scalability Enhancements", "Suggest ways to improve scalability",
            ),
            DebugSection(
                "data_flow", "Data Flow Optimizations",
                "Suggest improvements to data flow and processing",
            ),
            _KEY_POINTS,
        ),
        debug_request=(
            'I\'m working on this system design problem: "{statement}". I need help with '
            "improving my design solution. Here are screenshots of my current design, "
            "potential issues, or additional requirements."
        ),
        debug_asks=(
            "What design issues you identified",
            "Specific architecture improvements",
            "How to enhance scalability",
            "Data flow optimizations",
        ),
    ),
    InterviewMode.REACT: ModeDefinition(
        mode=InterviewMode.REACT,
        name="React Frontend",
        description="React component and UI implementation",
        assistant_role="You are a React coding interview assistant.",
        subject="React frontend problem",
        extraction_fields=(
            "problem_statement", "ui_requirements", "functionality", "constraints", "sample_data",
        ),
        problem_fields=(
            ProblemField("problem_statement", "PROBLEM STATEMENT"),
            ProblemField(
                "ui_requirements", "UI REQUIREMENTS", "No specific UI requirements provided."
            ),
            ProblemField(
                "functionality", "FUNCTIONALITY", "No specific functionality details provided."
            ),
            ProblemField("constraints", "CONSTRAINTS", "No specific constraints provided."),
            ProblemField("sample_data", "SAMPLE DATA", "No sample data provided."),
        ),
        answer_format=(
            "Code: A clean, optimized React implementation",
            "Component Structure: Description of the component hierarchy",
            "State Management: How state is handled in the solution",
            "Key Features: Highlight of important implementation details",
            "Potential Improvements: How the solution could be extended",
        ),
        closing=(
            "Your solution should use modern React practices, be performant, "
            "and meet all requirements."
        ),
        debug_role=(
            "You are a React interview assistant helping debug and improve frontend "
            "solutions. Analyze these screenshots which include React code, UI issues, "
            "or requirements, and provide detailed debugging help."
        ),
        debug_sections=(
            DebugSection(
                "issues", "UI/UX Issues Identified",
                "List each issue as a bullet point with clear explanation",
            ),
            DebugSection(
                "component_structure", "Component Structure Improvements",
                "Suggest better component organization if applicable",
            ),
            DebugSection(
                "state_management", "State Management Optimizations",
                "Suggest improvements to how state is managed",
            ),
            DebugSection(
                "performance", "Performance Enhancements", "List ways to improve React performance",
            ),
            _KEY_POINTS,
        ),
        debug_request=(
            'I\'m implementing this React frontend problem: "{statement}". I need help with '
            "debugging or improving my solution. Here are screenshots of my React code, "
            "UI issues, or requirements."
        ),
        debug_asks=(
            "What UI/UX issues you identified",
            "How to improve component structure",
            "Better state management approaches",
            "Performance enhancements",
        ),
        code_fence_hint="jsx",
    ),
    InterviewMode.SQL: ModeDefinition(
        mode=InterviewMode.SQL,
        name="SQL",
        description="Database query and schema design questions",
        assistant_role="You are a SQL interview assistant.",
        subject="SQL problem",
        extraction_fields=(
            "problem_statement", "table_schemas", "sample_data", "expected_output", "constraints",
        ),
        problem_fields=(
            ProblemField("problem_statement", "PROBLEM STATEMENT"),
            ProblemField("table_schemas", "TABLE SCHEMAS", "No specific table schemas provided."),
            ProblemField("sample_data", "SAMPLE DATA", "No sample data provided."),
            ProblemField(
                "expected_output", "EXPECTED OUTPUT", "No specific expected output provided."
            ),
            ProblemField("constraints", "CONSTRAINTS", "No specific constraints provided."),
        ),
        answer_format=(
            "SQL Query: A clean, optimized SQL solution",
            "Explanation: Step-by-step explanation of how the query works",
            "Performance Considerations: Any indexes or optimizations to consider",
            "Alternative Approaches: Other ways to solve this problem",
        ),
        closing=(
            "Your solution should be efficient, follow best practices, "
            "and produce the expected output."
        ),
        debug_role=(
            "You are a SQL interview assistant helping debug and improve database queries. "
            "Analyze these screenshots which include SQL queries, error messages, or "
            "requirements, and provide detailed debugging help."
        ),
        debug_sections=(
            DebugSection(
                "issues", "Query Issues Identified",
                "List each issue as a bullet point with clear explanation",
            ),
            DebugSection(
                "improvements", "Query Improvements",
                "List specific SQL changes needed as bullet points",
            ),
            DebugSection(
                "optimizations", "Performance Optimizations",
                "Suggest indexes or query rewrites for better performance",
            ),
            DebugSection(
                "alternatives", "Alternative Approaches",
                "Suggest alternative query strategies if applicable",
            ),
            _KEY_POINTS,
        ),
        debug_request=(
            'I\'m solving this SQL problem: "{statement}". I need help with debugging or '
            "improving my query. Here are screenshots of my SQL code, error messages, "
            "or requirements."
        ),
        debug_asks=(
            "What issues you found in my query",
            "Specific improvements and corrections",
            "Any performance optimizations",
            "Alternative query approaches",
        ),
        code_fence_hint="sql",
    ),
    InterviewMode.LINUX: ModeDefinition(
        mode=InterviewMode.LINUX,
        name="Linux/Kernel",
        description="Command-line and system administration problems",
        assistant_role="You are a Linux/kernel interview assistant.",
        subject="Linux/kernel problem",
        extraction_fields=(
            "problem_statement", "environment", "command_requirements",
            "expected_behavior", "constraints",
        ),
        problem_fields=(
            ProblemField("problem_statement", "PROBLEM STATEMENT"),
            ProblemField(
                "environment", "ENVIRONMENT", "No specific environment details provided."
            ),
            ProblemField(
                "command_requirements", "COMMAND REQUIREMENTS",
                "No specific command requirements provided.",
            ),
            ProblemField(
                "expected_behavior", "EXPECTED BEHAVIOR",
                "No specific expected behavior provided.",
            ),
            ProblemField("constraints", "CONSTRAINTS", "No specific constraints provided."),
        ),
        answer_format=(
            "Solution Commands: The exact commands to solve the problem",
            "Explanation: Step-by-step explanation of what each command does",
            "Verification: How to verify the solution works correctly",
            "Alternative Approaches: Other ways to solve this problem",
        ),
        closing=(
            "Your solution should be efficient, follow best practices, "
            "and meet all requirements."
        ),
        debug_role=(
            "You are a Linux/kernel interview assistant helping debug and improve "
            "command-line solutions. Analyze these screenshots which include commands, "
            "error messages, or requirements, and provide detailed debugging help."
        ),
        debug_sections=(
            DebugSection(
                "issues", "Command Issues Identified",
                "List each issue as a bullet point with clear explanation",
            ),
            DebugSection(
                "improvements", "Command Improvements",
                "List specific command changes needed as bullet points",
            ),
            DebugSection(
                "alternatives", "Alternative Commands",
                "Suggest alternative commands that might work better",
            ),
            DebugSection(
                "verification", "Verification Steps",
                "Suggest how to verify the solution works correctly",
            ),
            _KEY_POINTS,
        ),
        debug_request=(
            'I\'m working on this Linux/kernel problem: "{statement}". I need help with '
            "debugging or improving my command-line solution. Here are screenshots of my "
            "commands, error messages, or requirements."
        ),
        debug_asks=(
            "What issues you found in my commands",
            "Specific command improvements",
            "Alternative commands that might work better",
            "How to verify the solution works",
        ),
        code_fence_hint="bash",
    ),
    InterviewMode.CERTIFICATION: ModeDefinition(
        mode=InterviewMode.CERTIFICATION,
        name="Certification Exam",
        description="Multiple choice, fill-in-blank, and other exam formats",
        assistant_role="You are a certification exam assistant.",
        subject="exam question",
        extraction_fields=("question_type", "question_text", "options", "context"),
        extraction_note=(
            "First determine the question type (multiple_choice, fill_in_blank, matching, "
            "arrange, other). Include options only if applicable."
        ),
        problem_fields=(
            ProblemField("question_type", "QUESTION TYPE", "Unknown"),
            ProblemField("question_text", "QUESTION TEXT"),
            ProblemField("options", "OPTIONS", "No options provided."),
            ProblemField("context", "CONTEXT", "No specific context provided."),
        ),
        answer_format=(
            "Answer: Clear, direct answer to the question",
            "Explanation: Detailed explanation of why this is the correct answer",
            "Additional Context: Any important information that helps understand the topic",
        ),
        closing="Your solution should be accurate and comprehensive.",
        debug_role=(
            "You are a certification exam assistant helping clarify answers and "
            "explanations. Analyze these screenshots which include exam questions, "
            "answers, or explanations, and provide detailed help."
        ),
        debug_sections=(
            DebugSection(
                "answer_analysis", "Answer Analysis",
                "Explain if the answer is correct or incorrect and why",
            ),
            DebugSection(
                "correct_solution", "Correct Solution",
                "Provide the correct answer with explanation",
            ),
            DebugSection(
                "key_concepts", "Key Concepts",
                "List the important concepts being tested in this question",
            ),
            DebugSection(
                "related_knowledge", "Related Knowledge",
                "Provide additional relevant information about the topic",
            ),
            DebugSection(
                "study_resources", "Study Resources",
                "Suggest what to study further on this topic",
            ),
        ),
        debug_request=(
            "I'm studying for a certification exam and encountered this question: "
            '"{statement}". I need help understanding the correct answer. Here are '
            "screenshots of the question, answer choices, or my attempt."
        ),
        debug_asks=(
            "Whether my answer is correct or not and why",
            "The correct solution with explanation",
            "Key concepts being tested",
            "Related knowledge I should know",
            "What I should study further on this topic",
        ),
        statement_field="question_text",
    ),
}
