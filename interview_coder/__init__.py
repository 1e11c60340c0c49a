"""interview-coder: solve coding-interview problems from screenshots.

Screenshots go through an extraction pass (vision model -> ProblemInfo) and
a solution pass (text model -> SolutionResult), driven by
:class:`interview_coder.pipeline.ProcessingOrchestrator`.
"""

__version__ = "0.1.0"
