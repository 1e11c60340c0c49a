"""Command-line tools for interview-coder.

- ``python -m interview_coder.cli.solve`` -- solve a problem from screenshots
  (also runnable as ``python -m interview_coder.cli``).
"""
