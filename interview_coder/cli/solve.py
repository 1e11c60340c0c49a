"""Solve an interview problem from screenshots on the command line.

Usage::

    python -m interview_coder.cli.solve problem.png
    python -m interview_coder.cli.solve p1.png p2.png --mode sql --json
    python -m interview_coder.cli.solve problem.png --debug-image attempt.png
    python -m interview_coder.cli.solve --list-models --provider claude

Runs the primary pass (extraction, then solution) on the given images and,
when ``--debug-image`` is given, a debug pass over the problem and debug
screenshots.  Accepts JPEG, PNG or WEBP images up to 10 MB.

Exit codes: 0 success, 1 failure, 130 interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from typing import Any

from interview_coder.models.config import PROVIDER_ALIASES
from interview_coder.utils.logging import configure_logging

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _section(lines: list[str], title: str) -> None:
    lines.append(title)
    lines.append("-" * 40)


def _format_text_output(primary, debug=None) -> str:  # noqa: ANN001
    """Format run outcomes as a human-readable report.

    Sections are only included when the run produced data for them.
    """
    lines: list[str] = []
    sep = "=" * 60
    result = primary.result

    lines.append(sep)
    lines.append(f"  interview-coder: {result.mode.value if result else 'run'} report")
    lines.append(sep)
    lines.append("")

    problem = primary.problem_info
    if problem is not None and problem.problem_statement:
        _section(lines, "PROBLEM")
        lines.append(f"  {problem.problem_statement}")
        lines.append("")

    for outcome, heading in ((primary, "SOLUTION"), (debug, "DEBUG ANALYSIS")):
        if outcome is None or outcome.result is None:
            continue
        res = outcome.result
        _section(lines, heading)
        lines.append(res.code)
        lines.append("")
        if res.thoughts:
            lines.append("  Thoughts:")
            for thought in res.thoughts:
                lines.append(f"    - {thought}")
        lines.append(f"  Time complexity:  {res.time_complexity}")
        lines.append(f"  Space complexity: {res.space_complexity}")
        for key, value in res.extras.items():
            if value and key != "debug_analysis":
                lines.append("")
                lines.append(f"  {key.replace('_', ' ').title()}:")
                for line in value.splitlines():
                    lines.append(f"    {line}")
        lines.append("")

    return "\n".join(lines)


def _outcome_payload(outcome) -> dict[str, Any]:  # noqa: ANN001
    payload: dict[str, Any] = {
        "run_id": outcome.run_id,
        "state": outcome.state.value,
    }
    if outcome.result is not None:
        payload["result"] = outcome.result.to_payload()
    if outcome.error_kind is not None:
        payload["error"] = {"kind": outcome.error_kind.value, "message": outcome.error_message}
    return payload


def _format_json_output(primary, debug=None) -> str:  # noqa: ANN001
    output: dict[str, Any] = {"primary": _outcome_payload(primary)}
    if primary.problem_info is not None:
        output["problem"] = dict(primary.problem_info.fields)
    if debug is not None:
        output["debug"] = _outcome_payload(debug)
    return json.dumps(output, indent=2, default=str)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def _config_overrides(args: argparse.Namespace, active_provider: str) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.provider:
        normalized = args.provider.strip().lower()
        active_provider = PROVIDER_ALIASES.get(normalized, normalized)
        overrides["active_provider"] = active_provider
    if args.model:
        overrides["providers"] = {active_provider: {"model_id": args.model}}
    if args.mode:
        overrides["mode"] = args.mode
    if args.language:
        overrides["language"] = args.language
    return overrides


def _print_failure(outcome) -> None:  # noqa: ANN001
    kind = outcome.error_kind.value if outcome.error_kind else "Unknown"
    print(f"Error ({kind}): {outcome.error_message}", file=sys.stderr)


async def _run(args: argparse.Namespace) -> int:
    """Validate inputs, build the orchestrator and run the requested passes.

    Returns the process exit code.
    """
    # Deferred: building components reads settings and the YAML config.
    from interview_coder.main import build_components
    from interview_coder.models.events import ProgressEvent
    from interview_coder.pipeline.event_broadcaster import EventBroadcaster
    from interview_coder.providers.images.file_image_source import FileImageSource
    from interview_coder.utils.errors import ConfigurationError, InvalidImageError

    try:
        source = FileImageSource(args.images, args.debug_images)
    except InvalidImageError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_FAILURE

    broadcaster = EventBroadcaster()
    if not args.json_output:
        def _print_progress(event) -> None:  # noqa: ANN001
            if isinstance(event, ProgressEvent):
                print(f"[{event.percent:3d}%] {event.message}", file=sys.stderr)

        broadcaster.subscribe(_print_progress)

    try:
        components = build_components(
            config_path=args.config, image_source=source, event_sink=broadcaster
        )
        store = components["config_store"]
        overrides = _config_overrides(args, store.get().active_provider)
        if overrides:
            store.set(overrides)
    except ConfigurationError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_FAILURE

    orchestrator = components["orchestrator"]
    start = time.monotonic()
    try:
        primary = await orchestrator.run_primary()
        debug = None
        if primary.succeeded and args.debug_images:
            debug = await orchestrator.run_secondary()
    finally:
        await orchestrator.close()
    print(f"Done in {time.monotonic() - start:.1f}s", file=sys.stderr)

    if args.json_output:
        print(_format_json_output(primary, debug))
    elif primary.result is not None:
        print(_format_text_output(primary, debug))

    for outcome in (primary, debug):
        if outcome is None:
            continue
        if outcome.cancelled:
            return EXIT_INTERRUPTED
        if not outcome.succeeded:
            if not args.json_output:
                _print_failure(outcome)
            return EXIT_FAILURE
    return EXIT_OK


def _list_modes() -> int:
    from interview_coder.prompts.registry import available_modes

    for mode in available_modes():
        print(f"{mode['id']:<15} {mode['name']:<28} {mode['description']}")
    return EXIT_OK


def _list_models(args: argparse.Namespace) -> int:
    from interview_coder.config.loader import load_config
    from interview_coder.providers.llm.factory import available_models, default_model
    from interview_coder.utils.errors import ConfigurationError

    try:
        provider = args.provider or load_config(args.config).active_provider
        models = available_models(provider)
        default = default_model(provider)
    except ConfigurationError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_FAILURE

    for spec in models:
        marker = "*" if spec.model_id == default else " "
        vision = "vision" if spec.supports_vision else "text"
        print(f"{marker} {spec.model_id:<32} {vision:<7} {spec.display_name}")
    return EXIT_OK


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m interview_coder.cli.solve",
        description=(
            "Extract an interview problem from screenshots and generate a solution "
            "with the configured AI provider."
        ),
    )
    parser.add_argument(
        "images",
        nargs="*",
        help="Problem screenshots (JPEG, PNG or WEBP), in order.",
    )
    parser.add_argument(
        "--debug-image",
        action="append",
        default=[],
        dest="debug_images",
        metavar="IMAGE",
        help="Screenshot of your attempt; runs a debug pass after the solution. Repeatable.",
    )
    parser.add_argument("--mode", help="Interview mode, e.g. coding, sql, system_design.")
    parser.add_argument("--language", help="Preferred solution language, e.g. python.")
    parser.add_argument("--provider", help="Provider id: openai, claude or ollama.")
    parser.add_argument("--model", help="Model id for the selected provider.")
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="YAML config with defaults (default: config/config.yaml).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON instead of formatted text.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logs on stderr.",
    )
    parser.add_argument(
        "--list-modes",
        action="store_true",
        help="List interview modes and exit.",
    )
    parser.add_argument(
        "--list-models",
        action="store_true",
        help="List models of --provider (or the configured provider) and exit.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Logs go to stderr; configured before anything caches a logger.
    configure_logging(log_level="DEBUG" if args.verbose else "WARNING", stream=sys.stderr)

    if args.list_modes:
        return _list_modes()
    if args.list_models:
        return _list_models(args)
    if not args.images:
        parser.error("at least one IMAGE is required")

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
