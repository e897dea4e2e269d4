"""
conflint CLI — Command-line interface for document linting.

Exit codes:
    0  document is conformant
    1  document is non-conformant (or has warnings under --strict)
    2  unknown template, unreadable input, unwritable output, or invalid ruleset
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

from conflint import __version__
from conflint.core.logging import LogChannel, configure_logging, get_logger
from conflint.engine.evaluator import ConformanceEvaluator
from conflint.errors import ConflintError, UnreadableInput, UnwritableOutput
from conflint.ir.enums import OutputKind, VerdictStatus
from conflint.ir.schema import Document
from conflint.render.report import format_report, format_styled
from conflint.rules.registry import RuleSetRegistry, load_registry

EXIT_CONFORMANT = 0
EXIT_NON_CONFORMANT = 1
EXIT_ERROR = 2

STDIN_SOURCE = "<stdin>"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conflint",
        description="Check prompts and guideline documents against structural checklists",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"conflint {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Lint command
    lint_parser = subparsers.add_parser("lint", help="Lint a document against a template")
    lint_parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="Path to a text/Markdown file (default: - for stdin)",
    )
    lint_parser.add_argument(
        "--template",
        required=True,
        help="Template id (n8n-prompt, security-checklist, design-checklist, or one from --rules)",
    )
    lint_parser.add_argument(
        "--format",
        choices=[k.value for k in OutputKind],
        default=OutputKind.HUMAN.value,
        help="Output format: human (default) or machine (JSON)",
    )
    lint_parser.add_argument(
        "--rules",
        action="append",
        default=[],
        metavar="FILE",
        help="Extra ruleset YAML file to register (repeatable)",
    )
    lint_parser.add_argument(
        "-o", "--output",
        metavar="FILE",
        help="Write the report to FILE instead of stdout",
    )
    lint_parser.add_argument(
        "--strict",
        action="store_true",
        help="Also exit 1 when optional rules produce warnings",
    )
    lint_parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored human output (also honored: NO_COLOR env var)",
    )
    _add_logging_arguments(lint_parser)

    # Templates command
    templates_parser = subparsers.add_parser("templates", help="List registered templates")
    templates_parser.add_argument(
        "--rules",
        action="append",
        default=[],
        metavar="FILE",
        help="Extra ruleset YAML file to register (repeatable)",
    )
    _add_logging_arguments(templates_parser)

    return parser


def _add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["silent", "info", "verbose", "debug"],
        default=None,
        help="Log verbosity level (default: info, or CONFLINT_LOG_LEVEL env var)",
    )
    parser.add_argument(
        "--log-channel",
        type=str,
        default=None,
        help="Comma-separated log channels to show (extract,rules,evaluate,report,system). Default: all",
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _configure_from_args(args)
    log = get_logger(LogChannel.SYSTEM)

    try:
        registry = load_registry(extra=[Path(p) for p in args.rules])
        if args.command == "lint":
            return run_lint(args, registry)
        if args.command == "templates":
            return run_templates(registry)
    except ConflintError as e:
        log.verbose("lint_aborted", error_type=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    return 0


def _configure_from_args(args: argparse.Namespace) -> None:
    channels = None
    if args.log_channel:
        channels = [ch.strip() for ch in args.log_channel.split(",")]
    configure_logging(level=args.log_level, channels=channels, force=True)


def read_input(source: str) -> tuple[str, str]:
    """
    Read document text from a path, or stdin for "-".

    Returns:
        (text, source name)

    Raises:
        UnreadableInput: If the file is missing, unreadable, or not UTF-8
    """
    if source == "-":
        try:
            return sys.stdin.buffer.read().decode("utf-8"), STDIN_SOURCE
        except UnicodeDecodeError as e:
            raise UnreadableInput(STDIN_SOURCE, "not valid UTF-8 text") from e
        except OSError as e:
            raise UnreadableInput(STDIN_SOURCE, e.strerror or str(e)) from e

    path = Path(source)
    try:
        return path.read_text(encoding="utf-8"), str(path)
    except UnicodeDecodeError as e:
        raise UnreadableInput(str(path), "not valid UTF-8 text") from e
    except OSError as e:
        raise UnreadableInput(str(path), e.strerror or str(e)) from e


def run_lint(args: argparse.Namespace, registry: RuleSetRegistry) -> int:
    """Run the lint command."""
    # Template and input are both checked before anything is printed
    registry.get_rule_set(args.template)
    text, source = read_input(args.input)

    document = Document(text=text, template_id=args.template, source=source)
    report = ConformanceEvaluator(registry).evaluate_document(document)

    if args.output:
        write_report(args.output, format_report(report, args.format))
    elif args.format == OutputKind.HUMAN.value and _use_color(args):
        Console(highlight=False).print(format_styled(report), soft_wrap=True)
    else:
        print(format_report(report, args.format))

    if not report.is_conformant:
        return EXIT_NON_CONFORMANT
    if args.strict and report.count(VerdictStatus.WARN):
        return EXIT_NON_CONFORMANT
    return EXIT_CONFORMANT


def write_report(target: str, output: str) -> None:
    """Write a rendered report to a file."""
    path = Path(target)
    try:
        path.write_text(output + "\n", encoding="utf-8")
    except OSError as e:
        raise UnwritableOutput(str(path), e.strerror or str(e)) from e


def run_templates(registry: RuleSetRegistry) -> int:
    """List registered templates."""
    for ruleset in registry:
        required = len(ruleset.required_rules)
        optional = len(ruleset.rules) - required
        print(f"{ruleset.template_id}\t{ruleset.name} ({required} required, {optional} optional)")
    return 0


def _use_color(args: argparse.Namespace) -> bool:
    if args.no_color or "NO_COLOR" in os.environ:
        return False
    return sys.stdout.isatty()


if __name__ == "__main__":
    sys.exit(main())
