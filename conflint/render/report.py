"""
Report Formatter — Human and machine renderings of a Report.

`machine` output is JSON with a fixed field order
(template_id, verdicts[label, kind, verdict, explanation], status, score)
and parses back into an equal Report:

    parse(format_report(report, OutputKind.MACHINE)) == report
"""

from typing import Union

from pydantic import ValidationError
from rich.text import Text

from conflint.core.logging import LogChannel, get_logger
from conflint.ir.enums import ConformanceStatus, OutputKind, VerdictStatus
from conflint.ir.schema import Report
from conflint.ir.serialization import from_json, to_json

log = get_logger(LogChannel.REPORT)

VERDICT_STYLES = {
    VerdictStatus.PASS: "green",
    VerdictStatus.FAIL: "bold red",
    VerdictStatus.WARN: "yellow",
}

STATUS_STYLES = {
    ConformanceStatus.CONFORMANT: "bold green",
    ConformanceStatus.NON_CONFORMANT: "bold red",
}


def format_verdict_line(label: str, verdict: VerdictStatus, explanation: str) -> str:
    return f"{label}: {verdict.value} — {explanation}"


def format_summary(report: Report) -> str:
    passed, total = report.required_counts()
    return (
        f"status: {report.status.value} "
        f"(score {report.score:.2f}, {passed}/{total} required passed)"
    )


def format_human(report: Report) -> str:
    """
    Render one `LABEL: verdict — explanation` line per verdict,
    followed by the aggregate status line.
    """
    lines = [f"template: {report.template_id}"]
    for v in report.verdicts:
        lines.append(format_verdict_line(v.label, v.verdict, v.explanation))
    lines.append(format_summary(report))
    return "\n".join(lines)


def format_styled(report: Report) -> Text:
    """Same content as `format_human`, styled for a color terminal."""
    text = Text(f"template: {report.template_id}\n", style="bold")
    for v in report.verdicts:
        text.append(f"{v.label}: ")
        text.append(v.verdict.value, style=VERDICT_STYLES[v.verdict])
        text.append(f" — {v.explanation}\n")
    text.append(format_summary(report), style=STATUS_STYLES[report.status])
    return text


def format_machine(report: Report) -> str:
    """Render the report as JSON."""
    return to_json(report)


def format_report(report: Report, output_kind: Union[OutputKind, str] = OutputKind.HUMAN) -> str:
    """
    Render a report.

    Args:
        report: Evaluation result
        output_kind: "human" or "machine"

    Returns:
        Rendered text (no trailing newline)
    """
    output_kind = OutputKind(output_kind)
    log.verbose("report_rendered", format=output_kind.value, verdicts=len(report.verdicts))
    if output_kind == OutputKind.MACHINE:
        return format_machine(report)
    return format_human(report)


def parse(text: str) -> Report:
    """
    Parse a machine rendering back into a Report.

    Raises:
        ValueError: If the text is not a valid machine rendering
    """
    try:
        return from_json(text)
    except ValidationError as e:
        log.warning("report_parse_failed", errors=e.error_count())
        raise ValueError(f"not a machine-format report: {e}") from e
