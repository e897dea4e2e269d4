"""
Conformance Evaluator — Deterministic rule evaluation.

Rules are checked in ruleset declaration order against sections looked up
by canonical label, so verdict order never depends on how the author
arranged the document. Every rule gets a verdict: a failed check never
stops the remaining rules.
"""

from typing import Optional

from conflint.core.logging import LogChannel, get_logger
from conflint.extract.sections import SectionExtractor
from conflint.ir.enums import (
    ConformanceStatus,
    DuplicatePolicy,
    RequirementKind,
    VerdictStatus,
)
from conflint.ir.schema import Document, Report, Section, Verdict
from conflint.rules.models import Rule, RuleSet
from conflint.rules.registry import RuleSetRegistry

log = get_logger(LogChannel.EVALUATE)

MISSING_REQUIRED = "section missing"
MISSING_OPTIONAL = "optional section missing"


def index_sections(
    sections: list[Section], policy: DuplicatePolicy = DuplicatePolicy.FIRST
) -> dict[str, str]:
    """
    Map canonical label to the body used for evaluation.

    FIRST keeps the first occurrence; CONCATENATE joins every body
    carrying the label, in document order.
    """
    bodies: dict[str, list[str]] = {}
    for section in sections:
        bodies.setdefault(section.label, []).append(section.body)

    if policy == DuplicatePolicy.CONCATENATE:
        return {label: "\n".join(parts) for label, parts in bodies.items()}
    return {label: parts[0] for label, parts in bodies.items()}


def evaluate_rule(rule: Rule, body: Optional[str]) -> Verdict:
    """Evaluate one rule against the matched section body (None when absent)."""
    if body is None:
        return Verdict(
            label=rule.label,
            kind=rule.kind,
            verdict=VerdictStatus.FAIL if rule.is_required else VerdictStatus.WARN,
            explanation=MISSING_REQUIRED if rule.is_required else MISSING_OPTIONAL,
        )

    result = rule.check.evaluate(body)
    if result.ok:
        status = VerdictStatus.PASS
    elif rule.is_required:
        status = VerdictStatus.FAIL
    else:
        status = VerdictStatus.WARN

    return Verdict(
        label=rule.label,
        kind=rule.kind,
        verdict=status,
        explanation=result.explanation,
    )


def summarize(template_id: str, verdicts: list[Verdict]) -> Report:
    """Aggregate verdicts into a report with status and score."""
    required = [v for v in verdicts if v.kind == RequirementKind.REQUIRED]
    passed = sum(1 for v in required if v.verdict == VerdictStatus.PASS)
    # Vacuously conformant when nothing is required
    score = passed / len(required) if required else 1.0

    failed = any(v.verdict == VerdictStatus.FAIL for v in verdicts)
    return Report(
        template_id=template_id,
        verdicts=verdicts,
        status=ConformanceStatus.NON_CONFORMANT if failed else ConformanceStatus.CONFORMANT,
        score=score,
    )


class ConformanceEvaluator:
    """
    Evaluates documents against the rulesets of a registry.

    Holds only the registry it was given; evaluation is pure and may run
    from several threads at once.
    """

    def __init__(self, registry: RuleSetRegistry) -> None:
        self.registry = registry

    def evaluate_document(self, document: Document) -> Report:
        """
        Evaluate a document against its template's ruleset.

        Raises:
            UnknownTemplate: If the document's template is not registered
        """
        ruleset = self.registry.get_rule_set(document.template_id)
        return evaluate(document, ruleset)


def evaluate(document: Document, ruleset: RuleSet) -> Report:
    """
    Evaluate a document against a ruleset.

    Args:
        document: Input document
        ruleset: Rules to check, in declaration order

    Returns:
        Report with one verdict per rule
    """
    extractor = SectionExtractor.for_ruleset(ruleset)
    sections = list(extractor.extract(document.text))
    bodies = index_sections(sections, ruleset.settings.duplicates)

    log.verbose(
        "sections_extracted",
        template_id=ruleset.template_id,
        sections=len(sections),
        labels=[s.label for s in sections],
    )

    verdicts: list[Verdict] = []
    for rule in ruleset.rules:
        verdict = evaluate_rule(rule, bodies.get(rule.label))
        log.debug(
            "rule_evaluated",
            rule_id=rule.id,
            label=rule.label,
            verdict=verdict.verdict.value,
            explanation=verdict.explanation,
        )
        verdicts.append(verdict)

    report = summarize(ruleset.template_id, verdicts)
    log.info(
        "document_evaluated",
        template_id=report.template_id,
        status=report.status.value,
        score=round(report.score, 4),
        failed=report.count(VerdictStatus.FAIL),
        warned=report.count(VerdictStatus.WARN),
    )
    return report
