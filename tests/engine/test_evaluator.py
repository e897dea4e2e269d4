"""
Unit tests for the Conformance Evaluator.
"""

import pytest

from conflint.engine.evaluator import (
    ConformanceEvaluator,
    evaluate,
    evaluate_rule,
    index_sections,
    summarize,
)
from conflint.errors import UnknownTemplate
from conflint.extract.sections import extract
from conflint.ir.enums import (
    ConformanceStatus,
    DuplicatePolicy,
    RequirementKind,
    VerdictStatus,
)
from conflint.ir.schema import PREAMBLE_LABEL, Document, Verdict
from conflint.rules.loader import parse_ruleset
from conflint.rules.models import Rule


TEMPLATES = ["n8n-prompt", "security-checklist", "design-checklist"]

SATISFYING_BODY = "- item one --token: 1\n- item two\n- item three [ ]\n- [x] item four\n"


def satisfying_document(ruleset, order=None) -> str:
    """A document with one section per rule label, each body passing its check."""
    labels = list(dict.fromkeys(r.label for r in ruleset.rules))
    if order is not None:
        labels = [labels[i] for i in order]
    return "\n".join(f"## {label}\n{SATISFYING_BODY}" for label in labels)


def verdict_map(report):
    return {v.label: v.verdict for v in report.verdicts}


class TestScenarios:
    """Concrete evaluation scenarios."""

    def test_input_only_n8n_prompt(self, n8n_rules):
        """Verify a prompt with only INPUT fails the other required sections."""
        doc = Document(text="INPUT:\nManual trigger\n", template_id="n8n-prompt")

        report = evaluate(doc, n8n_rules)
        verdicts = verdict_map(report)

        assert verdicts["INPUT"] == VerdictStatus.PASS
        assert verdicts["PROCESSING"] == VerdictStatus.FAIL
        assert verdicts["INTEGRATIONS"] == VerdictStatus.FAIL
        assert verdicts["OUTPUT"] == VerdictStatus.FAIL
        assert verdicts["CONSTRAINTS"] == VerdictStatus.WARN
        assert report.status == ConformanceStatus.NON_CONFORMANT
        assert report.score == 0.25

    def test_missing_explanations(self, n8n_rules):
        """Verify missing sections explain themselves."""
        report = evaluate(Document(text="", template_id="n8n-prompt"), n8n_rules)
        by_label = {v.label: v for v in report.verdicts}

        assert by_label["INPUT"].explanation == "section missing"
        assert by_label["CONSTRAINTS"].explanation == "optional section missing"

    @pytest.mark.parametrize("template_id", TEMPLATES)
    def test_empty_document(self, registry, template_id):
        """Verify an empty document is non-conformant with score 0.0."""
        ruleset = registry.get_rule_set(template_id)

        report = evaluate(Document(text="", template_id=template_id), ruleset)

        assert report.status == ConformanceStatus.NON_CONFORMANT
        assert report.score == 0.0
        assert extract("", ruleset).labels() == [PREAMBLE_LABEL]

    def test_security_checklist_item_count(self, security_rules):
        """Verify too few bullet items fails with a count explanation."""
        text = "## Authentication\n- Use NextAuth\n"

        report = evaluate(Document(text=text, template_id="security-checklist"), security_rules)
        auth = report.verdicts[0]

        assert auth.label == "AUTHENTICATION"
        assert auth.verdict == VerdictStatus.FAIL
        assert auth.explanation == "expected >= 3 bullet items, found 1"

    def test_optional_check_failure_warns(self, design_rules):
        """Verify a present optional section failing its check is a warning."""
        text = "## Design Tokens\nWe use tokens.\n"

        report = evaluate(Document(text=text, template_id="design-checklist"), design_rules)
        tokens = next(v for v in report.verdicts if v.label == "DESIGN TOKENS")

        assert tokens.verdict == VerdictStatus.WARN
        assert "expected text matching" in tokens.explanation

    def test_empty_required_section_fails(self, n8n_rules):
        """Verify a present but empty required section fails."""
        report = evaluate(Document(text="## Input\n\n## Output\nemail", template_id="n8n-prompt"), n8n_rules)
        verdicts = {v.label: v for v in report.verdicts}

        assert verdicts["INPUT"].verdict == VerdictStatus.FAIL
        assert verdicts["INPUT"].explanation == "section is empty"
        assert verdicts["OUTPUT"].verdict == VerdictStatus.PASS


class TestProperties:
    """Properties that hold for every packaged template."""

    @pytest.mark.parametrize("template_id", TEMPLATES)
    def test_satisfying_document_is_conformant(self, registry, template_id):
        """Verify explicit satisfying sections for every rule give a full score."""
        ruleset = registry.get_rule_set(template_id)
        doc = Document(text=satisfying_document(ruleset), template_id=template_id)

        report = evaluate(doc, ruleset)

        assert report.status == ConformanceStatus.CONFORMANT
        assert report.score == 1.0
        assert all(v.verdict == VerdictStatus.PASS for v in report.verdicts)

    @pytest.mark.parametrize("template_id", TEMPLATES)
    def test_idempotent(self, registry, template_id):
        """Verify evaluating twice yields identical reports."""
        ruleset = registry.get_rule_set(template_id)
        doc = Document(text="## Input\n- a\nPROCESSING: x\n", template_id=template_id)

        first = evaluate(doc, ruleset)
        second = evaluate(doc, ruleset)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    @pytest.mark.parametrize("template_id", TEMPLATES)
    def test_order_independent(self, registry, template_id):
        """Verify permuting sections does not change the report."""
        ruleset = registry.get_rule_set(template_id)
        count = len(dict.fromkeys(r.label for r in ruleset.rules))
        forward = satisfying_document(ruleset)
        backward = satisfying_document(ruleset, order=list(reversed(range(count))))

        assert evaluate(Document(text=forward, template_id=template_id), ruleset) == \
            evaluate(Document(text=backward, template_id=template_id), ruleset)

    def test_order_independent_partial(self, n8n_rules):
        """Verify order independence when some sections fail."""
        a = "## Output\n\nINPUT:\nform submission\n## Goal\nshort"
        b = "## Goal\nshort\nINPUT:\nform submission\n## Output\n"

        assert evaluate(Document(text=a, template_id="n8n-prompt"), n8n_rules) == \
            evaluate(Document(text=b, template_id="n8n-prompt"), n8n_rules)

    def test_synonym_normalization(self, n8n_rules):
        """Verify '## Input' and 'INPUTS:' produce identical verdicts."""
        heading = evaluate(Document(text="## Input\nWebhook call\n", template_id="n8n-prompt"), n8n_rules)
        keyword = evaluate(Document(text="INPUTS:\nWebhook call\n", template_id="n8n-prompt"), n8n_rules)

        assert heading.verdicts[0] == keyword.verdicts[0]
        assert heading == keyword

    def test_verdict_order_follows_ruleset(self, n8n_rules):
        """Verify verdicts come in rule declaration order."""
        report = evaluate(Document(text="OUTPUT: x\nINPUT: y", template_id="n8n-prompt"), n8n_rules)

        assert [v.label for v in report.verdicts] == [r.label for r in n8n_rules.rules]


class TestDuplicates:
    """Tests for repeated section labels."""

    RULES = {
        "template": "dup",
        "rules": [{"id": "r", "label": "ITEMS", "check": {"min_items": 2}}],
    }

    def test_first_occurrence_wins(self):
        """Verify only the first ITEMS section is evaluated by default."""
        ruleset = parse_ruleset(self.RULES)
        text = "## Items\n- a\n## Items\n- b\n"

        report = evaluate(Document(text=text, template_id="dup"), ruleset)

        assert report.verdicts[0].verdict == VerdictStatus.FAIL

    def test_concatenate_policy(self):
        """Verify the concatenate setting joins repeated bodies."""
        ruleset = parse_ruleset({**self.RULES, "settings": {"duplicates": "concatenate"}})
        text = "## Items\n- a\n## Items\n- b\n"

        report = evaluate(Document(text=text, template_id="dup"), ruleset)

        assert report.verdicts[0].verdict == VerdictStatus.PASS

    def test_index_sections(self):
        sections = list(extract("# A\none\n# A\ntwo"))

        assert index_sections(sections)["A"] == "one"
        assert index_sections(sections, DuplicatePolicy.CONCATENATE)["A"] == "one\ntwo"


class TestAggregation:
    """Tests for score and status aggregation."""

    def test_no_required_rules_is_vacuously_conformant(self):
        """Verify a ruleset with only optional rules scores 1.0."""
        ruleset = parse_ruleset({
            "template": "opt",
            "rules": [{"id": "o", "label": "NOTES", "kind": "optional"}],
        })

        report = evaluate(Document(text="", template_id="opt"), ruleset)

        assert report.score == 1.0
        assert report.status == ConformanceStatus.CONFORMANT
        assert report.verdicts[0].verdict == VerdictStatus.WARN

    def test_empty_ruleset(self):
        report = summarize("none", [])

        assert report.score == 1.0
        assert report.is_conformant

    def test_warnings_do_not_break_conformance(self):
        verdicts = [
            Verdict(label="A", kind=RequirementKind.REQUIRED, verdict=VerdictStatus.PASS, explanation="ok"),
            Verdict(label="B", kind=RequirementKind.OPTIONAL, verdict=VerdictStatus.WARN, explanation="w"),
        ]

        report = summarize("t", verdicts)

        assert report.is_conformant
        assert report.score == 1.0
        assert report.required_counts() == (1, 1)

    def test_evaluate_rule_absent(self):
        rule = Rule(id="x", label="X", kind=RequirementKind.OPTIONAL)

        assert evaluate_rule(rule, None).verdict == VerdictStatus.WARN


class TestConformanceEvaluator:
    """Tests for registry-backed evaluation."""

    def test_evaluate_document(self, registry):
        evaluator = ConformanceEvaluator(registry)
        doc = Document(text="INPUT:\nManual trigger\n", template_id="n8n-prompt")

        assert evaluator.evaluate_document(doc).score == 0.25

    def test_unknown_template(self, registry):
        evaluator = ConformanceEvaluator(registry)

        with pytest.raises(UnknownTemplate):
            evaluator.evaluate_document(Document(text="", template_id="nope"))
