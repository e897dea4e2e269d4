"""
IR Enums — Requirement kinds, verdicts, and section markers.

No stringly-typed constants scattered across components.
"""

from enum import Enum


class RequirementKind(str, Enum):
    """Whether a rule's section must be present."""

    REQUIRED = "required"
    OPTIONAL = "optional"


class VerdictStatus(str, Enum):
    """
    Outcome of checking one rule against one document.

    - PASS: section present and its content check holds
    - FAIL: a required rule is unmet
    - WARN: an optional rule is unmet
    """

    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"


class ConformanceStatus(str, Enum):
    """Aggregate status of a report."""

    CONFORMANT = "conformant"
    NON_CONFORMANT = "non-conformant"


class MarkerType(str, Enum):
    """How a section was opened in the source text."""

    PREAMBLE = "preamble"    # Implicit, text before the first marker
    HEADING = "heading"      # "## Input"
    KEYWORD = "keyword"      # "INPUT:"


class OutputKind(str, Enum):
    """Report rendering formats."""

    HUMAN = "human"
    MACHINE = "machine"


class DuplicatePolicy(str, Enum):
    """How repeated sections with one label are resolved."""

    FIRST = "first"              # Only the first occurrence counts
    CONCATENATE = "concatenate"  # Bodies joined in document order
