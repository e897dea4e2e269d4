"""
Rule Models — Data structures for templates, rules, and content checks.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from conflint.ir.enums import DuplicatePolicy, RequirementKind

# "- item", "* item", "+ item", "1. item", "2) item", "- [x] item"
BULLET_PATTERN = re.compile(r"^\s*(?:[-*+]|\d{1,3}[.)])\s+\S")


def count_bullets(body: str) -> int:
    """Count list items in a section body."""
    return sum(1 for line in body.splitlines() if BULLET_PATTERN.match(line))


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a content check against one section body."""
    ok: bool
    explanation: str


@dataclass(frozen=True)
class ContentCheck:
    """
    Content predicate for a section body.

    Every configured condition must hold. With no conditions configured
    the body must simply be non-empty. Total over all strings: the pattern
    is compiled when the ruleset loads, never during evaluation.
    """
    min_length: Optional[int] = None
    min_items: Optional[int] = None
    pattern: Optional[re.Pattern] = None
    contains: tuple[str, ...] = ()

    @property
    def is_default(self) -> bool:
        return (
            self.min_length is None
            and self.min_items is None
            and self.pattern is None
            and not self.contains
        )

    def evaluate(self, body: str) -> CheckResult:
        """Apply the check to a section body."""
        text = body.strip()

        if self.is_default:
            if not text:
                return CheckResult(False, "section is empty")
            return CheckResult(True, "section present")

        if self.min_length is not None and len(text) < self.min_length:
            return CheckResult(
                False,
                f"expected >= {self.min_length} characters, found {len(text)}",
            )

        items = count_bullets(body)
        if self.min_items is not None and items < self.min_items:
            return CheckResult(
                False,
                f"expected >= {self.min_items} bullet items, found {items}",
            )

        if self.pattern is not None and not self.pattern.search(body):
            return CheckResult(False, f"expected text matching /{self.pattern.pattern}/")

        lowered = body.lower()
        missing = [term for term in self.contains if term.lower() not in lowered]
        if missing:
            return CheckResult(False, f"missing terms: {', '.join(missing)}")

        if self.min_items is not None:
            return CheckResult(True, f"found {items} bullet items")
        return CheckResult(True, "content check passed")


@dataclass(frozen=True)
class Rule:
    """A single required/optional expectation about one section."""
    id: str
    label: str
    kind: RequirementKind
    check: ContentCheck = field(default_factory=ContentCheck)
    description: str = ""

    @property
    def key(self) -> tuple[str, RequirementKind]:
        """Dedup key within a ruleset."""
        return (self.label, self.kind)

    @property
    def is_required(self) -> bool:
        return self.kind == RequirementKind.REQUIRED


@dataclass(frozen=True)
class RuleSetSettings:
    """Per-template evaluation settings."""
    duplicates: DuplicatePolicy = DuplicatePolicy.FIRST


@dataclass(frozen=True)
class RuleSet:
    """
    An ordered collection of rules for one template.

    `synonyms` maps each normalized variant (including the canonical label
    itself) to its canonical label.
    """
    template_id: str
    name: str
    description: str
    rules: tuple[Rule, ...]
    synonyms: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    settings: RuleSetSettings = field(default_factory=RuleSetSettings)

    @property
    def labels(self) -> frozenset[str]:
        """Every canonical label the ruleset knows about."""
        return frozenset(self.synonyms.values()) | {r.label for r in self.rules}

    @property
    def required_rules(self) -> tuple[Rule, ...]:
        return tuple(r for r in self.rules if r.is_required)
