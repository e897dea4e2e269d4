"""
Rule Set Registry — Template id to RuleSet lookup.

The registry is an explicit immutable value: build it once at startup
with `load_registry()` and pass it to whatever evaluates documents.
There is no module-level registry and no cache; concurrent readers need
no coordination.
"""

from collections.abc import Iterable, Iterator
from pathlib import Path
from types import MappingProxyType
from typing import Optional

from conflint.core.logging import LogChannel, get_logger
from conflint.errors import InvalidRuleSet, UnknownTemplate
from conflint.rules.loader import (
    RULESETS_DIR,
    list_ruleset_files,
    load_ruleset_from_path,
)
from conflint.rules.models import RuleSet

log = get_logger(LogChannel.RULES)


class RuleSetRegistry:
    """Read-only mapping from template id to RuleSet."""

    def __init__(self, rulesets: Iterable[RuleSet] = ()) -> None:
        table: dict[str, RuleSet] = {}
        for ruleset in rulesets:
            if ruleset.template_id in table:
                raise InvalidRuleSet(
                    ruleset.template_id, "template registered more than once"
                )
            table[ruleset.template_id] = ruleset
        self._rulesets = MappingProxyType(table)

    def get_rule_set(self, template_id: str) -> RuleSet:
        """
        Look up the ruleset for a template.

        Raises:
            UnknownTemplate: If no ruleset is registered under `template_id`
        """
        try:
            return self._rulesets[template_id]
        except KeyError:
            raise UnknownTemplate(template_id, self._rulesets.keys()) from None

    def with_ruleset(self, ruleset: RuleSet) -> "RuleSetRegistry":
        """Return a new registry that also holds `ruleset`, replacing any same-id entry."""
        table = dict(self._rulesets)
        table[ruleset.template_id] = ruleset
        return RuleSetRegistry(table.values())

    def template_ids(self) -> list[str]:
        return sorted(self._rulesets)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._rulesets

    def __iter__(self) -> Iterator[RuleSet]:
        return (self._rulesets[t] for t in self.template_ids())

    def __len__(self) -> int:
        return len(self._rulesets)


def load_registry(
    directory: Path = RULESETS_DIR,
    extra: Optional[Iterable[Path]] = None,
) -> RuleSetRegistry:
    """
    Build a registry from every ruleset file in `directory`.

    Args:
        directory: Folder of `<template-id>.yaml` files
        extra: Additional ruleset files, loaded after the packaged ones

    Raises:
        InvalidRuleSet: If any file fails to parse
    """
    rulesets = [load_ruleset_from_path(p) for p in list_ruleset_files(directory)]
    registry = RuleSetRegistry(rulesets)
    for path in extra or ():
        registry = registry.with_ruleset(load_ruleset_from_path(path))

    log.info("registry_loaded", templates=registry.template_ids())
    return registry
