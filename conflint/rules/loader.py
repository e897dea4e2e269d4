"""
Rule Loader — Load and parse template rulesets from YAML files.

Each packaged template lives in `rulesets/<template-id>.yaml`:

    template: n8n-prompt
    name: N8N Workflow Prompt
    description: ...
    settings:
      duplicates: first
    synonyms:
      INPUT: [INPUTS, TRIGGER]
    rules:
      - id: n8n-input
        label: INPUT
        kind: required
        check:
          min_items: 2

Malformed files are rejected as a whole. A ruleset that loads is safe to
evaluate against any text.
"""

import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Union

import yaml

from conflint.core.logging import LogChannel, get_logger
from conflint.errors import InvalidRuleSet
from conflint.extract.labels import normalize_label
from conflint.ir.enums import DuplicatePolicy, RequirementKind
from conflint.ir.schema import PREAMBLE_LABEL
from conflint.rules.models import ContentCheck, Rule, RuleSet, RuleSetSettings

log = get_logger(LogChannel.RULES)

# Default ruleset directory
RULESETS_DIR = Path(__file__).parent / "rulesets"


def load_ruleset_from_path(path: Union[str, Path]) -> RuleSet:
    """
    Load a ruleset from an arbitrary YAML file.

    Raises:
        InvalidRuleSet: If the file is unreadable or the ruleset is invalid
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise InvalidRuleSet(str(path), e.strerror or str(e)) from e
    except yaml.YAMLError as e:
        raise InvalidRuleSet(str(path), f"YAML error: {e}") from e

    ruleset = parse_ruleset(data, source=str(path))
    log.verbose(
        "ruleset_loaded",
        template_id=ruleset.template_id,
        rules=len(ruleset.rules),
        path=str(path),
    )
    return ruleset


def parse_ruleset(data: Any, source: str = "<memory>") -> RuleSet:
    """Parse a ruleset from its dictionary form."""
    if not isinstance(data, dict):
        raise InvalidRuleSet(source, "top level must be a mapping")

    template_id = data.get("template")
    if not isinstance(template_id, str) or not template_id.strip():
        raise InvalidRuleSet(source, "missing 'template' id")
    template_id = template_id.strip()

    settings = _parse_settings(data.get("settings") or {}, source)
    synonyms = _parse_synonyms(data.get("synonyms") or {}, source)

    raw_rules = data.get("rules") or []
    if not isinstance(raw_rules, list):
        raise InvalidRuleSet(source, "'rules' must be a list")

    rules: list[Rule] = []
    seen_keys: set[tuple[str, RequirementKind]] = set()
    seen_ids: set[str] = set()
    for index, rule_data in enumerate(raw_rules):
        rule = parse_rule(rule_data, synonyms, source=f"{source} rule #{index + 1}")
        if rule.key in seen_keys:
            raise InvalidRuleSet(
                source,
                f"duplicate rule for label {rule.label!r} with kind {rule.kind.value!r}",
            )
        if rule.id in seen_ids:
            raise InvalidRuleSet(source, f"duplicate rule id {rule.id!r}")
        seen_keys.add(rule.key)
        seen_ids.add(rule.id)
        rules.append(rule)

    return RuleSet(
        template_id=template_id,
        name=str(data.get("name", template_id)),
        description=str(data.get("description", "")).strip(),
        rules=tuple(rules),
        synonyms=synonyms,
        settings=settings,
    )


def parse_rule(data: Any, synonyms: dict[str, str], source: str = "<memory>") -> Rule:
    """Parse a single rule from its dictionary form."""
    if not isinstance(data, dict):
        raise InvalidRuleSet(source, "rule must be a mapping")

    try:
        raw_label = data["label"]
        rule_id = str(data["id"])
    except KeyError as e:
        raise InvalidRuleSet(source, f"missing field {e.args[0]!r}") from e

    label = normalize_label(str(raw_label))
    label = synonyms.get(label, label)
    if not label:
        raise InvalidRuleSet(source, "empty label")
    if label == PREAMBLE_LABEL:
        raise InvalidRuleSet(source, f"{PREAMBLE_LABEL} is reserved")

    try:
        kind = RequirementKind(data.get("kind", RequirementKind.REQUIRED.value))
    except ValueError as e:
        raise InvalidRuleSet(source, f"unknown kind {data.get('kind')!r}") from e

    return Rule(
        id=rule_id,
        label=label,
        kind=kind,
        check=_parse_check(data.get("check") or {}, source),
        description=str(data.get("description", "")).strip(),
    )


def _parse_check(data: Any, source: str) -> ContentCheck:
    if not isinstance(data, dict):
        raise InvalidRuleSet(source, "'check' must be a mapping")

    unknown = set(data) - {"min_length", "min_items", "pattern", "contains"}
    if unknown:
        raise InvalidRuleSet(source, f"unknown check fields: {', '.join(sorted(unknown))}")

    min_length = _parse_count(data.get("min_length"), "min_length", source)
    min_items = _parse_count(data.get("min_items"), "min_items", source)

    pattern = None
    if data.get("pattern") is not None:
        try:
            pattern = re.compile(str(data["pattern"]), re.IGNORECASE | re.MULTILINE)
        except re.error as e:
            raise InvalidRuleSet(source, f"invalid pattern: {e}") from e

    contains = data.get("contains") or []
    if isinstance(contains, str):
        contains = [contains]
    if not isinstance(contains, list):
        raise InvalidRuleSet(source, "'contains' must be a list of terms")

    return ContentCheck(
        min_length=min_length,
        min_items=min_items,
        pattern=pattern,
        contains=tuple(str(term) for term in contains),
    )


def _parse_count(value: Any, name: str, source: str):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidRuleSet(source, f"'{name}' must be a non-negative integer")
    return value


def _parse_settings(data: Any, source: str) -> RuleSetSettings:
    if not isinstance(data, dict):
        raise InvalidRuleSet(source, "'settings' must be a mapping")
    try:
        duplicates = DuplicatePolicy(data.get("duplicates", DuplicatePolicy.FIRST.value))
    except ValueError as e:
        raise InvalidRuleSet(source, f"unknown duplicates policy {data.get('duplicates')!r}") from e
    return RuleSetSettings(duplicates=duplicates)


def _parse_synonyms(data: Any, source: str) -> MappingProxyType:
    """Build the variant -> canonical table. Canonical labels map to themselves."""
    if not isinstance(data, dict):
        raise InvalidRuleSet(source, "'synonyms' must be a mapping")

    table: dict[str, str] = {}
    for canonical_raw, variants in data.items():
        canonical = normalize_label(str(canonical_raw))
        if isinstance(variants, str):
            variants = [variants]
        if not isinstance(variants, list):
            raise InvalidRuleSet(source, f"synonyms for {canonical!r} must be a list")

        table.setdefault(canonical, canonical)
        for variant in variants:
            key = normalize_label(str(variant))
            previous = table.get(key)
            if previous is not None and previous != canonical:
                raise InvalidRuleSet(
                    source,
                    f"synonym {key!r} maps to both {previous!r} and {canonical!r}",
                )
            table[key] = canonical

    return MappingProxyType(table)


def list_ruleset_files(directory: Path = RULESETS_DIR) -> list[Path]:
    """Packaged ruleset files, in stable order."""
    return sorted(directory.glob("*.yaml"))
