import os

import pytest

# Keep stderr quiet; set before any conflint module configures logging
os.environ["CONFLINT_LOG_LEVEL"] = "silent"

from conflint.rules.registry import load_registry  # noqa: E402


@pytest.fixture(scope="session")
def registry():
    """Registry of the packaged templates."""
    return load_registry()


@pytest.fixture(scope="session")
def n8n_rules(registry):
    return registry.get_rule_set("n8n-prompt")


@pytest.fixture(scope="session")
def security_rules(registry):
    return registry.get_rule_set("security-checklist")


@pytest.fixture(scope="session")
def design_rules(registry):
    return registry.get_rule_set("design-checklist")


@pytest.fixture
def ruleset_file(tmp_path):
    """Write a YAML ruleset to a temp file and return its path."""
    def _write(content: str, name: str = "custom.yaml"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write
