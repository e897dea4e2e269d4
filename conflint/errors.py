"""
Errors — Fatal conditions reported by the linter.

Malformed documents are not errors: any text is accepted and evaluated.
Only problems with the run itself (unreadable file, unknown template,
broken ruleset, unwritable report file) stop it.
"""

from __future__ import annotations

from collections.abc import Iterable


class ConflintError(Exception):
    """Base class for fatal linter errors."""


class UnreadableInput(ConflintError):
    """The document could not be read or decoded."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class UnknownTemplate(ConflintError):
    """No ruleset is registered for the requested template id."""

    def __init__(self, template_id: str, known: Iterable[str] = ()):
        self.template_id = template_id
        self.known = tuple(sorted(known))
        message = f"unknown template: {template_id!r}"
        if self.known:
            message += f" (known: {', '.join(self.known)})"
        super().__init__(message)


class InvalidRuleSet(ConflintError):
    """A ruleset definition is malformed or violates a ruleset invariant."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"invalid ruleset {source}: {reason}")
        self.source = source
        self.reason = reason


class UnwritableOutput(ConflintError):
    """The report could not be written to the requested file."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot write {path}: {reason}")
        self.path = path
        self.reason = reason
