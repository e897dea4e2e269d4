"""
IR Schema — Pydantic models for documents, sections, verdicts, and reports.

All models are frozen: a Document is immutable once loaded, and Sections,
Verdicts and Reports are derived values owned by one evaluation pass.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from conflint.ir.enums import (
    ConformanceStatus,
    MarkerType,
    RequirementKind,
    VerdictStatus,
)

PREAMBLE_LABEL = "PREAMBLE"


class Document(BaseModel):
    """Raw input text plus the template it should conform to."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Raw document text")
    template_id: str = Field(..., description="Template identifier (e.g. n8n-prompt)")
    source: Optional[str] = Field(None, description="File path or <stdin>, informational only")


class Section(BaseModel):
    """A labeled, contiguous span of a document."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Canonical label (uppercased, synonym-resolved)")
    ordinal: int = Field(..., ge=0, description="Position of appearance, PREAMBLE is 0")
    body: str = Field(default="", description="Raw text between this marker and the next")
    line: int = Field(default=0, ge=0, description="1-based line of the marker (0 for PREAMBLE)")
    marker: MarkerType = Field(default=MarkerType.PREAMBLE)
    heading: str = Field(default="", description="Marker text as written in the document")


class Verdict(BaseModel):
    """Result of evaluating one rule against a document."""

    model_config = ConfigDict(frozen=True)

    label: str
    kind: RequirementKind
    verdict: VerdictStatus
    explanation: str


class Report(BaseModel):
    """
    Ordered verdicts plus aggregate status and score.

    Field order is part of the machine format and must not change.
    """

    model_config = ConfigDict(frozen=True)

    template_id: str
    verdicts: list[Verdict] = Field(default_factory=list)
    status: ConformanceStatus
    score: float = Field(..., ge=0.0, le=1.0)

    @property
    def is_conformant(self) -> bool:
        return self.status == ConformanceStatus.CONFORMANT

    def count(self, status: VerdictStatus) -> int:
        """Number of verdicts with the given status."""
        return sum(1 for v in self.verdicts if v.verdict == status)

    def required_counts(self) -> tuple[int, int]:
        """(passed, total) over required rules."""
        required = [v for v in self.verdicts if v.kind == RequirementKind.REQUIRED]
        passed = sum(1 for v in required if v.verdict == VerdictStatus.PASS)
        return passed, len(required)
