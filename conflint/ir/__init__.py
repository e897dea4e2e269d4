"""
IR — Data model shared by extractor, evaluator, and formatter.
"""

from conflint.ir.enums import (
    ConformanceStatus,
    DuplicatePolicy,
    MarkerType,
    OutputKind,
    RequirementKind,
    VerdictStatus,
)
from conflint.ir.schema import (
    PREAMBLE_LABEL,
    Document,
    Report,
    Section,
    Verdict,
)

__all__ = [
    "ConformanceStatus",
    "DuplicatePolicy",
    "MarkerType",
    "OutputKind",
    "RequirementKind",
    "VerdictStatus",
    "PREAMBLE_LABEL",
    "Document",
    "Report",
    "Section",
    "Verdict",
]
