"""
IR Serialization — JSON import/export for reports.
"""

from conflint.ir.schema import Report


def to_json(report: Report, indent: int = 2) -> str:
    """Serialize a Report to JSON string."""
    return report.model_dump_json(indent=indent)


def from_json(json_str: str) -> Report:
    """Deserialize a Report from JSON string."""
    return Report.model_validate_json(json_str)
