"""
conflint — Document Conformance Linter

Checks prompts and guideline documents against declarative structural
checklists: which sections must be present, and how much they must say.

Rules decide conformance. The linter never interprets meaning.
"""

__version__ = "0.1.0"
