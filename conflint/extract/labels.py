"""
Label Normalization — Map heading and keyword text to canonical labels.

`## 1. **Input:**`, `Input:` and `INPUT` all normalize to `INPUT`;
the template's synonym table then folds variants such as `INPUTS`
onto the canonical label.
"""

import re
from typing import Mapping

# Markdown emphasis and inline code markers
EMPHASIS_PATTERN = re.compile(r"[*_`]+")

# Leading enumeration: "1.", "2)", "A.", "iv)"
ENUMERATION_PATTERN = re.compile(r"^(?:\d{1,3}|[A-Za-z]|[ivxlcIVXLC]{1,5})[.)]\s+")

WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_label(raw: str) -> str:
    """
    Normalize heading/keyword text into label form.

    Strips emphasis, enumeration, and a trailing colon, collapses
    whitespace, and uppercases. Does not apply synonyms.
    """
    text = EMPHASIS_PATTERN.sub("", raw).strip()
    text = ENUMERATION_PATTERN.sub("", text)
    text = text.rstrip(":").strip()
    text = WHITESPACE_PATTERN.sub(" ", text)
    return text.upper()


def canonical_label(raw: str, synonyms: Mapping[str, str]) -> str:
    """Normalize `raw` and resolve it through a synonym table."""
    label = normalize_label(raw)
    return synonyms.get(label, label)
