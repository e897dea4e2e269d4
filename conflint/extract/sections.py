"""
Section Extractor — Split a document into labeled sections.

A line classifier walks the text once, driven by a small compiled
pattern table:

    SEEKING_MARKER  no marker seen yet, lines go to PREAMBLE
    IN_SECTION      lines go to the body of the last opened section
    IN_FENCE        inside a ``` / ~~~ block, lines are body text only

Markers are Markdown headings (`## Input`) and keyword-colon lines
(`INPUT:` / `Input: manual trigger`). A keyword line opens a section when
its label is known to the template vocabulary or is written in capitals;
anything else (`Note: ...`) stays in the current body.

Extraction never fails. Text with no markers yields a single PREAMBLE.
Cost is linear in document length.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from conflint.core.logging import LogChannel, get_logger
from conflint.extract.labels import canonical_label, normalize_label
from conflint.ir.enums import MarkerType
from conflint.ir.schema import PREAMBLE_LABEL, Section
from conflint.rules.models import RuleSet

log = get_logger(LogChannel.EXTRACT)

# Label for an author-written "Preamble" marker; PREAMBLE itself is
# reserved for the implicit text before the first marker.
EXPLICIT_PREAMBLE_LABEL = f"{PREAMBLE_LABEL} (EXPLICIT)"


class ScanState(str, Enum):
    """Line classifier states."""
    SEEKING_MARKER = "seeking_marker"
    IN_SECTION = "in_section"
    IN_FENCE = "in_fence"


# "## Heading", up to three leading spaces, optional closing hashes
HEADING_PATTERN = re.compile(r"^ {0,3}#{1,6}[ \t]+(.*?)(?:[ \t]+#+)?[ \t]*$")

# "INPUT:", "Error Handling: text", "**Output:** text"; not "https://"
KEYWORD_PATTERN = re.compile(
    r"^[*_]{0,2}"
    r"([A-Za-z][\w&/'-]*(?:[ \t]+[\w&/'-]+){0,5})"
    r"[*_]{0,2}[ \t]*:[*_]{0,2}(?!//)[ \t]*(.*)$"
)

FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")


@dataclass(frozen=True)
class Vocabulary:
    """Synonym table and known labels of the active template."""
    synonyms: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    labels: frozenset[str] = frozenset()

    @classmethod
    def for_ruleset(cls, ruleset: RuleSet) -> "Vocabulary":
        return cls(synonyms=ruleset.synonyms, labels=ruleset.labels)

    def resolve(self, raw: str) -> str:
        return canonical_label(raw, self.synonyms)

    def is_known(self, label: str) -> bool:
        return label in self.labels


def _is_capitalized_keyword(raw: str) -> bool:
    letters = [c for c in raw if c.isalpha()]
    return len(letters) >= 2 and all(c.isupper() for c in letters)


@dataclass
class _OpenSection:
    label: str
    ordinal: int
    line: int
    marker: MarkerType
    heading: str
    lines: list[str] = field(default_factory=list)

    def close(self) -> Section:
        return Section(
            label=self.label,
            ordinal=self.ordinal,
            body="\n".join(self.lines).strip("\n"),
            line=self.line,
            marker=self.marker,
            heading=self.heading,
        )


class SectionExtractor:
    """
    Line-oriented section extractor bound to one template vocabulary.

    The extractor holds no per-document state; `extract` can be called
    any number of times, from any thread.
    """

    def __init__(self, vocabulary: Optional[Vocabulary] = None) -> None:
        self.vocabulary = vocabulary or Vocabulary()

    @classmethod
    def for_ruleset(cls, ruleset: RuleSet) -> "SectionExtractor":
        return cls(Vocabulary.for_ruleset(ruleset))

    def extract(self, text: str) -> "SectionSequence":
        """Return the lazy, restartable section sequence for `text`."""
        return SectionSequence(self, text)

    def classify(self, line: str) -> Optional[tuple[MarkerType, str, str, str]]:
        """
        Classify one line outside a fence.

        Returns (marker, label, heading, rest) when the line opens a
        section, otherwise None.
        """
        heading_match = HEADING_PATTERN.match(line)
        if heading_match:
            raw = heading_match.group(1)
            if normalize_label(raw):
                return MarkerType.HEADING, self._resolve(raw), raw.strip(), ""
            return None

        keyword_match = KEYWORD_PATTERN.match(line)
        if keyword_match:
            raw, rest = keyword_match.group(1), keyword_match.group(2)
            label = self._resolve(raw)
            if self.vocabulary.is_known(label) or _is_capitalized_keyword(raw):
                return MarkerType.KEYWORD, label, raw.strip(), rest
        return None

    def _resolve(self, raw: str) -> str:
        label = self.vocabulary.resolve(raw)
        if label == PREAMBLE_LABEL:
            return EXPLICIT_PREAMBLE_LABEL
        return label

    def scan(self, text: str) -> Iterator[Section]:
        """Generate sections in order of appearance."""
        state = ScanState.SEEKING_MARKER
        resume = ScanState.SEEKING_MARKER
        fence = ""
        current = _OpenSection(
            label=PREAMBLE_LABEL,
            ordinal=0,
            line=0,
            marker=MarkerType.PREAMBLE,
            heading="",
        )

        for number, line in enumerate(text.splitlines(), start=1):
            if state == ScanState.IN_FENCE:
                current.lines.append(line)
                closing = FENCE_PATTERN.match(line)
                if closing and closing.group(1)[0] == fence[0] and len(closing.group(1)) >= len(fence):
                    state = resume
                continue

            opening = FENCE_PATTERN.match(line)
            if opening:
                current.lines.append(line)
                fence = opening.group(1)
                resume = state
                state = ScanState.IN_FENCE
                continue

            marker = self.classify(line)
            if marker is None:
                current.lines.append(line)
                continue

            kind, label, heading, rest = marker
            log.debug("section_opened", label=label, line=number, marker=kind.value)
            yield current.close()
            current = _OpenSection(
                label=label,
                ordinal=current.ordinal + 1,
                line=number,
                marker=kind,
                heading=heading,
                lines=[rest] if rest else [],
            )
            state = ScanState.IN_SECTION

        yield current.close()


class SectionSequence:
    """
    Lazy, finite, restartable view of a document's sections.

    Each iteration re-scans the text, so two passes always agree.
    """

    def __init__(self, extractor: SectionExtractor, text: str) -> None:
        self._extractor = extractor
        self._text = text

    def __iter__(self) -> Iterator[Section]:
        return self._extractor.scan(self._text)

    def first(self, label: str) -> Optional[Section]:
        """First section carrying `label`, if any."""
        for section in self:
            if section.label == label:
                return section
        return None

    def labels(self) -> list[str]:
        return [section.label for section in self]


def extract(text: str, ruleset: Optional[RuleSet] = None) -> SectionSequence:
    """
    Extract sections from document text.

    Args:
        text: Raw document text
        ruleset: Template whose synonyms and labels drive recognition

    Returns:
        Lazy, restartable sequence of Section objects
    """
    extractor = SectionExtractor.for_ruleset(ruleset) if ruleset else SectionExtractor()
    return extractor.extract(text)
