"""
Structural inference for Brazilian legal templates.

Each non-blank line is tested against an ordered table of legal-section
patterns (vocative, parties, facts, law, requests, closing).  Independently,
an all-caps line of three or more words is treated as an optional heading and
typed by a small keyword lookup.  Sections are unique by
``(name.lower(), section_type)``; the first occurrence wins.

Zero sections is a valid result — there is no default skeleton on this path.
"""
from __future__ import annotations

import logging
import re
from typing import List, Pattern, Set, Tuple

from app.models.domain import Section, SectionType
from app.utils.helpers import contains_any

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pattern tables
# ---------------------------------------------------------------------------

# (matcher, section name, section type), evaluated in this order for every line
LEGAL_SECTION_PATTERNS: List[Tuple[Pattern[str], str, SectionType]] = [
    (re.compile(r"^(EXCELENTÍSSIMO|MERITÍSSIMO|ILUSTRÍSSIMO)", re.IGNORECASE),
     "Vocativo", SectionType.HEADER),
    (re.compile(r"^(REQUERENTE|AUTOR|REQUERIDO|RÉU)\s*:", re.IGNORECASE),
     "Partes", SectionType.HEADER),
    (re.compile(r"^(DOS\s+FATOS|RELATÓRIO|HISTÓRICO)", re.IGNORECASE),
     "Fatos", SectionType.BODY),
    (re.compile(r"^(DO\s+DIREITO|FUNDAMENTAÇÃO|MÉRITO)", re.IGNORECASE),
     "Fundamentação Jurídica", SectionType.BODY),
    (re.compile(r"^(DOS\s+PEDIDOS|REQUERIMENTOS)", re.IGNORECASE),
     "Pedidos", SectionType.CONCLUSION),
    (re.compile(r"^(TERMOS|CONCLUSÃO)", re.IGNORECASE),
     "Conclusão", SectionType.CONCLUSION),
]

_UPPERCASE_HEADING_RE = re.compile(r"^[A-ZÁÉÍÓÚÂÊÎÔÛÃÕÇ\s]+$")

HEADING_MIN_LENGTH = 10     # strictly greater than
HEADING_MIN_WORDS = 3

HEADER_KEYWORDS = ("identificação", "qualificação", "partes", "processo")
CONCLUSION_KEYWORDS = ("pedidos", "requerimentos", "conclusão", "termos")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def detect_sections(text: str) -> List[Section]:
    """
    Scan *text* line by line and return the detected sections sorted by order.

    Never raises; returns an empty list when nothing matches.
    """
    sections: List[Section] = []
    seen: Set[Tuple[str, SectionType]] = set()

    def _emit(name: str, section_type: SectionType, required: bool,
              line_index: int, line: str) -> None:
        key = (name.lower(), section_type)
        if key in seen:
            return
        seen.add(key)
        sections.append(
            Section(
                name=name,
                section_type=section_type,
                required=required,
                order=len(sections),
                start_line=line_index,
                content=line,
            )
        )

    for line_index, raw_line in enumerate(text.split("\n")):
        line = raw_line.strip()
        if not line:
            continue

        for pattern, name, section_type in LEGAL_SECTION_PATTERNS:
            if pattern.search(line):
                _emit(name, section_type, True, line_index, line)

        if is_uppercase_heading(line):
            _emit(line, infer_section_type(line), False, line_index, line)

    logger.debug("detect_sections: %d sections", len(sections))
    return sorted(sections, key=lambda s: s.order)


def is_uppercase_heading(line: str) -> bool:
    """True for an all-caps, letters-only line of at least three words."""
    return (
        len(line) > HEADING_MIN_LENGTH
        and line == line.upper()
        and bool(_UPPERCASE_HEADING_RE.match(line))
        and len(line.split()) >= HEADING_MIN_WORDS
    )


def infer_section_type(title: str) -> SectionType:
    """Map a free-form heading to header / conclusion / body by keyword."""
    lower_title = title.lower()
    if contains_any(lower_title, HEADER_KEYWORDS):
        return SectionType.HEADER
    if contains_any(lower_title, CONCLUSION_KEYWORDS):
        return SectionType.CONCLUSION
    return SectionType.BODY
