"""
Template quality metrics derived from the structure and variable passes.

    completeness      required sections relative to an ideal of four
    clarity           share of the text that is not placeholder material
    structure         20 points per section (50 when none were found)
    legal_compliance  25 points per legal-reasoning marker word

Every sub-score is clamped to [0, 100] and rounded half-up; ``overall`` is
the rounded mean of the four rounded sub-scores.
"""
from __future__ import annotations

from typing import List, Sequence

from app.models.domain import QualityMetrics, Section, Variable
from app.utils.helpers import clamp, found_in, round_half_up, safe_divide

IDEAL_REQUIRED_SECTIONS = 4
POINTS_PER_SECTION = 20
EMPTY_STRUCTURE_SCORE = 50
LEGAL_WORDS = ("considerando", "fundamentação", "jurisprudência", "doutrina")
POINTS_PER_LEGAL_WORD = 25


def score_quality(
    text: str,
    sections: Sequence[Section],
    variables: Sequence[Variable],
) -> QualityMetrics:
    """Compute QualityMetrics for *text*. Never raises, including on empty text."""
    required_sections = sum(1 for s in sections if s.required)
    completeness = min(required_sections / IDEAL_REQUIRED_SECTIONS, 1) * 100

    text_length = len(text)
    variable_length = sum(len("".join(v.examples)) for v in variables)
    clarity = min(safe_divide(text_length - variable_length, text_length), 1) * 100

    if sections:
        structure = min(len(sections) * POINTS_PER_SECTION, 100)
    else:
        structure = EMPTY_STRUCTURE_SCORE

    legal_hits: List[str] = found_in(text.lower(), LEGAL_WORDS)
    legal_compliance = min(len(legal_hits) * POINTS_PER_LEGAL_WORD, 100)

    scores = [
        round_half_up(clamp(completeness)),
        round_half_up(clamp(clarity)),
        round_half_up(clamp(structure)),
        round_half_up(clamp(legal_compliance)),
    ]
    return QualityMetrics(
        completeness=scores[0],
        clarity=scores[1],
        structure=scores[2],
        legal_compliance=scores[3],
        overall=round_half_up(sum(scores) / len(scores)),
    )
