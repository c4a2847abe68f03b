"""
Keyword-based legal-area classification.

Each area owns a fixed keyword list; its score is the fraction of those
keywords present in the lower-cased text.  The best score wins (ties go to
the earlier area in LegalArea order) and confidence is capped at 95 so the
classifier never reports certainty.  With no keyword hits at all the
document is classified as generic civil at confidence 30.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from app.models.domain import DocumentClassification, LegalArea
from app.utils.helpers import found_in

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

LEGAL_KEYWORDS: Dict[LegalArea, List[str]] = {
    LegalArea.CIVIL: ["contrato", "responsabilidade", "indenização", "danos", "família", "sucessões"],
    LegalArea.PENAL: ["crime", "delito", "prisão", "denúncia", "sentença", "absolvição"],
    LegalArea.TRABALHISTA: ["empregado", "salário", "jornada", "rescisão", "fgts", "inss"],
    LegalArea.TRIBUTARIO: ["imposto", "tributo", "icms", "ipi", "irpf", "contribuição"],
    LegalArea.ADMINISTRATIVO: ["licitação", "concurso", "servidor", "ato administrativo"],
    LegalArea.CONSTITUCIONAL: ["direitos fundamentais", "supremo", "constituição", "habeas corpus"],
}

# First literal hit wins
SUBTYPES: Dict[LegalArea, List[str]] = {
    LegalArea.CIVIL: ["contrato", "responsabilidade civil", "família", "sucessões", "propriedade"],
    LegalArea.PENAL: ["homicídio", "furto", "roubo", "estelionato", "tráfico"],
    LegalArea.TRABALHISTA: ["rescisão", "horas extras", "acidente trabalho", "assédio"],
    LegalArea.TRIBUTARIO: ["icms", "ipi", "irpf", "contribuições", "elisão"],
    LegalArea.ADMINISTRATIVO: ["licitação", "servidor público", "ato administrativo"],
    LegalArea.CONSTITUCIONAL: ["habeas corpus", "mandado segurança", "adin"],
}

GENERIC_SUBTYPE = "genérico"
FALLBACK_CONFIDENCE = 30.0
MAX_CONFIDENCE = 95.0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def classify_document(text: str) -> DocumentClassification:
    """Assign a legal area, subtype, confidence, and matched keywords to *text*."""
    lower_text = text.lower()

    best: Optional[Tuple[LegalArea, float, List[str]]] = None
    for area in LegalArea:
        keywords = LEGAL_KEYWORDS[area]
        matched = found_in(lower_text, keywords)
        score = len(matched) / len(keywords)
        if best is None or score > best[1]:
            best = (area, score, matched)

    if best is None or best[1] == 0:
        logger.debug("classify_document: no keyword hits, using generic civil")
        return fallback_classification()

    area, score, matched = best
    return DocumentClassification(
        area=area,
        subtype=infer_subtype(area, lower_text),
        confidence=min(score * 100, MAX_CONFIDENCE),
        keywords=matched,
    )


def infer_subtype(area: LegalArea, lower_text: str) -> str:
    for subtype in SUBTYPES.get(area, []):
        if subtype in lower_text:
            return subtype
    return GENERIC_SUBTYPE


def fallback_classification() -> DocumentClassification:
    return DocumentClassification(
        area=LegalArea.CIVIL,
        subtype=GENERIC_SUBTYPE,
        confidence=FALLBACK_CONFIDENCE,
        keywords=[],
    )
