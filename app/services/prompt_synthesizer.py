"""
Master-prompt synthesis.

Renders the structure, variables, classification, and quality metrics of an
analysed template into the natural-language prompt that conditions
downstream document generation.  The rendering is a pure function of its
inputs: identical inputs produce byte-identical prompts.

The template below is kept as a module-level constant so it can be tuned
without touching logic code.
"""
from __future__ import annotations

from typing import Dict, Sequence

from app.models.domain import (
    DocumentClassification,
    LegalArea,
    QualityMetrics,
    Section,
    Variable,
)
from app.utils.helpers import excerpt

PROMPT_VARIABLE_MIN_CONFIDENCE = 0.7
SOURCE_EXCERPT_CHARS = 2000

AREA_INSTRUCTIONS: Dict[LegalArea, str] = {
    LegalArea.CIVIL: (
        "- Use fundamentação no Código Civil e legislação específica\n"
        "- Cite jurisprudência do STJ quando relevante\n"
        "- Observe prazos prescricionais e decadenciais"
    ),
    LegalArea.PENAL: (
        "- Aplique o Código Penal e legislação especial\n"
        "- Observe princípios constitucionais penais\n"
        "- Use jurisprudência do STF e STJ"
    ),
    LegalArea.TRABALHISTA: (
        "- Fundamente na CLT e legislação trabalhista\n"
        "- Cite súmulas do TST\n"
        "- Observe princípios protetivos"
    ),
    LegalArea.TRIBUTARIO: (
        "- Use CTN e legislação tributária específica\n"
        "- Cite jurisprudência administrativa\n"
        "- Observe princípios tributários constitucionais"
    ),
    LegalArea.ADMINISTRATIVO: (
        "- Aplique a Lei 9.784/99 e legislação administrativa\n"
        "- Use precedentes administrativos\n"
        "- Observe princípios da administração pública"
    ),
    LegalArea.CONSTITUCIONAL: (
        "- Fundamente na Constituição Federal\n"
        "- Cite jurisprudência do STF\n"
        "- Observe direitos fundamentais"
    ),
}

DEFAULT_AREA_INSTRUCTIONS = "Use a legislação brasileira aplicável e jurisprudência pertinente"


_MASTER_PROMPT = """\
Você é um especialista jurídico brasileiro especializado em {area}, especificamente em {subtype}.

ANÁLISE DO DOCUMENTO MODELO:
- Área jurídica: {area_upper} ({confidence}% confiança)
- Subtipo: {subtype}
- Qualidade geral: {overall}/100
- Extensão: {text_length} caracteres
- Seções identificadas: {section_count}
- Variáveis detectadas: {variable_count}

ESTRUTURA OBRIGATÓRIA:
{sections_desc}

VARIÁVEIS PARA SUBSTITUIÇÃO:
{variables_desc}

MÉTRICAS DE QUALIDADE:
- Completude: {completeness}/100
- Clareza: {clarity}/100
- Estrutura: {structure}/100
- Conformidade legal: {legal_compliance}/100

INSTRUÇÕES ESPECÍFICAS PARA {area_upper}:
{area_instructions}

PALAVRAS-CHAVE IDENTIFICADAS: {keywords}

INSTRUÇÕES DE GERAÇÃO:
1. Mantenha RIGOROSAMENTE a estrutura identificada
2. Use linguagem jurídica formal brasileira específica para {area}
3. Substitua TODAS as variáveis pelos valores fornecidos
4. Preserve formatação, numeração e hierarquia
5. Mantenha coerência com o subtipo "{subtype}"
6. Use fundamentação legal sólida e atualizada
7. Aplique as melhores práticas de {area}

MODELO ORIGINAL (para referência de estilo):
{source_excerpt}

IMPORTANTE: Gere um documento juridicamente correto, tecnicamente preciso e formalmente adequado para {area} brasileiro.\
"""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def synthesize_prompt(
    sections: Sequence[Section],
    variables: Sequence[Variable],
    classification: DocumentClassification,
    quality: QualityMetrics,
    extracted_text: str,
) -> str:
    """Render the master prompt for an analysed template. Pure; never raises."""
    area = classification.area.value
    return _MASTER_PROMPT.format(
        area=area,
        area_upper=area.upper(),
        subtype=classification.subtype,
        confidence=format_confidence(classification.confidence),
        overall=quality.overall,
        text_length=len(extracted_text),
        section_count=len(sections),
        variable_count=len(variables),
        sections_desc=describe_sections(sections),
        variables_desc=describe_variables(variables),
        completeness=quality.completeness,
        clarity=quality.clarity,
        structure=quality.structure,
        legal_compliance=quality.legal_compliance,
        area_instructions=AREA_INSTRUCTIONS.get(classification.area, DEFAULT_AREA_INSTRUCTIONS),
        keywords=", ".join(classification.keywords),
        source_excerpt=excerpt(extracted_text, SOURCE_EXCERPT_CHARS),
    )


def describe_sections(sections: Sequence[Section]) -> str:
    """One ``N. Name (type)`` line per section, 1-indexed by order."""
    return "\n".join(
        f"{s.order + 1}. {s.name} ({s.section_type.value})"
        f"{' - OBRIGATÓRIO' if s.required else ''}"
        for s in sections
    )


def describe_variables(variables: Sequence[Variable]) -> str:
    """One line per variable whose confidence exceeds the prompt threshold."""
    return "\n".join(
        f"- {v.name} ({v.variable_type.value}): {'obrigatório' if v.required else 'opcional'}"
        for v in variables
        if v.confidence > PROMPT_VARIABLE_MIN_CONFIDENCE
    )


def format_confidence(confidence: float) -> str:
    """33.333… → '33.3', 95.0 → '95'."""
    return f"{round(confidence, 1):g}"
