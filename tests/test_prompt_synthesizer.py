"""Tests for master-prompt synthesis."""
from app.models.domain import (
    DocumentClassification,
    LegalArea,
    QualityMetrics,
    Section,
    SectionType,
    Variable,
    VariableType,
)
from app.services.prompt_synthesizer import (
    AREA_INSTRUCTIONS,
    describe_sections,
    describe_variables,
    format_confidence,
    synthesize_prompt,
)


SECTIONS = [
    Section(name="Fatos", section_type=SectionType.BODY, required=True, order=0),
    Section(name="DA TUTELA ANTECIPADA", section_type=SectionType.BODY, required=False, order=1),
]
VARIABLES = [
    Variable(name="DATA_CONTRATO", variable_type=VariableType.DATE, pattern="{{DATA_CONTRATO}}",
             confidence=0.95, required=True),
    Variable(name="DATA_1", variable_type=VariableType.DATE, pattern="__/__/____", confidence=0.7),
]
CLASSIFICATION = DocumentClassification(
    area=LegalArea.TRABALHISTA, subtype="rescisão", confidence=100 / 3,
    keywords=["empregado", "rescisão"],
)
QUALITY = QualityMetrics(completeness=25, clarity=97, structure=40, legal_compliance=0, overall=41)


def _prompt(text: str = "Texto do modelo.") -> str:
    return synthesize_prompt(SECTIONS, VARIABLES, CLASSIFICATION, QUALITY, text)


def test_prompt_states_classification_and_quality():
    prompt = _prompt()

    assert prompt.startswith(
        "Você é um especialista jurídico brasileiro especializado em trabalhista, "
        "especificamente em rescisão."
    )
    assert "- Área jurídica: TRABALHISTA (33.3% confiança)" in prompt
    assert "- Qualidade geral: 41/100" in prompt
    assert "- Clareza: 97/100" in prompt
    assert "PALAVRAS-CHAVE IDENTIFICADAS: empregado, rescisão" in prompt


def test_sections_are_numbered_from_one():
    assert describe_sections(SECTIONS) == (
        "1. Fatos (body) - OBRIGATÓRIO\n"
        "2. DA TUTELA ANTECIPADA (body)"
    )


def test_only_confident_variables_are_listed():
    assert describe_variables(VARIABLES) == "- DATA_CONTRATO (date): obrigatório"


def test_area_guidance_comes_from_lookup():
    assert AREA_INSTRUCTIONS[LegalArea.TRABALHISTA] in _prompt()


def test_checklist_has_seven_items():
    prompt = _prompt()
    for n in range(1, 8):
        assert f"\n{n}. " in prompt
    assert '5. Mantenha coerência com o subtipo "rescisão"' in prompt


def test_long_source_is_truncated_with_marker():
    prompt = _prompt("x" * 2500)
    assert "x" * 2000 + "..." in prompt
    assert "x" * 2001 not in prompt


def test_short_source_is_not_marked():
    assert "Texto do modelo.\n\nIMPORTANTE" in _prompt()


def test_output_is_byte_identical_for_identical_input():
    assert _prompt() == _prompt()


def test_format_confidence():
    assert format_confidence(95.0) == "95"
    assert format_confidence(66.66666) == "66.7"
    assert format_confidence(30) == "30"
