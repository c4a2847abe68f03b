"""Tests for the template pipeline orchestrator."""
import pytest

from app.models.domain import LegalArea, UserPreferences
from app.services.template_pipeline import TemplatePipeline
from app.utils.errors import DocumentExtractionError, DocumentTooShortError


@pytest.mark.asyncio
async def test_too_short_document_is_rejected(make_docx, failing_llm):
    pipeline = TemplatePipeline(llm=failing_llm)

    with pytest.raises(DocumentTooShortError) as exc_info:
        await pipeline.process_document(make_docx(["muito curto"]))

    assert exc_info.value.length == 11
    assert exc_info.value.user_message == "Documento muito pequeno ou sem conteúdo válido"


def test_length_check_ignores_surrounding_whitespace(failing_llm):
    with pytest.raises(DocumentTooShortError):
        TemplatePipeline(llm=failing_llm).analyze_text("   " + "x" * 49 + "\n" * 40)


def test_exactly_minimum_length_is_accepted(failing_llm):
    analysis = TemplatePipeline(llm=failing_llm).analyze_text("x" * 50)
    assert analysis.classification.area == LegalArea.CIVIL


@pytest.mark.asyncio
async def test_unreadable_bytes_propagate_extraction_error(failing_llm):
    with pytest.raises(DocumentExtractionError):
        await TemplatePipeline(llm=failing_llm).process_document(b"PK\x03\x04 broken zip")


@pytest.mark.asyncio
async def test_full_analysis_of_petition(peticao_docx, failing_llm):
    analysis = await TemplatePipeline(llm=failing_llm).process_document(peticao_docx)

    assert [s.name for s in analysis.sections] == [
        "Vocativo",
        "Partes",
        "Fatos",
        "Fundamentação Jurídica",
        "Pedidos",
        "Conclusão",
    ]
    names = {v.name for v in analysis.variables}
    assert {"NOME_CLIENTE", "CPF_CLIENTE", "DATA_CONTRATO", "VALOR_INDENIZACAO"} <= names
    assert {"COMARCA", "ENDERECO"} <= names
    assert analysis.classification.area == LegalArea.CIVIL
    assert analysis.quality.completeness == 100
    assert analysis.quality.structure == 100

    metadata = analysis.metadata
    assert metadata["sections_found"] == 6
    assert metadata["variables_found"] == len(analysis.variables)
    assert metadata["text_length"] == len(analysis.extracted_text)
    assert metadata["paragraph_count"] == 9
    assert isinstance(metadata["processing_time_ms"], int)


def test_analysis_is_deterministic(peticao_text, failing_llm):
    pipeline = TemplatePipeline(llm=failing_llm)
    first = pipeline.analyze_text(peticao_text)
    second = pipeline.analyze_text(peticao_text)

    assert first.sections == second.sections
    assert first.variables == second.variables
    assert first.classification == second.classification
    assert first.quality == second.quality
    assert pipeline.synthesize_prompt(first) == pipeline.synthesize_prompt(second)


@pytest.mark.asyncio
async def test_create_agent_survives_backend_failure(peticao_text, failing_llm):
    pipeline = TemplatePipeline(llm=failing_llm)
    analysis = pipeline.analyze_text(peticao_text)
    result = await pipeline.create_agent(analysis, UserPreferences())

    assert result.suggested_name == "Especialista Civil"
    assert result.suggested_description == "Especialista em civil focado em contrato"
    assert "Civil" in result.specializations
