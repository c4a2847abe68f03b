"""
Template processing endpoints.

POST /process         — analyse an uploaded DOCX; optionally suggest an agent.
POST /analyze-text    — same analysis on already-extracted text.
POST /process-legacy  — first-generation processor (headings + {{VARS}}).
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.config import settings
from app.models.domain import (
    AgentCreationResult,
    Complexity,
    Focus,
    Section,
    UserPreferences,
    Variable,
    WritingStyle,
)
from app.models.schemas import (
    AgentSchema,
    AnalyzeTextRequest,
    ClassificationSchema,
    DocumentStyleSchema,
    LegacyProcessResponse,
    QualityMetricsSchema,
    SectionSchema,
    TemplateProcessResponse,
    VariableSchema,
)
from app.services.legacy_processor import LegacyDocxProcessor, generate_master_prompt
from app.services.llm_client import GenerativeTextService, OllamaChatService
from app.services.template_pipeline import TemplateAnalysis, TemplatePipeline
from app.utils.errors import TemplateProcessingError
from app.utils.helpers import truncate_text

logger = logging.getLogger(__name__)

router = APIRouter()

READ_CHUNK_BYTES = 1024 * 1024


# ---------------------------------------------------------------------------
# Dependencies (overridable in tests via app.dependency_overrides)
# ---------------------------------------------------------------------------

def get_llm_service() -> GenerativeTextService:
    return OllamaChatService()


def get_pipeline(llm: GenerativeTextService = Depends(get_llm_service)) -> TemplatePipeline:
    return TemplatePipeline(llm=llm)


def get_legacy_processor() -> LegacyDocxProcessor:
    return LegacyDocxProcessor()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/process", response_model=TemplateProcessResponse)
async def process_template(
    file: UploadFile = File(...),
    create_agent: bool = Form(False),
    agent_name: Optional[str] = Form(None),
    complexity: Complexity = Form(Complexity.INTERMEDIATE),
    focus: Focus = Form(Focus.QUALITY),
    style: WritingStyle = Form(WritingStyle.FORMAL),
    pipeline: TemplatePipeline = Depends(get_pipeline),
) -> TemplateProcessResponse:
    """
    Upload a DOCX template and run the full analysis.

    - Max file size: 50 MB (configurable via MAX_FILE_SIZE)
    - When ``create_agent`` is true the response includes a suggested agent;
      the generative backend being down only degrades it to fallbacks.
    """
    data = await _read_upload(file)

    try:
        analysis = await pipeline.process_document(data)
    except TemplateProcessingError as exc:
        logger.info("process_template: %s rejected — %s", file.filename, exc)
        raise HTTPException(status_code=exc.status_code, detail=exc.user_message)

    analysis.metadata.update({"file_name": file.filename, "file_size": len(data)})
    preferences = UserPreferences(complexity=complexity, focus=focus, style=style)
    return await _build_response(pipeline, analysis, create_agent, agent_name, preferences)


@router.post("/analyze-text", response_model=TemplateProcessResponse)
async def analyze_text(
    request: AnalyzeTextRequest,
    pipeline: TemplatePipeline = Depends(get_pipeline),
) -> TemplateProcessResponse:
    """Analyse plain text that was extracted outside this service."""
    try:
        analysis = pipeline.analyze_text(request.text)
    except TemplateProcessingError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.user_message)

    preferences = None
    if request.preferences is not None:
        preferences = UserPreferences(**request.preferences.model_dump())
    return await _build_response(
        pipeline, analysis, request.create_agent, request.agent_name, preferences
    )


@router.post("/process-legacy", response_model=LegacyProcessResponse)
async def process_template_legacy(
    file: UploadFile = File(...),
    processor: LegacyDocxProcessor = Depends(get_legacy_processor),
) -> LegacyProcessResponse:
    """Run the first-generation processor (retries extraction on failure)."""
    data = await _read_upload(file)

    try:
        result = await processor.process(data)
    except TemplateProcessingError as exc:
        logger.info("process_template_legacy: %s rejected — %s", file.filename, exc)
        raise HTTPException(status_code=exc.status_code, detail=exc.user_message)

    return LegacyProcessResponse(
        sections=[_section_schema(s) for s in result.structure.sections],
        style=DocumentStyleSchema.model_validate(result.structure.style),
        variables=result.variables,
        master_prompt=generate_master_prompt(result.structure, result.variables, result.text),
        text_length=len(result.text),
        attempts=result.attempts,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _read_upload(file: UploadFile) -> bytes:
    """Check the extension and read the upload into memory under the size limit."""
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Upload must include a filename.",
        )

    file_ext = Path(file.filename).suffix.lower()
    if file_ext not in settings.SUPPORTED_FILE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Unsupported file type '{file_ext}'. "
                f"Accepted: {', '.join(settings.SUPPORTED_FILE_TYPES)}"
            ),
        )

    buffer = bytearray()
    while True:
        chunk = await file.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > settings.MAX_FILE_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Arquivo muito grande. Máximo: {settings.MAX_FILE_SIZE // (1024 * 1024)}MB",
            )

    logger.info("Received %r (%s bytes)", file.filename, f"{len(buffer):,}")
    return bytes(buffer)


async def _build_response(
    pipeline: TemplatePipeline,
    analysis: TemplateAnalysis,
    create_agent: bool,
    agent_name: Optional[str],
    preferences: Optional[UserPreferences],
) -> TemplateProcessResponse:
    agent: Optional[AgentSchema] = None
    if create_agent:
        result = await pipeline.create_agent(analysis, preferences)
        agent = _agent_schema(result, analysis, agent_name)

    return TemplateProcessResponse(
        classification=ClassificationSchema.model_validate(analysis.classification),
        quality_metrics=QualityMetricsSchema.model_validate(analysis.quality),
        sections=[_section_schema(s) for s in analysis.sections],
        variables=[_variable_schema(v) for v in analysis.variables],
        master_prompt=pipeline.synthesize_prompt(analysis),
        agent=agent,
        metadata=analysis.metadata,
        message=(
            "Modelo processado e agente sugerido com sucesso"
            if agent is not None
            else "Modelo processado com análise inteligente concluída"
        ),
    )


def _section_schema(section: Section) -> SectionSchema:
    return SectionSchema(
        name=section.name,
        type=section.section_type,
        required=section.required,
        order=section.order,
        start_line=section.start_line,
        content=section.content,
    )


def _variable_schema(variable: Variable) -> VariableSchema:
    return VariableSchema(
        name=variable.name,
        type=variable.variable_type,
        pattern=variable.pattern,
        confidence=variable.confidence,
        examples=variable.examples,
        required=variable.required,
    )


def _agent_schema(
    result: AgentCreationResult,
    analysis: TemplateAnalysis,
    agent_name: Optional[str],
) -> AgentSchema:
    name = agent_name.strip() if agent_name and agent_name.strip() else result.suggested_name
    classification = analysis.classification
    return AgentSchema(
        name=truncate_text(name, 50),
        description=result.suggested_description,
        theme=f"{classification.area.value} - {classification.subtype}",
        optimized_prompt=result.optimized_prompt,
        specializations=result.specializations,
        confidence_score=result.confidence_score,
        recommendations=result.recommendations,
    )
