"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime

from app.models.domain import (
    Complexity,
    Focus,
    LegalArea,
    SectionType,
    VariableType,
    WritingStyle,
)


# Analysis Schemas
class SectionSchema(BaseModel):
    """A detected document section."""

    name: str
    type: SectionType
    required: bool
    order: int
    start_line: Optional[int] = None
    content: Optional[str] = None


class VariableSchema(BaseModel):
    """A detected fill-in variable."""

    name: str
    type: VariableType
    pattern: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    examples: List[str] = []
    required: bool = False


class ClassificationSchema(BaseModel):
    """Legal-area classification of a template."""

    area: LegalArea
    subtype: str
    confidence: float = Field(..., ge=0.0, le=100.0)
    keywords: List[str] = []

    model_config = ConfigDict(from_attributes=True)


class QualityMetricsSchema(BaseModel):
    """Template quality sub-scores (0-100)."""

    completeness: int = Field(..., ge=0, le=100)
    clarity: int = Field(..., ge=0, le=100)
    structure: int = Field(..., ge=0, le=100)
    legal_compliance: int = Field(..., ge=0, le=100)
    overall: int = Field(..., ge=0, le=100)

    model_config = ConfigDict(from_attributes=True)


# Agent Schemas
class UserPreferencesSchema(BaseModel):
    """How the generated agent should write."""

    complexity: Complexity = Complexity.INTERMEDIATE
    focus: Focus = Focus.QUALITY
    style: WritingStyle = WritingStyle.FORMAL


class AgentSchema(BaseModel):
    """Suggested agent definition for a template."""

    name: str = Field(..., max_length=50)
    description: str = Field(..., max_length=200)
    theme: str
    optimized_prompt: str
    specializations: List[str] = Field(default_factory=list, max_length=5)
    confidence_score: int = Field(..., ge=0, le=100)
    recommendations: List[str] = Field(default_factory=list, max_length=4)


# Template Processing Schemas
class AnalyzeTextRequest(BaseModel):
    """Schema for analysing already-extracted template text."""

    text: str = Field(..., min_length=1)
    create_agent: bool = False
    agent_name: Optional[str] = Field(None, max_length=50)
    preferences: Optional[UserPreferencesSchema] = None


class TemplateProcessResponse(BaseModel):
    """Full analysis of a template, with its master prompt and optional agent."""

    success: bool = True
    classification: ClassificationSchema
    quality_metrics: QualityMetricsSchema
    sections: List[SectionSchema]
    variables: List[VariableSchema]
    master_prompt: str
    agent: Optional[AgentSchema] = None
    metadata: Dict[str, Any] = {}
    message: str


# Legacy Schemas
class DocumentStyleSchema(BaseModel):
    """Typographic defaults reported by the legacy processor."""

    font: str
    font_size: int
    spacing: float
    margin_top: float
    margin_bottom: float
    margin_left: float
    margin_right: float

    model_config = ConfigDict(from_attributes=True)


class LegacyProcessResponse(BaseModel):
    """Schema for the first-generation processor's output."""

    success: bool = True
    sections: List[SectionSchema]
    style: DocumentStyleSchema
    variables: List[str]
    master_prompt: str
    text_length: int
    attempts: int


# Health Check Schema
class HealthCheckResponse(BaseModel):
    """Schema for health check endpoint."""

    status: str
    ollama: str
    model: str
    timestamp: datetime
    version: str = "1.0.0"
