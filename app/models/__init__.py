"""Domain records and API schemas for Jurimodelo."""
from app.models.domain import (
    AgentCreationRequest,
    AgentCreationResult,
    AgentIdentity,
    Complexity,
    DocumentClassification,
    Focus,
    LegalArea,
    QualityMetrics,
    Section,
    SectionType,
    UserPreferences,
    Variable,
    VariableType,
    WritingStyle,
)
from app.models.schemas import (
    AgentSchema,
    AnalyzeTextRequest,
    ClassificationSchema,
    HealthCheckResponse,
    LegacyProcessResponse,
    QualityMetricsSchema,
    SectionSchema,
    TemplateProcessResponse,
    UserPreferencesSchema,
    VariableSchema,
)

__all__ = [
    # Domain records
    "AgentCreationRequest",
    "AgentCreationResult",
    "AgentIdentity",
    "Complexity",
    "DocumentClassification",
    "Focus",
    "LegalArea",
    "QualityMetrics",
    "Section",
    "SectionType",
    "UserPreferences",
    "Variable",
    "VariableType",
    "WritingStyle",
    # Pydantic schemas
    "AgentSchema",
    "AnalyzeTextRequest",
    "ClassificationSchema",
    "HealthCheckResponse",
    "LegacyProcessResponse",
    "QualityMetricsSchema",
    "SectionSchema",
    "TemplateProcessResponse",
    "UserPreferencesSchema",
    "VariableSchema",
]
