"""
Value objects produced by the template-analysis pipeline.

Everything here is created and owned by a single pipeline invocation; nothing
holds back-references or shared mutable state.
"""
from __future__ import annotations

import dataclasses
import enum
from typing import List, Optional


# Enums
class SectionType(str, enum.Enum):
    """Position of a section within a legal document."""

    HEADER = "header"
    BODY = "body"
    CONCLUSION = "conclusion"


class VariableType(str, enum.Enum):
    """Kinds of fill-in fields a template can contain."""

    TEXT = "text"
    DATE = "date"
    NUMBER = "number"
    CURRENCY = "currency"
    EMAIL = "email"
    CPF = "cpf"
    CNPJ = "cnpj"


class LegalArea(str, enum.Enum):
    """Legal areas recognised by the classifier, in tie-break order."""

    CIVIL = "civil"
    PENAL = "penal"
    TRABALHISTA = "trabalhista"
    TRIBUTARIO = "tributario"
    ADMINISTRATIVO = "administrativo"
    CONSTITUCIONAL = "constitucional"


class Complexity(str, enum.Enum):
    SIMPLE = "simple"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Focus(str, enum.Enum):
    SPEED = "speed"
    QUALITY = "quality"
    PRECISION = "precision"


class WritingStyle(str, enum.Enum):
    FORMAL = "formal"
    DIDACTIC = "didactic"
    TECHNICAL = "technical"


# ---------------------------------------------------------------------------
# Analysis records
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class Section:
    """A structural block detected in the template text."""

    name: str
    section_type: SectionType
    required: bool
    order: int
    start_line: Optional[int] = None   # index of the line in the source text
    content: Optional[str] = None      # the literal line that triggered detection


@dataclasses.dataclass
class Variable:
    """A fill-in field keyed by its canonical (upper-case) name."""

    name: str
    variable_type: VariableType
    pattern: str                       # literal token that produced the record
    confidence: float                  # 0..1
    examples: List[str] = dataclasses.field(default_factory=list)
    required: bool = False


@dataclasses.dataclass
class DocumentClassification:
    area: LegalArea
    subtype: str
    confidence: float                  # 0..100, capped at 95 for real matches
    keywords: List[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class QualityMetrics:
    """Four 0-100 sub-scores plus their rounded mean."""

    completeness: int
    clarity: int
    structure: int
    legal_compliance: int
    overall: int


# ---------------------------------------------------------------------------
# Agent creation
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class UserPreferences:
    complexity: Complexity = Complexity.INTERMEDIATE
    focus: Focus = Focus.QUALITY
    style: WritingStyle = WritingStyle.FORMAL


@dataclasses.dataclass
class AgentCreationRequest:
    """Everything the agent creator needs, bundled from one pipeline run."""

    classification: DocumentClassification
    quality: QualityMetrics
    variables: List[Variable]
    sections: List[Section]
    extracted_text: str
    preferences: Optional[UserPreferences] = None


@dataclasses.dataclass
class AgentIdentity:
    name: str
    description: str


@dataclasses.dataclass
class AgentCreationResult:
    suggested_name: str                # ≤ 50 chars
    suggested_description: str         # ≤ 200 chars
    optimized_prompt: str
    specializations: List[str]         # ≤ 5
    confidence_score: int              # 0..100
    recommendations: List[str]         # ≤ 4

