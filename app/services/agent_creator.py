"""
Agent identity and prompt optimisation for an analysed template.

Public API
----------
AgentCreator.create_agent(request)          -> AgentCreationResult
AgentCreator.generate_identity(request)     -> Ok[AgentIdentity] | Fallback[AgentIdentity]
AgentCreator.optimize_prompt(request, id)   -> Ok[str] | Fallback[str]
build_base_prompt(request)                  -> str

Two calls go to the generative-text service (identity, then optimisation).
Each is wrapped so its failure becomes an explicit Fallback carrying a
deterministic value; nothing raised by the service reaches the caller.
Specialisations, the confidence score, and recommendations are pure
functions of the request.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Generic, List, Optional, TypeVar, Union

from app.config import settings
from app.models.domain import (
    AgentCreationRequest,
    AgentCreationResult,
    AgentIdentity,
    LegalArea,
    UserPreferences,
    VariableType,
)
from app.services.classifier import GENERIC_SUBTYPE
from app.services.llm_client import GenerativeTextService, OllamaChatService, parse_json_robust
from app.services.prompt_synthesizer import describe_sections, describe_variables
from app.utils.helpers import capitalize_first, clamp, excerpt, round_half_up, truncate_text

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Outcome of a call that may fall back
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclasses.dataclass(frozen=True)
class Fallback(Generic[T]):
    value: T
    reason: str


Outcome = Union[Ok[T], Fallback[T]]


# ---------------------------------------------------------------------------
# Limits and lookup tables
# ---------------------------------------------------------------------------

MAX_NAME_CHARS = 50
MAX_DESCRIPTION_CHARS = 200
MAX_SPECIALIZATIONS = 5
MAX_RECOMMENDATIONS = 4
BASE_PROMPT_EXCERPT_CHARS = 1500
RECOMMENDATION_THRESHOLD = 70

FALLBACK_AGENT_NAMES: Dict[LegalArea, str] = {
    LegalArea.CIVIL: "Especialista Civil",
    LegalArea.PENAL: "Redator Penal",
    LegalArea.TRABALHISTA: "Assistente Trabalhista",
    LegalArea.TRIBUTARIO: "Consultor Tributário",
    LegalArea.ADMINISTRATIVO: "Especialista Administrativo",
    LegalArea.CONSTITUCIONAL: "Analista Constitucional",
}
DEFAULT_AGENT_NAME = "Especialista Jurídico"

CONFIDENCE_WEIGHTS = {
    "classification": 0.3,
    "quality": 0.3,
    "variables": 0.2,
    "structure": 0.2,
}
IDEAL_VARIABLE_COUNT = 10
IDEAL_SECTION_COUNT = 6


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_IDENTITY_PROMPT = """\
Você está criando um agente de IA especializado na redação de documentos jurídicos brasileiros.

Dados do documento modelo analisado:
- Área jurídica: {area}
- Subtipo: {subtype}
- Qualidade geral do modelo: {overall}/100
- Variáveis detectadas: {variable_count}
- Palavras-chave: {keywords}

Sugira um nome curto e profissional (até 50 caracteres) e uma descrição objetiva \
(até 200 caracteres) para esse agente.

Responda SOMENTE com JSON válido, sem markdown e sem explicações:
{{"name": "...", "description": "..."}}\
"""

_BASE_PROMPT = """\
Você é um especialista jurídico brasileiro em {area}, com foco em {subtype}.

ESTRUTURA DO DOCUMENTO:
{sections_desc}

VARIÁVEIS:
{variables_desc}

Siga as práticas de redação de {area_upper} e preserve a estrutura acima.

MODELO DE REFERÊNCIA:
{text_preview}\
"""

_OPTIMIZATION_PROMPT = """\
Você é um engenheiro de prompts especializado em direito brasileiro.

Otimize o prompt abaixo para o agente "{agent_name}" ({agent_description}).

Preferências do usuário:
- Complexidade: {complexity}
- Foco: {focus}
- Estilo: {style}

Requisitos:
1. Preserve a estrutura do documento e todas as variáveis listadas
2. Reforce a terminologia e a fundamentação típicas de {area}
3. Ajuste o nível de detalhe à complexidade "{complexity}"
4. Otimize para {focus}

PROMPT ORIGINAL:
{base_prompt}

Responda apenas com o prompt otimizado, sem comentários adicionais.\
"""


# ---------------------------------------------------------------------------
# Main service class
# ---------------------------------------------------------------------------

class AgentCreator:
    """
    Builds an AgentCreationResult from an analysed template.

    The generative backend is injected so tests (and alternative providers)
    can replace OllamaChatService with any object exposing ``generate``.
    """

    IDENTITY_PROMPT = _IDENTITY_PROMPT
    OPTIMIZATION_PROMPT = _OPTIMIZATION_PROMPT

    def __init__(
        self,
        llm: Optional[GenerativeTextService] = None,
        model: Optional[str] = None,
    ) -> None:
        self._llm = llm if llm is not None else OllamaChatService()
        self.model = model or settings.OLLAMA_LLM_MODEL

    async def create_agent(self, request: AgentCreationRequest) -> AgentCreationResult:
        """Run identity, optimisation, and the deterministic derivations."""
        logger.info(
            "AgentCreator: creating agent for %s/%s",
            request.classification.area.value,
            request.classification.subtype,
        )

        identity = await self.generate_identity(request)
        optimized = await self.optimize_prompt(request, identity.value)
        confidence = calculate_confidence_score(request)

        result = AgentCreationResult(
            suggested_name=identity.value.name,
            suggested_description=identity.value.description,
            optimized_prompt=optimized.value,
            specializations=generate_specializations(request),
            confidence_score=confidence,
            recommendations=generate_recommendations(request),
        )
        logger.info(
            "AgentCreator: agent '%s' created with %d%% confidence "
            "(identity=%s, prompt=%s)",
            result.suggested_name,
            confidence,
            "ai" if isinstance(identity, Ok) else "fallback",
            "ai" if isinstance(optimized, Ok) else "fallback",
        )
        return result

    # ------------------------------------------------------------------
    # External calls
    # ------------------------------------------------------------------

    async def generate_identity(self, request: AgentCreationRequest) -> Outcome[AgentIdentity]:
        """Ask the service for ``{name, description}``; fall back per area."""
        classification = request.classification
        prompt = self.IDENTITY_PROMPT.format(
            area=classification.area.value,
            subtype=classification.subtype,
            overall=request.quality.overall,
            variable_count=len(request.variables),
            keywords=", ".join(classification.keywords),
        )

        try:
            content = await self._llm.generate(
                prompt,
                model=self.model,
                temperature=settings.AGENT_IDENTITY_TEMPERATURE,
                max_tokens=settings.AGENT_IDENTITY_MAX_TOKENS,
            )
            identity = _parse_identity(content)
        except Exception as exc:
            logger.warning("generate_identity: using fallback identity — %s", exc)
            return Fallback(fallback_identity(request), reason=str(exc))

        return Ok(identity)

    async def optimize_prompt(
        self,
        request: AgentCreationRequest,
        identity: AgentIdentity,
    ) -> Outcome[str]:
        """Ask the service to rewrite the base prompt; fall back to it unchanged."""
        base_prompt = build_base_prompt(request)
        preferences = request.preferences or UserPreferences()
        prompt = self.OPTIMIZATION_PROMPT.format(
            agent_name=identity.name,
            agent_description=identity.description,
            complexity=preferences.complexity.value,
            focus=preferences.focus.value,
            style=preferences.style.value,
            area=request.classification.area.value,
            base_prompt=base_prompt,
        )

        try:
            content = await self._llm.generate(
                prompt,
                model=self.model,
                temperature=settings.PROMPT_OPTIMIZATION_TEMPERATURE,
                max_tokens=settings.PROMPT_OPTIMIZATION_MAX_TOKENS,
            )
        except Exception as exc:
            logger.warning("optimize_prompt: using base prompt — %s", exc)
            return Fallback(base_prompt, reason=str(exc))

        if not isinstance(content, str) or not content.strip():
            logger.warning("optimize_prompt: empty completion, using base prompt")
            return Fallback(base_prompt, reason="empty completion")
        return Ok(content.strip())


# ---------------------------------------------------------------------------
# Deterministic derivations
# ---------------------------------------------------------------------------

def fallback_identity(request: AgentCreationRequest) -> AgentIdentity:
    classification = request.classification
    name = FALLBACK_AGENT_NAMES.get(classification.area, DEFAULT_AGENT_NAME)
    description = (
        f"Especialista em {classification.area.value} focado em {classification.subtype}"
    )
    return AgentIdentity(
        name=truncate_text(name, MAX_NAME_CHARS),
        description=truncate_text(description, MAX_DESCRIPTION_CHARS),
    )


def build_base_prompt(request: AgentCreationRequest) -> str:
    """Unoptimised prompt used as optimisation input and as its fallback."""
    area = request.classification.area.value
    return _BASE_PROMPT.format(
        area=area,
        area_upper=area.upper(),
        subtype=request.classification.subtype,
        sections_desc=describe_sections(request.sections),
        variables_desc=describe_variables(request.variables),
        text_preview=excerpt(request.extracted_text, BASE_PROMPT_EXCERPT_CHARS),
    )


def generate_specializations(request: AgentCreationRequest) -> List[str]:
    classification = request.classification
    specializations: List[str] = [capitalize_first(classification.area.value)]

    if classification.subtype != GENERIC_SUBTYPE:
        specializations.append(classification.subtype)

    variable_types = {v.variable_type for v in request.variables}
    if VariableType.CURRENCY in variable_types:
        specializations.append("Cálculos monetários")
    if VariableType.DATE in variable_types:
        specializations.append("Gestão de prazos")
    if VariableType.CPF in variable_types or VariableType.CNPJ in variable_types:
        specializations.append("Identificação de partes")

    if "contrato" in classification.keywords:
        specializations.append("Contratos")
    if "petição" in classification.keywords:
        specializations.append("Peças processuais")

    return specializations[:MAX_SPECIALIZATIONS]


def calculate_confidence_score(request: AgentCreationRequest) -> int:
    """Weighted blend of classification, quality, variable, and section signals."""
    factors = {
        "classification": clamp(request.classification.confidence / 100, 0.0, 1.0),
        "quality": clamp(request.quality.overall / 100, 0.0, 1.0),
        "variables": min(len(request.variables) / IDEAL_VARIABLE_COUNT, 1),
        "structure": min(len(request.sections) / IDEAL_SECTION_COUNT, 1),
    }
    total = sum(factors[key] * weight for key, weight in CONFIDENCE_WEIGHTS.items())
    return int(clamp(round_half_up(total * 100), 0, 100))


def generate_recommendations(request: AgentCreationRequest) -> List[str]:
    quality = request.quality
    variables = request.variables
    recommendations: List[str] = []

    if quality.completeness < RECOMMENDATION_THRESHOLD:
        recommendations.append("Considere adicionar seções obrigatórias ao template")
    if quality.clarity < RECOMMENDATION_THRESHOLD:
        recommendations.append("Revise variáveis para melhor clareza do documento")
    if quality.structure < RECOMMENDATION_THRESHOLD:
        recommendations.append("Melhore a organização das seções do documento")
    if quality.legal_compliance < RECOMMENDATION_THRESHOLD:
        recommendations.append("Adicione mais fundamentação legal ao template")

    required_count = sum(1 for v in variables if v.required)
    optional_count = len(variables) - required_count
    if required_count < 3:
        recommendations.append("Considere adicionar mais campos obrigatórios")
    if optional_count > required_count * 2:
        recommendations.append("Muitas variáveis opcionais podem confundir o usuário")

    variable_types = {v.variable_type for v in variables}
    area = request.classification.area
    if area == LegalArea.CIVIL and VariableType.CURRENCY not in variable_types:
        recommendations.append("Documentos civis geralmente incluem valores monetários")
    if area == LegalArea.TRABALHISTA and VariableType.DATE not in variable_types:
        recommendations.append("Documentos trabalhistas precisam de controle de datas")

    return recommendations[:MAX_RECOMMENDATIONS]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_identity(content: str) -> AgentIdentity:
    """Validate the identity JSON; raises ValueError when it is unusable."""
    ok, parsed = parse_json_robust(content)
    if not ok or not isinstance(parsed, dict):
        raise ValueError(f"identity response is not a JSON object: {content[:120]!r}")

    name = parsed.get("name")
    description = parsed.get("description")
    if not isinstance(name, str) or not name.strip():
        raise ValueError("identity response has no usable 'name'")
    if not isinstance(description, str) or not description.strip():
        raise ValueError("identity response has no usable 'description'")

    return AgentIdentity(
        name=truncate_text(name.strip(), MAX_NAME_CHARS),
        description=truncate_text(description.strip(), MAX_DESCRIPTION_CHARS),
    )
