"""
First-generation DOCX template processor.

Kept for clients that still call the legacy endpoint.  It recognises four
judgment-style headings (ementa, relatório, fundamentação, dispositivo),
lists ``{{VARIABLE}}`` placeholders, and renders a short master prompt with
fixed typographic defaults.

Unlike TemplatePipeline, the extract+detect step is retried with linear
backoff.  Validation failures (oversized file, missing ZIP signature) are
deterministic and raised immediately.
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Tuple

from app.config import settings
from app.models.domain import Section, SectionType
from app.services.docx_extractor import DocxTextExtractor
from app.utils.errors import (
    DocumentExtractionError,
    DocumentTooLargeError,
    DocumentValidationError,
    InvalidDocumentFormatError,
)

logger = logging.getLogger(__name__)

ZIP_SIGNATURE = b"PK\x03\x04"
SOURCE_EXCERPT_CHARS = 2000

LEGACY_SECTION_PATTERNS: List[Tuple[Pattern[str], str, SectionType]] = [
    (re.compile(r"^(EMENTA|SÚMULA)", re.IGNORECASE), "Ementa", SectionType.HEADER),
    (re.compile(r"^(RELATÓRIO|RELATORIO|FATOS)", re.IGNORECASE), "Relatório", SectionType.BODY),
    (re.compile(r"^(FUNDAMENT|VOTO|MÉRITO)", re.IGNORECASE), "Fundamentação", SectionType.BODY),
    (re.compile(r"^(DISPOSITIVO|DECISÃO|CONCLUSÃO)", re.IGNORECASE), "Dispositivo", SectionType.CONCLUSION),
]

DEFAULT_SKELETON: List[Tuple[str, SectionType]] = [
    ("Introdução", SectionType.HEADER),
    ("Desenvolvimento", SectionType.BODY),
    ("Conclusão", SectionType.CONCLUSION),
]

_PLACEHOLDER_RE = re.compile(r"\{\{([^}]+)\}\}")


@dataclass
class DocumentStyle:
    font: str = "Times New Roman"
    font_size: int = 12
    spacing: float = 1.5
    margin_top: float = 2.5
    margin_bottom: float = 2.5
    margin_left: float = 3.0
    margin_right: float = 2.0


@dataclass
class DocumentStructure:
    sections: List[Section]
    style: DocumentStyle = field(default_factory=DocumentStyle)


@dataclass
class LegacyProcessingResult:
    text: str
    structure: DocumentStructure
    variables: List[str]
    attempts: int = 1


_LEGACY_PROMPT = """\
Você é um especialista jurídico brasileiro. Gere documentos seguindo esta estrutura:

ESTRUTURA DO DOCUMENTO:
{sections_desc}

ESTILO:
- Fonte: {font}
- Tamanho: {font_size}pt
- Espaçamento: {spacing}

{variables_desc}

MODELO ORIGINAL (para referência de estilo e estrutura):
{source_excerpt}...

Instruções:
1. Mantenha a estrutura exata identificada
2. Use linguagem jurídica formal e técnica
3. Substitua variáveis conforme fornecido
4. Adapte o conteúdo ao caso específico fornecido
5. Mantenha consistência com o estilo do modelo original\
"""


class LegacyDocxProcessor:
    """Validate, then extract and detect with a bounded retry loop."""

    def __init__(
        self,
        extractor: Optional[DocxTextExtractor] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        max_file_size: Optional[int] = None,
    ) -> None:
        self._extractor = extractor or DocxTextExtractor()
        self.max_attempts = max_attempts or settings.LEGACY_MAX_ATTEMPTS
        self.retry_delay = (
            settings.LEGACY_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay
        )
        self.max_file_size = max_file_size or settings.MAX_FILE_SIZE

    def validate(self, data: bytes) -> None:
        if len(data) > self.max_file_size:
            raise DocumentTooLargeError(len(data), self.max_file_size)
        if not data.startswith(ZIP_SIGNATURE):
            raise InvalidDocumentFormatError("missing ZIP signature")

    async def process(self, data: bytes) -> LegacyProcessingResult:
        """
        Validate *data* and run extraction + detection.

        Raises:
            DocumentValidationError: never retried.
            DocumentExtractionError: after the last failed attempt.
        """
        self.validate(data)

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                extracted = await self._extractor.extract(data)
                return LegacyProcessingResult(
                    text=extracted.text,
                    structure=detect_structure(extracted.text),
                    variables=detect_placeholders(extracted.text),
                    attempts=attempt,
                )
            except DocumentValidationError:
                raise
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "LegacyDocxProcessor: attempt %d/%d failed: %s",
                    attempt,
                    self.max_attempts,
                    exc,
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.retry_delay * attempt)

        logger.error("LegacyDocxProcessor: giving up after %d attempts", self.max_attempts)
        if isinstance(last_error, DocumentExtractionError):
            raise last_error
        raise DocumentExtractionError(str(last_error)) from last_error


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

def detect_structure(text: str) -> DocumentStructure:
    """Every heading line matching a pattern yields a section, in order."""
    sections: List[Section] = []
    lines = [line.strip() for line in text.split("\n") if line.strip()]

    for line in lines:
        for pattern, name, section_type in LEGACY_SECTION_PATTERNS:
            if pattern.search(line):
                sections.append(
                    Section(name=name, section_type=section_type, required=True, order=len(sections))
                )

    if not sections:
        sections = [
            Section(name=name, section_type=section_type, required=True, order=i)
            for i, (name, section_type) in enumerate(DEFAULT_SKELETON)
        ]

    return DocumentStructure(sections=sections)


def detect_placeholders(text: str) -> List[str]:
    """Distinct upper-cased ``{{...}}`` names in first-seen order."""
    seen: List[str] = []
    for match in _PLACEHOLDER_RE.finditer(text):
        name = match.group(1).strip().upper()
        if name not in seen:
            seen.append(name)
    return seen


def generate_master_prompt(
    structure: DocumentStructure,
    variables: List[str],
    original_text: str,
) -> str:
    sections_desc = "\n".join(
        f"{s.order + 1}. {s.name} ({s.section_type.value})" for s in structure.sections
    )
    variables_desc = (
        f"\nVariáveis identificadas: {', '.join(variables)}" if variables else ""
    )
    style = structure.style
    return _LEGACY_PROMPT.format(
        sections_desc=sections_desc,
        font=style.font,
        font_size=style.font_size,
        spacing=style.spacing,
        variables_desc=variables_desc,
        source_excerpt=original_text[:SOURCE_EXCERPT_CHARS],
    )
