"""
Typed errors raised by the template-processing pipeline.

Each exception carries a technical message (for logs), a user-facing message
(for API responses), a stable error code, and the HTTP status the routers use
when surfacing it.
"""
from __future__ import annotations

from typing import Optional


class TemplateProcessingError(Exception):
    """Base exception for template-processing failures."""

    code: str = "PROCESSING_ERROR"
    status_code: int = 500

    def __init__(self, message: str, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


# ---------------------------------------------------------------------------
# Input validation (deterministic, never retried)
# ---------------------------------------------------------------------------

class DocumentValidationError(TemplateProcessingError):
    """The uploaded file failed a deterministic validation check."""

    code = "VALIDATION_ERROR"
    status_code = 400


class DocumentTooLargeError(DocumentValidationError):
    """File exceeds the configured size limit."""

    code = "FILE_TOO_LARGE"
    status_code = 413

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        size_mb = size_bytes / (1024 * 1024)
        limit_mb = limit_bytes // (1024 * 1024)
        super().__init__(
            f"File size {size_mb:.1f}MB exceeds limit {limit_mb}MB",
            f"Arquivo muito grande. Máximo: {limit_mb}MB",
        )
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class InvalidDocumentFormatError(DocumentValidationError):
    """The payload is not a DOCX (ZIP) container."""

    code = "INVALID_FORMAT"

    def __init__(self, details: str = "") -> None:
        super().__init__(
            f"Invalid DOCX container: {details}" if details else "Invalid DOCX container",
            "Apenas arquivos .docx válidos são permitidos",
        )


# ---------------------------------------------------------------------------
# Extraction (fatal for the whole request)
# ---------------------------------------------------------------------------

class DocumentExtractionError(TemplateProcessingError):
    """The text extractor could not read the document."""

    code = "EXTRACTION_ERROR"
    status_code = 422

    def __init__(self, details: str = "") -> None:
        super().__init__(
            f"Cannot extract text from DOCX: {details}" if details else "Cannot extract text from DOCX",
            "Falha ao processar arquivo DOCX",
        )


class DocumentTooShortError(TemplateProcessingError):
    """Extracted text is below the minimum usable length."""

    code = "DOCUMENT_TOO_SHORT"
    status_code = 422

    def __init__(self, length: int, minimum: int) -> None:
        super().__init__(
            f"Extracted text has {length} characters (minimum {minimum})",
            "Documento muito pequeno ou sem conteúdo válido",
        )
        self.length = length
        self.minimum = minimum


# ---------------------------------------------------------------------------
# Generative-text service (always absorbed by the agent creator)
# ---------------------------------------------------------------------------

class GenerativeServiceError(TemplateProcessingError):
    """The generative-text backend failed or returned an unusable response."""

    code = "GENERATIVE_SERVICE_ERROR"
    status_code = 502
