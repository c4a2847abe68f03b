"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from datetime import datetime, timezone
import logging

from app.config import settings
from app.models.schemas import HealthCheckResponse
from app.services.llm_client import OllamaChatService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_health_probe() -> OllamaChatService:
    return OllamaChatService()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(probe: OllamaChatService = Depends(get_health_probe)):
    """
    Health check endpoint to verify system status.

    Template analysis works without Ollama; only agent suggestions degrade
    to fallbacks, so an unreachable backend reports "degraded".
    """
    ollama_status = "ok"
    try:
        if not await probe.check_health():
            ollama_status = "error"
    except Exception as e:
        logger.error("Ollama health check failed: %s", e)
        ollama_status = "error"

    return HealthCheckResponse(
        status="healthy" if ollama_status == "ok" else "degraded",
        ollama=ollama_status,
        model=settings.OLLAMA_LLM_MODEL,
        timestamp=datetime.now(timezone.utc),
    )
