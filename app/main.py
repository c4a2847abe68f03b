"""
Main FastAPI application for the Jurimodelo backend.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.routers import health, templates
from app.services.llm_client import OllamaChatService
from app.utils.errors import GenerativeServiceError

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup helpers
# ---------------------------------------------------------------------------

async def check_generation_backend(service: Optional[OllamaChatService] = None) -> bool:
    """
    Log whether the agent-suggestion backend is usable.

    Returns True when Ollama answers and the configured model is pulled.
    Analysis never depends on this, so failures are logged, not raised.
    """
    service = service or OllamaChatService()
    try:
        available = await service.list_models()
    except GenerativeServiceError as exc:
        logger.error("✗ Ollama unreachable (%s) — agent suggestions will use fallbacks", exc)
        return False

    logger.info("✓ Ollama reachable — available models: %s", available)
    if not service.has_model(available):
        logger.warning(
            "  ⚠ LLM model '%s' not found — run: ollama pull %s",
            service.model,
            service.model,
        )
        return False
    logger.info("  ✓ LLM model '%s' is available", service.model)
    return True


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting Jurimodelo backend …")
    logger.info("=" * 60)

    if not await check_generation_backend():
        logger.warning(
            "Agent names and prompt optimisation will use deterministic fallbacks "
            "until Ollama serves %s.",
            settings.OLLAMA_LLM_MODEL,
        )

    logger.info("=" * 60)
    logger.info("  Jurimodelo backend ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/api/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Jurimodelo API",
    description=(
        "**Jurimodelo** — template intelligence for Brazilian legal documents.\n\n"
        "Upload a DOCX template to detect its sections and fill-in variables, "
        "classify its legal area, score its quality, and obtain a master prompt "
        "plus an optional agent suggestion.\n\n"
        "Key endpoints:\n"
        "- `POST /api/templates/process` — analyse a DOCX template\n"
        "- `POST /api/templates/analyze-text` — analyse extracted text\n"
        "- `POST /api/templates/process-legacy` — first-generation processor\n"
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip noisy health-check polling from the frontend
    if request.url.path not in ("/api/health", "/api/health/", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Global exception handler
# ---------------------------------------------------------------------------

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,     prefix="/api/health",    tags=["Health"])
app.include_router(templates.router,  prefix="/api/templates", tags=["Templates"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root — returns basic service info."""
    return {
        "name": "Jurimodelo API",
        "version": "1.0.0",
        "description": "Legal Template Intelligence Backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "process": "/api/templates/process",
            "analyze_text": "/api/templates/analyze-text",
            "process_legacy": "/api/templates/process-legacy",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
