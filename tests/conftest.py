"""
Shared fixtures for Jurimodelo backend tests.

Nothing here needs a running Ollama: the generative backend is replaced by
in-process stubs and DOCX fixtures are built in memory with python-docx.
"""
from __future__ import annotations

import io
from typing import AsyncGenerator, Callable, List, Optional, Sequence, Union

import pytest
import pytest_asyncio
from docx import Document as DocxDocument
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.routers.health import get_health_probe
from app.routers.templates import get_legacy_processor, get_llm_service
from app.services.legacy_processor import LegacyDocxProcessor
from app.utils.errors import GenerativeServiceError


# ---------------------------------------------------------------------------
# Generative-service stubs
# ---------------------------------------------------------------------------

class FailingLLM:
    """Every call raises, like an unreachable backend."""

    def __init__(self, exc: Optional[Exception] = None) -> None:
        self.exc = exc or GenerativeServiceError("connection error: backend down")
        self.calls = 0

    async def generate(self, prompt, *, model=None, temperature=0.7, max_tokens=1000):
        self.calls += 1
        raise self.exc


class ScriptedLLM:
    """Returns (or raises) the scripted responses in order and records each call."""

    def __init__(self, responses: Sequence[Union[str, Exception]]) -> None:
        self.responses: List[Union[str, Exception]] = list(responses)
        self.prompts: List[str] = []
        self.calls: List[dict] = []

    async def generate(self, prompt, *, model=None, temperature=0.7, max_tokens=1000):
        self.prompts.append(prompt)
        self.calls.append(
            {"model": model, "temperature": temperature, "max_tokens": max_tokens}
        )
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class StaticHealthProbe:
    def __init__(self, healthy: bool = True) -> None:
        self.healthy = healthy

    async def check_health(self) -> bool:
        return self.healthy


# ---------------------------------------------------------------------------
# DOCX builder
# ---------------------------------------------------------------------------

def build_docx(
    paragraphs: Sequence[str],
    table: Optional[Sequence[Sequence[str]]] = None,
    title: str = "",
) -> bytes:
    """Serialise a DOCX with the given paragraphs (and optional table) to bytes."""
    doc = DocxDocument()
    for text in paragraphs:
        doc.add_paragraph(text)
    if table:
        grid = doc.add_table(rows=len(table), cols=len(table[0]))
        for r, row in enumerate(table):
            for c, value in enumerate(row):
                grid.cell(r, c).text = value
    if title:
        doc.core_properties.title = title
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


PETICAO_PARAGRAPHS = [
    "EXCELENTÍSSIMO SENHOR DOUTOR JUIZ DE DIREITO DA VARA CÍVEL DA COMARCA DE {{CIDADE}}",
    "REQUERENTE: {{NOME_CLIENTE}}, CPF {{CPF_CLIENTE}}, residente no endereço completo informado.",
    "DOS FATOS",
    "O contrato firmado em {{DATA_CONTRATO}} foi descumprido, gerando danos e dever de indenização.",
    "DO DIREITO",
    "A responsabilidade civil decorre da lei; a jurisprudência e a doutrina são pacíficas.",
    "DOS PEDIDOS",
    "Requer a condenação ao pagamento de {{VALOR_INDENIZACAO}}, campo obrigatório.",
    "Termos em que pede deferimento.",
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def make_docx() -> Callable[..., bytes]:
    return build_docx


@pytest.fixture
def peticao_docx() -> bytes:
    return build_docx(PETICAO_PARAGRAPHS)


@pytest.fixture
def peticao_text() -> str:
    return "\n".join(PETICAO_PARAGRAPHS)


@pytest.fixture
def failing_llm() -> FailingLLM:
    return FailingLLM()


@pytest_asyncio.fixture
async def client(failing_llm: FailingLLM) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the generative backend
    and health probe overridden, and legacy retries made instantaneous.
    """
    app.dependency_overrides[get_llm_service] = lambda: failing_llm
    app.dependency_overrides[get_health_probe] = lambda: StaticHealthProbe(True)
    app.dependency_overrides[get_legacy_processor] = lambda: LegacyDocxProcessor(retry_delay=0)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def scripted_llm() -> Callable[[Sequence[Union[str, Exception]]], ScriptedLLM]:
    """Factory: ``scripted_llm(["first reply", RuntimeError("boom")])``."""
    return ScriptedLLM
