"""Tests for the Ollama chat client and the tolerant JSON parser."""
import json

import httpx
import pytest

from app.services.llm_client import OllamaChatService, parse_json_robust
from app.utils.errors import GenerativeServiceError


def _service(handler) -> OllamaChatService:
    return OllamaChatService(
        base_url="http://ollama.test/",
        model="test-model",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


# ---------------------------------------------------------------------------
# generate()
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_generate_posts_chat_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"message": {"role": "assistant", "content": "olá"}})

    reply = await _service(handler).generate("Prompt", temperature=0.3, max_tokens=42)

    assert reply == "olá"
    assert seen["url"] == "http://ollama.test/api/chat"
    assert seen["body"] == {
        "model": "test-model",
        "messages": [{"role": "user", "content": "Prompt"}],
        "stream": False,
        "options": {"num_predict": 42, "temperature": 0.3},
    }


@pytest.mark.asyncio
async def test_explicit_model_overrides_default():
    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content)["model"] == "other"
        return httpx.Response(200, json={"message": {"content": "ok"}})

    assert await _service(handler).generate("p", model="other") == "ok"


@pytest.mark.asyncio
async def test_non_200_raises():
    service = _service(lambda request: httpx.Response(500, text="model not loaded"))

    with pytest.raises(GenerativeServiceError, match="HTTP 500"):
        await service.generate("p")


@pytest.mark.asyncio
async def test_empty_completion_raises():
    service = _service(lambda request: httpx.Response(200, json={"message": {"content": "  "}}))

    with pytest.raises(GenerativeServiceError, match="empty completion"):
        await service.generate("p")


@pytest.mark.asyncio
async def test_non_json_body_raises():
    service = _service(lambda request: httpx.Response(200, text="<html>proxy</html>"))

    with pytest.raises(GenerativeServiceError, match="malformed"):
        await service.generate("p")


@pytest.mark.asyncio
async def test_connection_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(GenerativeServiceError, match="connection error"):
        await _service(handler).generate("p")


@pytest.mark.asyncio
async def test_timeout_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(GenerativeServiceError, match="timed out"):
        await _service(handler).generate("p")


@pytest.mark.asyncio
async def test_check_health():
    up = _service(lambda request: httpx.Response(200, json={"models": []}))
    assert await up.check_health() is True

    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    assert await _service(refused).check_health() is False


@pytest.mark.asyncio
async def test_list_models_reads_tags():
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "http://ollama.test/api/tags"
        models = [{"name": "test-model:latest"}, {"name": "llama3"}]
        return httpx.Response(200, json={"models": models})

    assert await _service(handler).list_models() == ["test-model:latest", "llama3"]


@pytest.mark.asyncio
async def test_list_models_raises_on_bad_answers():
    with pytest.raises(GenerativeServiceError, match="HTTP 503"):
        await _service(lambda request: httpx.Response(503)).list_models()

    with pytest.raises(GenerativeServiceError, match="malformed"):
        await _service(lambda request: httpx.Response(200, text="nope")).list_models()


def test_has_model_accepts_other_tags_of_the_same_model():
    service = OllamaChatService(model="qwen2.5:3b")

    assert service.has_model(["qwen2.5:latest"]) is True
    assert service.has_model(["qwen2.5:3b"]) is True
    assert service.has_model(["llama3:8b"]) is False
    assert service.has_model([]) is False


# ---------------------------------------------------------------------------
# parse_json_robust()
# ---------------------------------------------------------------------------

def test_parse_plain_json():
    assert parse_json_robust('{"name": "A"}') == (True, {"name": "A"})


def test_parse_fenced_json():
    assert parse_json_robust('```json\n{"name": "A"}\n```') == (True, {"name": "A"})


def test_parse_json_inside_prose():
    reply = 'Claro! Aqui está: {"name": "A", "description": "B"} Espero ter ajudado.'
    assert parse_json_robust(reply) == (True, {"name": "A", "description": "B"})


def test_parse_repairs_trailing_commas_and_python_literals():
    assert parse_json_robust('{"ok": True, "items": [1, 2,],}') == (True, {"ok": True, "items": [1, 2]})


def test_parse_braces_inside_strings():
    assert parse_json_robust('texto {"name": "chave } dentro"} fim') == (True, {"name": "chave } dentro"})


def test_parse_failure():
    assert parse_json_robust("sem json aqui") == (False, None)
    assert parse_json_robust("") == (False, None)
