"""
Client for the generative-text service used by the agent creator.

Talks to Ollama's /api/chat endpoint (role/content messages plus model,
temperature, and token-limit options).  Unlike the analyzers, every failure
here — timeout, connection error, non-200, empty completion — is raised as
GenerativeServiceError; the agent creator turns those into fallbacks.

Also hosts the tolerant JSON parser used to read structured answers from
small models that like to wrap JSON in prose or code fences.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Protocol, Tuple

import httpx

from app.config import settings
from app.utils.errors import GenerativeServiceError

logger = logging.getLogger(__name__)


class GenerativeTextService(Protocol):
    """What the agent creator needs from a text-generation backend."""

    async def generate(
        self,
        prompt: str,
        *,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        ...


# ---------------------------------------------------------------------------
# Ollama implementation
# ---------------------------------------------------------------------------

class OllamaChatService:
    """
    Chat completions via Ollama /api/chat.

    A custom ``transport`` can be injected (e.g. ``httpx.MockTransport``) so
    the client is testable without a running server.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.OLLAMA_BASE_URL).rstrip("/")
        self.model = model or settings.OLLAMA_LLM_MODEL
        self.timeout_seconds = float(timeout or settings.OLLAMA_TIMEOUT)
        self.timeout = httpx.Timeout(self.timeout_seconds, connect=10.0)
        self._transport = transport

    def _client(self, timeout: Optional[httpx.Timeout] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout or self.timeout, transport=self._transport)

    async def generate(
        self,
        prompt: str,
        *,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """
        POST a single user message and return the assistant's reply text.

        Raises:
            GenerativeServiceError: on timeout, connection failure, non-200
                                    status, or an empty completion.
        """
        messages: List[Dict[str, str]] = [{"role": "user", "content": prompt}]
        payload = {
            "model": model or self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "num_predict": max_tokens,
                "temperature": temperature,
            },
        }

        try:
            async with self._client() as client:
                resp = await client.post(f"{self.base_url}/api/chat", json=payload)
        except httpx.TimeoutException as exc:
            raise GenerativeServiceError(
                f"request timed out after {self.timeout_seconds:.0f} s"
            ) from exc
        except httpx.HTTPError as exc:
            raise GenerativeServiceError(f"connection error: {exc}") from exc

        if resp.status_code != 200:
            raise GenerativeServiceError(
                f"Ollama returned HTTP {resp.status_code}: {resp.text[:300]}"
            )

        try:
            content = resp.json().get("message", {}).get("content", "")
        except (ValueError, AttributeError) as exc:
            raise GenerativeServiceError(f"malformed response body: {exc}") from exc

        if not content or not content.strip():
            raise GenerativeServiceError("empty completion")
        return content

    async def list_models(self) -> List[str]:
        """
        Names of the models pulled on the server, from /api/tags.

        Raises:
            GenerativeServiceError: when the server is unreachable, answers
                                    non-200, or returns an unexpected body.
        """
        try:
            async with self._client(httpx.Timeout(5.0)) as client:
                resp = await client.get(f"{self.base_url}/api/tags")
        except httpx.HTTPError as exc:
            raise GenerativeServiceError(f"connection error: {exc}") from exc

        if resp.status_code != 200:
            raise GenerativeServiceError(f"Ollama returned HTTP {resp.status_code}")

        try:
            return [m["name"] for m in resp.json().get("models", [])]
        except (ValueError, AttributeError, KeyError, TypeError) as exc:
            raise GenerativeServiceError(f"malformed /api/tags body: {exc}") from exc

    def has_model(self, available: List[str]) -> bool:
        """True if the configured model (or another tag of it) is in *available*."""
        family = self.model.split(":")[0]
        return any(m == self.model or m.startswith(family) for m in available)

    async def check_health(self) -> bool:
        """Return True if the Ollama server answers /api/tags."""
        try:
            await self.list_models()
        except GenerativeServiceError as exc:
            logger.warning("check_health: Ollama unreachable — %s", exc)
            return False
        return True


# ---------------------------------------------------------------------------
# Robust JSON parsing
# ---------------------------------------------------------------------------

def parse_json_robust(response: str) -> Tuple[bool, Any]:
    """
    Try multiple strategies to parse JSON from potentially messy LLM output.

    Handles:
    - Markdown code fences (```json … ```, ``` … ```)
    - Trailing commas before ] or }
    - Python-style True / False / None
    - Surrounding prose — finds the first balanced {...} or [...] block

    Returns ``(success, parsed_value)``.
    """
    if not response:
        return False, None

    text = response.strip()

    ok, val = _try_json(text)
    if ok:
        return True, val

    stripped = _strip_code_fences(text)
    if stripped != text:
        ok, val = _try_json(stripped)
        if ok:
            return True, val
        text = stripped

    ok, val = _try_json(_fix_json_issues(text))
    if ok:
        return True, val

    for open_b, close_b in (("{", "}"), ("[", "]")):
        fragment = _extract_json_structure(text, open_b, close_b)
        if fragment:
            ok, val = _try_json(fragment)
            if not ok:
                ok, val = _try_json(_fix_json_issues(fragment))
            if ok:
                return True, val

    logger.debug("parse_json_robust: all strategies failed. Preview: %s", response[:200])
    return False, None


def _try_json(text: str) -> Tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return False, None


def _strip_code_fences(text: str) -> str:
    """Remove ```json / ``` delimiters that LLMs often wrap output in."""
    text = re.sub(r"^```(?:json|text)?\s*\n?", "", text, flags=re.IGNORECASE)
    text = re.sub(r"\n?```\s*$", "", text)
    return text.strip()


def _fix_json_issues(text: str) -> str:
    """Repair the most common JSON mangling patterns from LLMs."""
    text = re.sub(r",(\s*[}\]])", r"\1", text)
    text = re.sub(r"\bTrue\b", "true", text)
    text = re.sub(r"\bFalse\b", "false", text)
    text = re.sub(r"\bNone\b", "null", text)
    return text.strip()


def _extract_json_structure(text: str, open_b: str, close_b: str) -> str:
    """
    Find the first complete balanced open_b … close_b structure in *text*.
    Returns the matched fragment, or empty string if not found.
    """
    start = text.find(open_b)
    if start == -1:
        return ""

    depth = 0
    in_string = False
    escape_next = False

    for i, ch in enumerate(text[start:], start=start):
        if escape_next:
            escape_next = False
            continue
        if ch == "\\" and in_string:
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == open_b:
            depth += 1
        elif ch == close_b:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return ""
