"""
Fill-in variable detection for legal templates.

Pass 1 — Syntactic patterns
    An ordered table of (regex, type, base confidence) rows, generic
    placeholders first and type-specific ones after.  A captured group becomes
    the canonical name; group-less patterns (masked blanks such as
    ``__/__/____`` or ``R$ ____``) get ``<PREFIX>_<n>`` from a per-type
    sequential counter, so identical input always yields identical names.
    The highest-confidence classification per name wins.  ``examples`` holds
    one literal per distinct match span, so a placeholder matched by both a
    generic and a typed row is recorded once.

Pass 2 — Contextual phrases
    Phrases such as "nome do autor" or "comarca de" imply a field even when
    the template has no placeholder for it.  Each adds one synthetic variable
    (confidence 0.85, required) unless pass 1 already produced that name.

A pattern variable is required when an obligation word appears within
REQUIRED_CONTEXT_WINDOW characters of the first occurrence of its name.
Generated names never occur in the text, so for masks the window is taken
around the match itself.
"""
from __future__ import annotations

import collections
import logging
import re
from typing import Counter, DefaultDict, Dict, List, Optional, Pattern, Set, Tuple

from app.models.domain import Variable, VariableType

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pattern tables
# ---------------------------------------------------------------------------

# Lowest specificity first so type-specific rows can upgrade a generic match.
VARIABLE_PATTERNS: List[Tuple[Pattern[str], VariableType, float]] = [
    (re.compile(r"\{\{([A-Z_]+)\}\}"), VariableType.TEXT, 0.9),
    (re.compile(r"\[([A-Z_]+)\]"), VariableType.TEXT, 0.8),
    (re.compile(r"\{\{(DATA_[A-Z_]*|DT_[A-Z_]*)\}\}"), VariableType.DATE, 0.95),
    (re.compile(r"__/__/____|dd/mm/aaaa"), VariableType.DATE, 0.7),
    (re.compile(r"\{\{(VALOR_[A-Z_]*|VL_[A-Z_]*|PRECO_[A-Z_]*)\}\}"), VariableType.CURRENCY, 0.95),
    (re.compile(r"R\$\s*_+"), VariableType.CURRENCY, 0.8),
    (re.compile(r"\{\{(NUM_[A-Z_]*|QTD_[A-Z_]*)\}\}"), VariableType.NUMBER, 0.9),
    (re.compile(r"\{\{(EMAIL_[A-Z_]*)\}\}"), VariableType.EMAIL, 0.95),
    (re.compile(r"\{\{(CPF_[A-Z_]*)\}\}"), VariableType.CPF, 0.95),
    (re.compile(r"\{\{(CNPJ_[A-Z_]*)\}\}"), VariableType.CNPJ, 0.95),
    (re.compile(r"___\.___\.___-__"), VariableType.CPF, 0.8),
    (re.compile(r"__\.___\.___/____-__"), VariableType.CNPJ, 0.8),
]

# (phrase, synthetic variable name, type)
CONTEXTUAL_PATTERNS: List[Tuple[Pattern[str], str, VariableType]] = [
    (re.compile(r"nome\s+do\s+(?:requerente|autor|réu)", re.IGNORECASE),
     "NOME_PARTE", VariableType.TEXT),
    (re.compile(r"endereço\s+(?:completo|residencial)", re.IGNORECASE),
     "ENDERECO", VariableType.TEXT),
    (re.compile(r"telefone\s+(?:celular|fixo)?", re.IGNORECASE),
     "TELEFONE", VariableType.TEXT),
    (re.compile(r"processo\s+n[úo]?\s*[.:º°]", re.IGNORECASE),
     "NUMERO_PROCESSO", VariableType.TEXT),
    (re.compile(r"comarca\s+de", re.IGNORECASE),
     "COMARCA", VariableType.TEXT),
    (re.compile(r"valor\s+da\s+(?:causa|condenação)", re.IGNORECASE),
     "VALOR_CAUSA", VariableType.CURRENCY),
]

CONTEXTUAL_CONFIDENCE = 0.85

TYPE_PREFIXES: Dict[VariableType, str] = {
    VariableType.TEXT: "TEXTO",
    VariableType.DATE: "DATA",
    VariableType.CURRENCY: "VALOR",
    VariableType.NUMBER: "NUMERO",
    VariableType.EMAIL: "EMAIL",
    VariableType.CPF: "CPF",
    VariableType.CNPJ: "CNPJ",
}

REQUIRED_KEYWORDS = ("obrigatório", "necessário", "requerido", "essencial")
REQUIRED_CONTEXT_WINDOW = 100

MAX_VARIABLES = 20


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def detect_variables(text: str) -> List[Variable]:
    """
    Return up to MAX_VARIABLES variables found in *text*, most confident first.

    Never raises; returns an empty list when nothing matches.
    """
    detected: Dict[str, Variable] = {}
    seen_spans: DefaultDict[str, Set[Tuple[int, int]]] = collections.defaultdict(set)
    counters: Counter[VariableType] = collections.Counter()

    for pattern, var_type, confidence in VARIABLE_PATTERNS:
        for match in pattern.finditer(text):
            literal = match.group(0)
            captured: Optional[str] = match.group(1) if pattern.groups else None
            generated = captured is None
            if generated:
                counters[var_type] += 1
                captured = f"{TYPE_PREFIXES[var_type]}_{counters[var_type]}"

            name = captured.strip().upper()
            if len(name) <= 1:
                continue

            existing = detected.get(name)
            if existing is None:
                if generated:
                    required = has_obligation_word(
                        span_context(text, match.start(), match.end(), REQUIRED_CONTEXT_WINDOW)
                    )
                else:
                    required = is_required_variable(name, text)
                existing = detected[name] = Variable(
                    name=name,
                    variable_type=var_type,
                    pattern=literal,
                    confidence=confidence,
                    examples=[],
                    required=required,
                )
            elif confidence > existing.confidence:
                existing.variable_type = var_type
                existing.pattern = literal
                existing.confidence = confidence

            if match.span() not in seen_spans[name]:
                seen_spans[name].add(match.span())
                existing.examples.append(literal)

    _add_contextual_variables(text, detected)

    ranked = sorted(detected.values(), key=lambda v: v.confidence, reverse=True)
    logger.debug(
        "detect_variables: %d distinct names, returning %d",
        len(ranked),
        min(len(ranked), MAX_VARIABLES),
    )
    return ranked[:MAX_VARIABLES]


def is_required_variable(name: str, text: str) -> bool:
    """True if an obligation word sits near the first occurrence of *name*."""
    return has_obligation_word(variable_context(name, text, REQUIRED_CONTEXT_WINDOW))


def has_obligation_word(context: str) -> bool:
    lowered = context.lower()
    return any(keyword in lowered for keyword in REQUIRED_KEYWORDS)


def variable_context(name: str, text: str, window: int) -> str:
    """Return *window* characters either side of the first *name* in *text*."""
    index = text.find(name)
    if index == -1:
        return ""
    return span_context(text, index, index + len(name), window)


def span_context(text: str, start: int, end: int, window: int) -> str:
    """Return ``text[start:end]`` widened by *window* characters on each side."""
    return text[max(0, start - window):min(len(text), end + window)]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _add_contextual_variables(text: str, detected: Dict[str, Variable]) -> None:
    for phrase, name, var_type in CONTEXTUAL_PATTERNS:
        if name in detected or not phrase.search(text):
            continue
        placeholder = f"{{{{{name}}}}}"
        detected[name] = Variable(
            name=name,
            variable_type=var_type,
            pattern=placeholder,
            confidence=CONTEXTUAL_CONFIDENCE,
            examples=[placeholder],
            required=True,
        )
