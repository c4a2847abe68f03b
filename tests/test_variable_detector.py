"""Tests for the variable detector."""
from app.models.domain import VariableType
from app.services.variable_detector import (
    MAX_VARIABLES,
    detect_variables,
    is_required_variable,
    span_context,
    variable_context,
)


def _by_name(variables):
    return {v.name: v for v in variables}


def test_brace_placeholders_are_typed_by_prefix():
    variables = detect_variables("Cliente {{NOME_CLIENTE}}, nascido em {{DATA_NASCIMENTO}}.")
    found = _by_name(variables)

    assert set(found) == {"NOME_CLIENTE", "DATA_NASCIMENTO"}
    assert found["NOME_CLIENTE"].variable_type == VariableType.TEXT
    assert found["NOME_CLIENTE"].confidence == 0.9
    assert found["DATA_NASCIMENTO"].variable_type == VariableType.DATE
    assert found["DATA_NASCIMENTO"].confidence == 0.95
    assert not any(v.required for v in variables)


def test_highest_confidence_wins_and_each_span_is_one_example():
    found = _by_name(detect_variables("Pagar {{VALOR_TOTAL}} conforme [VALOR_TOTAL]."))
    valor = found["VALOR_TOTAL"]

    assert valor.variable_type == VariableType.CURRENCY
    assert valor.confidence == 0.95
    assert valor.pattern == "{{VALOR_TOTAL}}"
    assert valor.examples == ["{{VALOR_TOTAL}}", "[VALOR_TOTAL]"]


def test_repeated_placeholder_keeps_one_example_per_occurrence():
    text = "De {{DATA_INICIO}} até {{DATA_FIM}}, renovável em {{DATA_INICIO}}."
    found = _by_name(detect_variables(text))

    assert found["DATA_INICIO"].examples == ["{{DATA_INICIO}}", "{{DATA_INICIO}}"]
    assert found["DATA_FIM"].examples == ["{{DATA_FIM}}"]


def test_lower_confidence_match_does_not_downgrade():
    found = _by_name(detect_variables("{{NOME}} e novamente [NOME]"))

    assert found["NOME"].confidence == 0.9
    assert found["NOME"].pattern == "{{NOME}}"
    assert found["NOME"].examples == ["{{NOME}}", "[NOME]"]


def test_masked_blanks_get_sequential_generated_names():
    text = "Data: __/__/____ ; vencimento: dd/mm/aaaa ; valor R$ _____"
    found = _by_name(detect_variables(text))

    assert found["DATA_1"].pattern == "__/__/____"
    assert found["DATA_2"].pattern == "dd/mm/aaaa"
    assert found["DATA_1"].variable_type == VariableType.DATE
    assert found["VALOR_1"].variable_type == VariableType.CURRENCY
    assert found["VALOR_1"].confidence == 0.8


def test_masked_cpf_and_cnpj():
    found = _by_name(detect_variables("CPF ___.___.___-__ e CNPJ __.___.___/____-__"))

    assert found["CPF_1"].variable_type == VariableType.CPF
    assert found["CNPJ_1"].variable_type == VariableType.CNPJ


def test_obligation_word_near_name_marks_required():
    found = _by_name(detect_variables("Informe {{CPF_AUTOR}} (campo obrigatório)."))

    assert found["CPF_AUTOR"].variable_type == VariableType.CPF
    assert found["CPF_AUTOR"].required is True


def test_obligation_word_near_masked_blank_marks_required():
    found = _by_name(detect_variables("Data de nascimento (campo obrigatório): __/__/____"))

    assert found["DATA_1"].required is True


def test_each_masked_blank_uses_its_own_surroundings():
    text = "Valor da multa (obrigatório): R$ ____" + " " * 150 + "Desconto: R$ ____"
    found = _by_name(detect_variables(text))

    assert found["VALOR_1"].required is True
    assert found["VALOR_2"].required is False


def test_obligation_word_far_away_is_ignored():
    text = "{{NOME}}" + " " * 150 + "obrigatório"
    assert is_required_variable("NOME", text) is False


def test_contextual_phrases_add_required_synthetic_variables():
    found = _by_name(detect_variables("Nome do autor: ________. Comarca de Campinas."))

    assert set(found) == {"NOME_PARTE", "COMARCA"}
    parte = found["NOME_PARTE"]
    assert parte.confidence == 0.85
    assert parte.required is True
    assert parte.pattern == "{{NOME_PARTE}}"


def test_contextual_phrase_does_not_replace_pattern_match():
    found = _by_name(detect_variables("{{COMARCA}} - comarca de origem"))

    assert found["COMARCA"].confidence == 0.9
    assert found["COMARCA"].required is False


def test_valor_da_causa_is_currency():
    found = _by_name(detect_variables("Dá-se à causa o valor da causa indicado."))
    assert found["VALOR_CAUSA"].variable_type == VariableType.CURRENCY


def test_single_letter_names_are_discarded():
    assert detect_variables("{{A}} [B]") == []


def test_output_is_sorted_and_capped():
    placeholders = " ".join(f"{{{{CAMPO_{chr(65 + i)}}}}}" for i in range(25))
    variables = detect_variables(placeholders + " __/__/____ {{DATA_FIM}}")

    assert len(variables) == MAX_VARIABLES
    assert variables[0].name == "DATA_FIM"
    confidences = [v.confidence for v in variables]
    assert confidences == sorted(confidences, reverse=True)


def test_names_are_unique(peticao_text: str):
    names = [v.name for v in detect_variables(peticao_text)]
    assert len(names) == len(set(names))


def test_detection_is_deterministic():
    text = "__/__/____ e __/__/____ e R$ ___ e {{NOME}}"
    assert detect_variables(text) == detect_variables(text)


def test_variable_context_window():
    text = "a" * 10 + "NOME" + "b" * 10
    assert variable_context("NOME", text, 3) == "aaaNOMEbbb"
    assert variable_context("AUSENTE", text, 3) == ""


def test_span_context_is_clamped_to_text():
    assert span_context("abcdef", 1, 3, 10) == "abcdef"
    assert span_context("abcdef", 2, 4, 1) == "bcde"
