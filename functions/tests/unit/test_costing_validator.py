"""Unit tests for costing request validation."""

import pytest

from config.errors import ValidationError
from models.costing import CostParameters
from validators.costing_validator import (
    extract_params,
    parse_cost_parameters,
    parse_sources,
    validate_cost_parameters,
)


class TestValidateCostParameters:
    """Tests for validate_cost_parameters."""

    def test_none_gives_defaults(self):
        result = validate_cost_parameters(None)

        assert result.is_valid
        assert result.parsed == CostParameters()

    def test_camel_and_snake_case(self):
        camel = validate_cost_parameters({"factorPrestacional": 1.6, "margenPct": 20})
        snake = validate_cost_parameters({"factor_prestacional": 1.6, "margen_pct": 20})

        assert camel.parsed == snake.parsed
        assert camel.parsed.margen_pct == 20

    def test_numeric_strings_from_forms(self):
        result = validate_cost_parameters({"imprevistosPct": "7.5", "presupuestoFijo": "250000000"})

        assert result.parsed.imprevistos_pct == 7.5
        assert result.parsed.presupuesto_fijo == 250_000_000

    def test_blank_values_take_defaults(self):
        result = validate_cost_parameters({"margenPct": "", "imprevistosPct": None})

        assert result.is_valid
        assert result.parsed.margen_pct == 30
        assert result.parsed.imprevistos_pct == 5

    def test_zero_budget_means_no_budget(self):
        result = validate_cost_parameters({"presupuestoFijo": 0})

        assert result.parsed.presupuesto_fijo is None

    @pytest.mark.parametrize("data", [
        {"factorPrestacional": 0.5},
        {"factorPrestacional": 3.5},
        {"imprevistosPct": 41},
        {"margenPct": 81},
        {"margenPct": -1},
        {"presupuestoFijo": -10},
        {"margenPct": "mucho"},
    ])
    def test_out_of_range(self, data):
        result = validate_cost_parameters(data)

        assert not result.is_valid
        assert result.errors

    def test_not_a_mapping(self):
        assert not validate_cost_parameters(["margenPct", 20]).is_valid


class TestParseCostParameters:
    """Tests for parse_cost_parameters."""

    def test_invalid_raises_400(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_cost_parameters({"margenPct": 95})

        assert exc_info.value.http_status == 400
        assert exc_info.value.details["field"] == "params"
        assert any("margenPct" in e for e in exc_info.value.details["errors"])


class TestExtractParams:
    """Tests for extract_params."""

    def test_nested_params(self):
        assert extract_params({"params": {"margenPct": 10}, "margenPct": 99}) == {"margenPct": 10}

    def test_top_level_fields(self):
        body = {"objeto": "x", "margenPct": 10, "factorPrestacional": 1.5}

        assert extract_params(body) == {"margenPct": 10, "factorPrestacional": 1.5}


class TestParseSources:
    """Tests for parse_sources."""

    def test_camel_case_fields(self):
        sources = parse_sources({"objectText": " Interventoría ", "tdrText": "TDR", "notes": "n"})

        assert sources.object_text == "Interventoría"
        assert sources.tdr_text == "TDR"
        assert sources.notes == "n"

    def test_form_field_names(self):
        sources = parse_sources({"objeto": "Consultoría", "metodologiaText": "Fases", "notas": "6 meses"})

        assert sources.object_text == "Consultoría"
        assert sources.methodology_text == "Fases"
        assert sources.notes == "6 meses"

    def test_pdf_text_alone_is_enough(self):
        sources = parse_sources({}, tdr_pdf_text="Texto del TDR")

        assert sources.tdr_pdf_text == "Texto del TDR"

    def test_no_sources(self):
        with pytest.raises(ValidationError):
            parse_sources({"objeto": "   "})

    def test_pasted_base64_pdf(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_sources({"tdrText": "data:application/pdf;base64,JVBERi0xLjQK"})

        assert exc_info.value.field == "tdrText"
