"""Unit tests for the totals engine."""

import pytest

from models.costing import CostParameters, MaterialLine, ProfessionalLine
from services.totals_engine import compute_totals, material_cost, professional_cost
from tests.fixtures.mock_costing_data import get_valid_oracle_plan


class TestLineCosts:
    """Tests for per-line cost helpers."""

    def test_professional_cost_from_model(self):
        line = ProfessionalLine(role="Inspector", quantity=2, months=6, dedication=0.5, monthly_value=5_000_000)
        assert professional_cost(line, 1.0) == pytest.approx(30_000_000)

    def test_professional_cost_from_mapping_with_alias(self):
        line = {"quantity": 1, "months": 2, "dedication": 1, "monthlyValue": 1_000_000}
        assert professional_cost(line, 1.5) == pytest.approx(3_000_000)

    def test_missing_dedication_counts_as_full_time(self):
        line = {"quantity": 1, "months": 1, "monthlyValue": 100}
        assert professional_cost(line, 1.0) == pytest.approx(100)

    def test_material_cost(self):
        assert material_cost(MaterialLine(name="Camioneta", quantity=6, unit_price=4_500_000)) == 27_000_000
        assert material_cost({"quantity": 3, "unit_price": 10}) == 30

    def test_invalid_numbers_contribute_nothing(self):
        assert material_cost({"quantity": "abc", "unitPrice": 100}) == 0
        assert professional_cost({"quantity": -1, "months": 6, "monthlyValue": 10}, 1.58) == 0


class TestComputeTotals:
    """Tests for compute_totals."""

    def test_reference_example(self, sample_params):
        professionals = [{"quantity": 2, "months": 6, "dedication": 0.5, "monthlyValue": 5_000_000}]

        totals = compute_totals(professionals, [], sample_params)

        assert totals.subtotal_professionals == 47_400_000
        assert totals.subtotal_materials == 0
        assert totals.contingency == 2_370_000
        assert totals.total_production == 49_770_000
        assert totals.suggested_offer == 71_100_000
        assert totals.possible_margin is None

    def test_full_plan(self, sample_params):
        plan = get_valid_oracle_plan()

        totals = compute_totals(plan["professionals"], plan["materials"], sample_params)

        assert totals.subtotal_professionals == 151_680_000
        assert totals.subtotal_materials == 27_800_000
        assert totals.subtotal_production == 179_480_000
        assert totals.contingency == 8_974_000
        assert totals.total_production == 188_454_000
        assert totals.suggested_offer == 269_220_000

    def test_breakdown_adds_up(self):
        professionals = [{"quantity": 1.3, "months": 2.7, "dedication": 0.33, "monthlyValue": 1_234_567.89}]
        materials = [{"quantity": 3.3, "unitPrice": 99_999.99}]
        params = {"factorPrestacional": 1.61, "imprevistosPct": 7.5, "margenPct": 12}

        totals = compute_totals(professionals, materials, params)

        assert totals.subtotal_production == totals.subtotal_professionals + totals.subtotal_materials
        assert totals.total_production == totals.subtotal_production + totals.contingency

    def test_empty_plan_is_all_zero(self, sample_params):
        totals = compute_totals([], [], sample_params)

        assert totals.subtotal_production == 0
        assert totals.total_production == 0
        assert totals.suggested_offer == 0

    def test_none_inputs_use_defaults(self):
        totals = compute_totals(None, None, None)

        assert totals.total_production == 0
        assert totals.suggested_offer == 0
        assert totals.possible_margin is None

    def test_default_parameters_applied(self):
        professionals = [{"quantity": 1, "months": 1, "dedication": 1, "monthlyValue": 1_000_000}]

        totals = compute_totals(professionals, [])

        assert totals.subtotal_professionals == 1_580_000
        assert totals.contingency == 79_000

    def test_zero_margin_offer_equals_total(self):
        materials = [{"quantity": 1, "unitPrice": 1_000_000}]

        totals = compute_totals([], materials, {"margenPct": 0, "imprevistosPct": 10})

        assert totals.total_production == 1_100_000
        assert totals.suggested_offer == totals.total_production

    def test_margin_of_hundred_has_no_offer(self):
        materials = [{"quantity": 1, "unitPrice": 1_000_000}]

        totals = compute_totals([], materials, {"margenPct": 100})

        assert totals.suggested_offer is None

    def test_margin_above_hundred_is_clamped(self):
        totals = compute_totals([], [{"quantity": 1, "unitPrice": 10}], {"margenPct": 250})

        assert totals.suggested_offer is None

    def test_possible_margin_with_budget(self):
        materials = [{"quantity": 1, "unitPrice": 800_000}]
        params = CostParameters(imprevistos_pct=0, presupuesto_fijo=1_000_000)

        totals = compute_totals([], materials, params)

        assert totals.possible_margin == 20.0

    def test_possible_margin_negative_when_over_budget(self):
        materials = [{"quantity": 1, "unitPrice": 1_500_000}]

        totals = compute_totals([], materials, {"imprevistosPct": 0, "presupuestoFijo": 1_000_000})

        assert totals.possible_margin == -50.0

    def test_zero_budget_means_no_budget(self):
        totals = compute_totals([], [{"quantity": 1, "unitPrice": 10}], {"presupuestoFijo": 0})

        assert totals.possible_margin is None

    def test_out_of_range_parameters_are_clamped(self):
        professionals = [{"quantity": 1, "months": 1, "dedication": 1, "monthlyValue": 100}]

        totals = compute_totals(professionals, [], {"factorPrestacional": 10, "imprevistosPct": -5})

        assert totals.subtotal_professionals == 300
        assert totals.contingency == 0

    def test_serializes_camel_case(self, sample_params):
        data = compute_totals([], [], sample_params).to_dict()

        assert set(data) == {
            "subtotalProfessionals", "subtotalMaterials", "subtotalProduction",
            "contingency", "totalProduction", "suggestedOffer", "possibleMargin",
        }
