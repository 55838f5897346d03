"""Totals engine for Costeo AI.

Turns professional and material line items plus the financial parameters
into a cost breakdown:

    professional cost = quantity × months × dedication × monthly value × burden factor
    material cost     = quantity × unit price
    contingency       = production subtotal × imprevistos%
    total production  = production subtotal + contingency
    suggested offer   = total production / (1 − margen%)
    possible margin   = (fixed budget − total production) / fixed budget × 100

Pure and total: every input is clamped before use, so there is no failure
mode. Lines and parameters may be pydantic models or plain mappings (saved
payloads, API bodies).
"""

from typing import Any, Iterable, Mapping, Optional, Union

from models.costing import CostBreakdown, CostParameters
from services.numeric import coerce_number, round_money, round_pct

# Line-item bounds: (min, max, fallback)
QUANTITY_BOUNDS = (0.0, 1e6, 0.0)
MONTHS_BOUNDS = (0.0, 1200.0, 0.0)
DEDICATION_BOUNDS = (0.0, 2.0, 1.0)
MONEY_BOUNDS = (0.0, 1e12, 0.0)

# Parameter bounds: (min, max, default)
FACTOR_PRESTACIONAL_BOUNDS = (1.0, 3.0, 1.58)
IMPREVISTOS_BOUNDS = (0.0, 40.0, 5.0)
MARGEN_BOUNDS = (0.0, 80.0, 30.0)
PRESUPUESTO_BOUNDS = (0.0, 1e15, 0.0)


def _field(item: Any, attr: str, alias: Optional[str] = None) -> Any:
    """Read a field from a model (attribute) or a mapping (alias or name)."""
    if isinstance(item, Mapping):
        if alias and alias in item:
            return item[alias]
        return item.get(attr)
    return getattr(item, attr, None)


def _number(item: Any, attr: str, bounds: tuple, alias: Optional[str] = None) -> float:
    low, high, fallback = bounds
    return coerce_number(_field(item, attr, alias), low, high, fallback)


def professional_cost(line: Any, factor_prestacional: float) -> float:
    """Burdened cost of one professional line."""
    return (
        _number(line, "quantity", QUANTITY_BOUNDS)
        * _number(line, "months", MONTHS_BOUNDS)
        * _number(line, "dedication", DEDICATION_BOUNDS)
        * _number(line, "monthly_value", MONEY_BOUNDS, "monthlyValue")
        * factor_prestacional
    )


def material_cost(line: Any) -> float:
    """Cost of one material line."""
    return (
        _number(line, "quantity", QUANTITY_BOUNDS)
        * _number(line, "unit_price", MONEY_BOUNDS, "unitPrice")
    )


def compute_totals(
    professionals: Optional[Iterable[Any]],
    materials: Optional[Iterable[Any]],
    params: Union[CostParameters, Mapping[str, Any], None] = None
) -> CostBreakdown:
    """Compute the cost breakdown of a plan.

    Args:
        professionals: ProfessionalLine models or mappings.
        materials: MaterialLine models or mappings.
        params: CostParameters or a mapping with the same fields (camelCase
            or snake_case). Missing values take the defaults.

    Returns:
        CostBreakdown with money rounded to whole units.
    """
    params = params if params is not None else {}
    factor = _number(params, "factor_prestacional", FACTOR_PRESTACIONAL_BOUNDS, "factorPrestacional")
    imprevistos_pct = _number(params, "imprevistos_pct", IMPREVISTOS_BOUNDS, "imprevistosPct")
    # The margin is clamped to [0, 100] rather than the API's [0, 80] so the
    # "margin >= 100 has no offer" case stays reachable from stored payloads.
    margen_pct = coerce_number(
        _field(params, "margen_pct", "margenPct"), MARGEN_BOUNDS[0], 100.0, MARGEN_BOUNDS[2]
    )
    presupuesto = _number(params, "presupuesto_fijo", PRESUPUESTO_BOUNDS, "presupuestoFijo")

    subtotal_professionals = sum(
        (professional_cost(line, factor) for line in (professionals or [])), 0.0
    )
    subtotal_materials = sum((material_cost(line) for line in (materials or [])), 0.0)

    # Sums are taken over the rounded parts so the breakdown adds up exactly
    subtotal_production = round_money(subtotal_professionals) + round_money(subtotal_materials)
    contingency = round_money(subtotal_production * imprevistos_pct / 100)
    total_production = subtotal_production + contingency

    suggested_offer = None
    if margen_pct < 100:
        suggested_offer = round_money(total_production / (1 - margen_pct / 100))

    possible_margin = None
    if presupuesto > 0:
        possible_margin = round_pct((presupuesto - total_production) / presupuesto * 100)

    return CostBreakdown(
        subtotal_professionals=round_money(subtotal_professionals),
        subtotal_materials=round_money(subtotal_materials),
        subtotal_production=subtotal_production,
        contingency=contingency,
        total_production=total_production,
        suggested_offer=suggested_offer,
        possible_margin=possible_margin,
    )
