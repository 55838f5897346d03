"""Plan normalization for Costeo AI.

Boundary between untrusted structured data (oracle output, API bodies, saved
payloads) and the totals engine. Any decoded value becomes a canonical
EstimationPlan; nothing here raises.
"""

from typing import Any, Dict, List, Mapping, Sequence

import structlog
from pydantic import BaseModel

from models.costing import EstimationPlan, MaterialLine, ProfessionalLine
from services.numeric import coerce_number
from services.totals_engine import (
    DEDICATION_BOUNDS,
    MONEY_BOUNDS,
    MONTHS_BOUNDS,
    QUANTITY_BOUNDS,
)

logger = structlog.get_logger(__name__)

# Canonical key first, then accepted alternatives (snake_case and the
# Spanish names used by earlier plan payloads).
PROFESSIONAL_KEYS: Dict[str, Sequence[str]] = {
    "role": ("role", "cargo", "rol"),
    "profile": ("profile", "perfil"),
    "quantity": ("quantity", "cantidad"),
    "months": ("months", "meses"),
    "dedication": ("dedication", "dedicacion", "dedicación"),
    "monthly_value": ("monthlyValue", "monthly_value", "valor_mensual"),
    "justification": ("justification", "justificacion", "fuente_valor"),
}

MATERIAL_KEYS: Dict[str, Sequence[str]] = {
    "name": ("name", "item", "nombre"),
    "unit": ("unit", "unidad"),
    "quantity": ("quantity", "cantidad"),
    "unit_price": ("unitPrice", "unit_price", "valor_unitario"),
    "justification": ("justification", "justificacion", "tipo"),
}


def _pick(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _number(value: Any, bounds: tuple) -> float:
    low, high, fallback = bounds
    return coerce_number(value, low, high, fallback)


def _records(value: Any) -> List[Mapping[str, Any]]:
    """Mapping entries of a list; anything else yields nothing."""
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def normalize_professional(record: Mapping[str, Any]) -> ProfessionalLine:
    """Coerce one decoded record into a ProfessionalLine."""
    keys = PROFESSIONAL_KEYS
    return ProfessionalLine(
        role=_text(_pick(record, keys["role"])),
        profile=_text(_pick(record, keys["profile"])),
        quantity=_number(_pick(record, keys["quantity"]), QUANTITY_BOUNDS),
        months=_number(_pick(record, keys["months"]), MONTHS_BOUNDS),
        dedication=_number(_pick(record, keys["dedication"]), DEDICATION_BOUNDS),
        monthly_value=_number(_pick(record, keys["monthly_value"]), MONEY_BOUNDS),
        justification=_text(_pick(record, keys["justification"])),
    )


def normalize_material(record: Mapping[str, Any]) -> MaterialLine:
    """Coerce one decoded record into a MaterialLine."""
    keys = MATERIAL_KEYS
    return MaterialLine(
        name=_text(_pick(record, keys["name"])),
        unit=_text(_pick(record, keys["unit"])),
        quantity=_number(_pick(record, keys["quantity"]), QUANTITY_BOUNDS),
        unit_price=_number(_pick(record, keys["unit_price"]), MONEY_BOUNDS),
        justification=_text(_pick(record, keys["justification"])),
    )


def normalize_plan(raw: Any) -> EstimationPlan:
    """Produce a canonical EstimationPlan from any decoded value.

    Missing or non-list collections become empty, non-mapping entries are
    dropped, strings are stripped and numbers clamped to the line-item bounds.
    Normalizing an already-normalized plan returns an equal plan.

    Args:
        raw: Decoded JSON, a mapping, an EstimationPlan, or anything else.

    Returns:
        EstimationPlan.
    """
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.warning("plan_not_a_mapping", received_type=type(raw).__name__)
        return EstimationPlan()

    assumptions_raw = raw.get("assumptions")
    assumptions: List[str] = []
    if isinstance(assumptions_raw, (list, tuple)):
        assumptions = [_text(a) for a in assumptions_raw if _text(a)]

    professionals = [normalize_professional(r) for r in _records(raw.get("professionals"))]
    materials = [normalize_material(r) for r in _records(raw.get("materials"))]

    return EstimationPlan(
        assumptions=assumptions,
        professionals=professionals,
        materials=materials,
    )
