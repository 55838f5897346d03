"""Request parsing and validation for costing endpoints.

Direct API input is range-checked here (explicit 400s), unlike oracle output,
which is absorbed by the plan normalizer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
import structlog

from config.errors import ValidationError
from models.costing import CostParameters, EstimationSources
from services.document_text import contains_base64_pdf

logger = structlog.get_logger(__name__)

# Request keys accepted for each source, camelCase first, then the form
# field names of the upload form.
SOURCE_FIELDS: Dict[str, tuple] = {
    "object_text": ("objectText", "objeto"),
    "methodology_text": ("methodologyText", "metodologiaText"),
    "tdr_text": ("tdrText",),
    "notes": ("notes", "notas"),
}

PARAM_FIELDS = ("factorPrestacional", "imprevistosPct", "margenPct", "presupuestoFijo")


@dataclass
class ValidationResult:
    """Result of request validation."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    parsed: Any = None


def _first(data: Mapping[str, Any], keys: tuple) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_cost_parameters(data: Optional[Mapping[str, Any]]) -> ValidationResult:
    """Validate financial parameters (all optional, defaults apply).

    Accepts camelCase or snake_case keys. Blank values (empty form fields)
    count as absent; a zero fixed budget means "no budget".

    Args:
        data: Raw parameters mapping.

    Returns:
        ValidationResult with a CostParameters in parsed.
    """
    if data is None:
        return ValidationResult(parsed=CostParameters())
    if not isinstance(data, Mapping):
        return ValidationResult(is_valid=False, errors=["params must be an object"])

    cleaned = {k: v for k, v in data.items() if not _blank(v)}
    for key in ("presupuestoFijo", "presupuesto_fijo"):
        if key in cleaned:
            try:
                if float(cleaned[key]) == 0:
                    cleaned.pop(key)
            except (TypeError, ValueError):
                pass

    try:
        return ValidationResult(parsed=CostParameters.model_validate(cleaned))
    except PydanticValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        logger.warning("cost_parameters_invalid", errors=errors)
        return ValidationResult(is_valid=False, errors=errors)


def parse_cost_parameters(data: Optional[Mapping[str, Any]]) -> CostParameters:
    """Validate parameters or raise ValidationError (HTTP 400)."""
    result = validate_cost_parameters(data)
    if not result.is_valid:
        raise ValidationError("Invalid cost parameters", field="params", details={"errors": result.errors})
    return result.parsed


def extract_params(body: Mapping[str, Any]) -> Dict[str, Any]:
    """Parameters from a body: a nested "params" object or top-level fields."""
    nested = body.get("params")
    if isinstance(nested, Mapping):
        return dict(nested)
    return {key: body[key] for key in PARAM_FIELDS if key in body}


def parse_sources(
    data: Mapping[str, Any],
    methodology_pdf_text: str = "",
    tdr_pdf_text: str = ""
) -> EstimationSources:
    """Build EstimationSources from a request body.

    Raises:
        ValidationError: If a text field carries a pasted base64 PDF, or no
            source text was provided at all.
    """
    values = {}
    for attr, keys in SOURCE_FIELDS.items():
        value = _first(data, keys)
        text = "" if value is None else str(value)
        if contains_base64_pdf(text):
            raise ValidationError(
                "A base64-encoded PDF was pasted as text; upload it as a file instead",
                field=keys[0]
            )
        values[attr] = text.strip()

    sources = EstimationSources(
        methodology_pdf_text=methodology_pdf_text,
        tdr_pdf_text=tdr_pdf_text,
        **values
    )
    if not any(getattr(sources, attr) for attr in (*SOURCE_FIELDS, "methodology_pdf_text", "tdr_pdf_text")):
        raise ValidationError("At least one source text or PDF is required", field="objectText")
    return sources
