"""Costing Pydantic models for Costeo AI.

This module defines the line items, financial parameters and cost breakdown
of a consulting-proposal production cost estimate, plus the JSON schema the
oracle is asked to honor when it drafts a plan.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class EstimationMode(str, Enum):
    """How the source text reached the final structured-generation call."""

    DIRECT = "direct"          # Raw text fits in a single call
    CONDENSED = "condensed"    # Chunked, extracted and merged first


# =============================================================================
# LINE ITEMS
# =============================================================================


class ProfessionalLine(BaseModel):
    """One staffing requirement of the plan."""

    role: str = Field(default="", description="Role or position (cargo)")
    profile: str = Field(default="", description="Required profile / experience")
    quantity: float = Field(default=0.0, ge=0, description="Number of people")
    months: float = Field(default=0.0, ge=0, description="Months on the engagement")
    dedication: float = Field(
        default=1.0, ge=0, le=2,
        description="Fraction of full time (1.0 = 100%)"
    )
    monthly_value: float = Field(
        default=0.0, ge=0,
        alias="monthlyValue",
        description="Nominal monthly pay in currency units"
    )
    justification: str = Field(default="", description="Why this line is needed / price source")

    class Config:
        populate_by_name = True


class MaterialLine(BaseModel):
    """One non-labor cost item of the plan."""

    name: str = Field(default="", description="Item name")
    unit: str = Field(default="", description="Unit of measurement")
    quantity: float = Field(default=0.0, ge=0, description="Units required")
    unit_price: float = Field(
        default=0.0, ge=0,
        alias="unitPrice",
        description="Price per unit in currency units"
    )
    justification: str = Field(default="", description="Why this line is needed / price source")

    class Config:
        populate_by_name = True


# =============================================================================
# PARAMETERS & BREAKDOWN
# =============================================================================


class CostParameters(BaseModel):
    """Financial parameters governing the totals.

    Percentages are plain percentages (0-100). factor_prestacional is a
    multiplier applied to nominal monthly pay.
    """

    factor_prestacional: float = Field(
        default=1.58, ge=1.0, le=3.0,
        alias="factorPrestacional",
        description="Burden factor for mandatory social benefits"
    )
    imprevistos_pct: float = Field(
        default=5.0, ge=0, le=40,
        alias="imprevistosPct",
        description="Contingency percentage"
    )
    margen_pct: float = Field(
        default=30.0, ge=0, le=80,
        alias="margenPct",
        description="Target margin percentage"
    )
    presupuesto_fijo: Optional[float] = Field(
        default=None, ge=0, le=1e15,
        alias="presupuestoFijo",
        description="Fixed budget of the tender, if known"
    )

    class Config:
        populate_by_name = True


class CostBreakdown(BaseModel):
    """Financial totals derived from a plan and its parameters.

    Monetary fields are whole currency units.
    """

    subtotal_professionals: int = Field(default=0, alias="subtotalProfessionals")
    subtotal_materials: int = Field(default=0, alias="subtotalMaterials")
    subtotal_production: int = Field(default=0, alias="subtotalProduction")
    contingency: int = Field(default=0)
    total_production: int = Field(default=0, alias="totalProduction")
    suggested_offer: Optional[int] = Field(
        default=None,
        alias="suggestedOffer",
        description="Price covering production after the target margin; null when margin >= 100"
    )
    possible_margin: Optional[float] = Field(
        default=None,
        alias="possibleMargin",
        description="Margin percentage left by the fixed budget; null without a budget"
    )

    class Config:
        populate_by_name = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to camelCase dictionary for JSON serialization."""
        return self.model_dump(by_alias=True)


# =============================================================================
# PLAN & ESTIMATION I/O
# =============================================================================


class EstimationPlan(BaseModel):
    """Normalized line-item plan."""

    assumptions: List[str] = Field(default_factory=list)
    professionals: List[ProfessionalLine] = Field(default_factory=list)
    materials: List[MaterialLine] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to camelCase dictionary for JSON serialization."""
        return self.model_dump(by_alias=True)


class EstimationSources(BaseModel):
    """Free-text inputs describing the contract."""

    object_text: str = Field(default="", alias="objectText", description="Contract object (objeto)")
    methodology_text: str = Field(default="", alias="methodologyText", description="Methodology (metodologia)")
    tdr_text: str = Field(default="", alias="tdrText", description="Terms of reference (TDR)")
    notes: str = Field(default="", description="Free notes from the analyst")
    methodology_pdf_text: str = Field(default="", alias="methodologyPdfText")
    tdr_pdf_text: str = Field(default="", alias="tdrPdfText")

    class Config:
        populate_by_name = True


class CatalogSamples(BaseModel):
    """Catalog records handed to the oracle as pricing reference."""

    professionals: List[Dict[str, Any]] = Field(default_factory=list)
    materials: List[Dict[str, Any]] = Field(default_factory=list)


class EstimationMeta(BaseModel):
    """How an estimate was produced."""

    mode: EstimationMode = Field(default=EstimationMode.DIRECT)
    source_chars: int = Field(default=0, alias="sourceChars")
    chunk_count: int = Field(default=0, alias="chunkCount")
    oracle_calls: int = Field(default=0, alias="oracleCalls")
    tokens_used: int = Field(default=0, alias="tokensUsed")
    duration_ms: int = Field(default=0, alias="durationMs")

    class Config:
        populate_by_name = True
        use_enum_values = True


class EstimationResult(BaseModel):
    """Plan plus the breakdown computed from the caller's parameters."""

    plan: EstimationPlan
    totals: CostBreakdown
    meta: EstimationMeta = Field(default_factory=EstimationMeta)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to camelCase dictionary for JSON serialization."""
        return self.model_dump(by_alias=True)


# =============================================================================
# ORACLE OUTPUT SCHEMA
# =============================================================================


PLAN_OUTPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "assumptions": {"type": "array", "items": {"type": "string"}},
        "professionals": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "role": {"type": "string"},
                    "profile": {"type": "string"},
                    "quantity": {"type": "number"},
                    "dedication": {"type": "number"},
                    "months": {"type": "number"},
                    "monthlyValue": {"type": "number"},
                    "justification": {"type": "string"},
                },
                "required": ["role", "quantity", "dedication", "months", "monthlyValue"],
            },
        },
        "materials": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "name": {"type": "string"},
                    "unit": {"type": "string"},
                    "quantity": {"type": "number"},
                    "unitPrice": {"type": "number"},
                    "justification": {"type": "string"},
                },
                "required": ["name", "quantity", "unitPrice"],
            },
        },
    },
    "required": ["assumptions", "professionals", "materials"],
}
