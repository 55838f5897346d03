"""Pydantic models for Costeo AI."""

from models.costing import (
    EstimationMode,
    ProfessionalLine,
    MaterialLine,
    CostParameters,
    CostBreakdown,
    EstimationPlan,
    EstimationSources,
    CatalogSamples,
    EstimationMeta,
    EstimationResult,
    PLAN_OUTPUT_SCHEMA,
)
from models.catalog import ProfessionalRecord, MaterialRecord, CostingRecord

__all__ = [
    "EstimationMode",
    "ProfessionalLine",
    "MaterialLine",
    "CostParameters",
    "CostBreakdown",
    "EstimationPlan",
    "EstimationSources",
    "CatalogSamples",
    "EstimationMeta",
    "EstimationResult",
    "PLAN_OUTPUT_SCHEMA",
    "ProfessionalRecord",
    "MaterialRecord",
    "CostingRecord",
]
