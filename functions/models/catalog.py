"""Catalog and saved-costing models for Costeo AI.

Plain keyed records kept by the storage layer. Catalog records are the
pricing reference handed to the oracle; costing records are saved plans that
stay recomputable through the totals engine.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from models.costing import CostParameters, MaterialLine, ProfessionalLine


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProfessionalRecord(BaseModel):
    """A known professional role and its reference monthly rate."""

    id: Optional[str] = Field(default=None, description="Record ID")
    role: str = Field(..., min_length=1, description="Role / profile name (perfil)")
    monthly_value: float = Field(
        default=0.0, ge=0,
        alias="monthlyValue",
        description="Reference monthly pay"
    )
    seniority: str = Field(default="", description="Experience requirement")
    notes: str = Field(default="")

    class Config:
        populate_by_name = True

    def search_text(self) -> str:
        return f"{self.role} {self.seniority} {self.notes}"


class MaterialRecord(BaseModel):
    """A known material / equipment item and its reference unit price."""

    id: Optional[str] = Field(default=None, description="Record ID")
    name: str = Field(..., min_length=1, description="Item name")
    unit: str = Field(default="", description="Unit of measurement")
    unit_price: float = Field(
        default=0.0, ge=0,
        alias="unitPrice",
        description="Reference price per unit"
    )
    category: str = Field(default="", description="Software, hardware, travel, ...")
    notes: str = Field(default="")

    class Config:
        populate_by_name = True

    def search_text(self) -> str:
        return f"{self.name} {self.category} {self.notes}"


class CostingRecord(BaseModel):
    """A saved costing: plan lines plus the parameters that price them."""

    id: Optional[str] = Field(default=None, description="Record ID")
    objeto: str = Field(default="", description="Contract object, used as title")
    assumptions: List[str] = Field(default_factory=list)
    professionals: List[ProfessionalLine] = Field(default_factory=list)
    materials: List[MaterialLine] = Field(default_factory=list)
    params: CostParameters = Field(default_factory=CostParameters)
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    class Config:
        populate_by_name = True

    def summary(self) -> Dict[str, Any]:
        """Listing view of the record."""
        return {
            "id": self.id,
            "objeto": self.objeto,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "professionals": len(self.professionals),
            "materials": len(self.materials),
        }
