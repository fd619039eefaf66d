# access_scout/schemas.py
"""
Scan request model and plan tier → enrichment level mapping.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from access_scout.config import MAX_PAGE_CEILING


class PlanTier(str, Enum):
    FREE = "free"
    GUEST = "guest"
    ESSENTIALS = "essentials"
    PROFESSIONAL = "professional"


class EnrichmentLevel(str, Enum):
    NONE = "none"
    BASIC = "basic"
    ADVANCED = "advanced"


PLAN_ENRICHMENT: Dict[PlanTier, EnrichmentLevel] = {
    PlanTier.FREE: EnrichmentLevel.NONE,
    PlanTier.GUEST: EnrichmentLevel.BASIC,
    PlanTier.ESSENTIALS: EnrichmentLevel.ADVANCED,
    PlanTier.PROFESSIONAL: EnrichmentLevel.ADVANCED,
}


class ScanRequest(BaseModel):
    """Body of ``POST /api/scan``; unknown keys are ignored."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    website_url: str = Field(..., description="Seed URL of the site to scan.")
    scan_id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    plan: PlanTier
    max_pages: Optional[int] = Field(None, description="Page budget override, clamped to 1..50.")
    email: Optional[str] = None
    company_name: Optional[str] = None

    @field_validator("website_url")
    def _check_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("website_url is required")
        if "://" not in v:
            v = f"https://{v}"
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError("website_url must be an http(s) URL")
        return v

    @field_validator("scan_id", "customer_id", mode="before")
    def _coerce_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def page_budget(self) -> int:
        if self.max_pages is None or self.max_pages <= 0:
            return MAX_PAGE_CEILING
        return min(self.max_pages, MAX_PAGE_CEILING)

    @property
    def enrichment_level(self) -> EnrichmentLevel:
        return PLAN_ENRICHMENT[self.plan]

    def metadata(self) -> Dict[str, Any]:
        """Caller-supplied fields echoed unmodified in every response."""
        return {
            "scan_id": self.scan_id,
            "customer_id": self.customer_id,
            "email": self.email,
            "company_name": self.company_name,
            "website_url": self.website_url,
            "plan": self.plan.value,
        }


__all__ = ["PlanTier", "EnrichmentLevel", "PLAN_ENRICHMENT", "ScanRequest"]
