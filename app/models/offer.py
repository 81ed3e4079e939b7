"""
Domain models for offers, their metrics snapshot, and market benchmarks.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredOffer(BaseModel):
    """Represents an offer row owned by a single user."""

    id: str
    user_id: str
    name: str
    niche: str
    country: str
    traffic_source: str
    funnel_type: str
    budget: Optional[float] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utcnow)


class StoredMetrics(BaseModel):
    """Latest performance snapshot for an offer; numeric columns are nullable."""

    offer_id: str
    impressions: Optional[int] = None
    clicks: Optional[int] = None
    leads: Optional[int] = None
    sales: Optional[int] = None
    ctr: Optional[float] = None
    cpc: Optional[float] = None
    cpm: Optional[float] = None
    conversion_rate: Optional[float] = None
    roas: Optional[float] = None
    aov: Optional[float] = None
    revenue: Optional[float] = None
    cost: Optional[float] = None
    updated_at: datetime = Field(default_factory=_utcnow)


class StoredBenchmark(BaseModel):
    """Market reference range; unset scope columns make it niche-wide."""

    id: str
    niche: str
    country: Optional[str] = None
    traffic_source: Optional[str] = None
    funnel_type: Optional[str] = None
    metric_name: str
    min_value: float
    ideal_value: float
    max_value: float
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_global(self) -> bool:
        return (
            self.country is None
            and self.traffic_source is None
            and self.funnel_type is None
        )


__all__ = ["StoredBenchmark", "StoredMetrics", "StoredOffer"]
