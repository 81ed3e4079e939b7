"""
Response envelopes for AI report endpoints.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from .analysis import AnalysisOutput


class UsageSummary(BaseModel):
    """Human-readable token usage attached to a fresh analysis."""

    tokens_used: int = Field(..., ge=0)
    estimated_cost: str = Field(
        ..., description="Cost formatted as currency with six decimals, e.g. '$0.000412'."
    )


class AnalyzeOfferResponse(BaseModel):
    """Payload returned after an offer has been analyzed."""

    success: bool = True
    report_id: str
    analysis: AnalysisOutput
    usage: UsageSummary
    created_at: datetime


class ReportSummary(BaseModel):
    """Compact view used when listing an offer's report history."""

    id: str
    summary: str
    validation_status: str
    ai_model: str
    total_tokens: int
    estimated_cost: float
    created_at: datetime


class OfferReportsResponse(BaseModel):
    success: bool = True
    count: int
    reports: List[ReportSummary] = Field(default_factory=list)


class ReportOfferSummary(BaseModel):
    id: str
    name: str
    niche: str
    country: str


class ReportUsage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    estimated_cost: float


class ReportDetail(BaseModel):
    """Full stored report together with the offer it belongs to."""

    id: str
    offer: ReportOfferSummary
    summary: str
    validation_status: str
    full_report: AnalysisOutput
    ai_model: str
    usage: ReportUsage
    created_at: datetime


class ReportDetailResponse(BaseModel):
    success: bool = True
    report: ReportDetail


__all__ = [
    "AnalyzeOfferResponse",
    "OfferReportsResponse",
    "ReportDetail",
    "ReportDetailResponse",
    "ReportOfferSummary",
    "ReportSummary",
    "ReportUsage",
    "UsageSummary",
]
