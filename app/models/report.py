"""
Domain models for persisted AI reports.
"""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ReportDraft(BaseModel):
    """Report content produced by the analysis pipeline, before persistence."""

    user_id: str
    offer_id: str
    summary: str
    validation_status: str
    validation_explanation: str
    bottlenecks: List[Dict[str, Any]] = Field(default_factory=list)
    action_plan: List[Dict[str, Any]] = Field(default_factory=list)
    missing_data: List[str] = Field(default_factory=list)
    next_test_recommendations: str
    full_report: Dict[str, Any]
    ai_model: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    estimated_cost: float


class StoredReport(ReportDraft):
    """Report row once the store has assigned identity and timestamp."""

    id: str
    created_at: datetime


__all__ = ["ReportDraft", "StoredReport"]
