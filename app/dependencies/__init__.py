"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_analysis_engine,
    get_benchmark_store,
    get_gemini_client,
    get_offer_analysis_service,
    get_offer_store,
    get_rate_limiter,
    get_report_store,
)
from .config import get_current_user_id

__all__ = [
    "get_analysis_engine",
    "get_benchmark_store",
    "get_current_user_id",
    "get_gemini_client",
    "get_offer_analysis_service",
    "get_offer_store",
    "get_rate_limiter",
    "get_report_store",
]
