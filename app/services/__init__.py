"""Service layer exports."""

from .analysis_engine import AnalysisEngine, AnalysisResult, UsageRecord, estimate_cost
from .context_assembler import benchmark_matches_offer, build_analysis_input
from .errors import (
    InvalidOfferDataError,
    MissingMetricsError,
    ModelOutputFailure,
    ModelOutputInvalidError,
    OfferAccessDeniedError,
    OfferAnalysisError,
    OfferNotFoundError,
    RateLimitedError,
    ReportAccessDeniedError,
    ReportNotFoundError,
)
from .offer_analysis import OfferAnalysisService
from .prompt_builder import OUTPUT_FORMAT, SYSTEM_INSTRUCTION, build_prompt
from .rate_limiter import AnalysisRateLimiter, InMemoryRateWindowStore

__all__ = [
    "AnalysisEngine",
    "AnalysisRateLimiter",
    "AnalysisResult",
    "InMemoryRateWindowStore",
    "InvalidOfferDataError",
    "MissingMetricsError",
    "ModelOutputFailure",
    "ModelOutputInvalidError",
    "OUTPUT_FORMAT",
    "OfferAccessDeniedError",
    "OfferAnalysisError",
    "OfferAnalysisService",
    "OfferNotFoundError",
    "RateLimitedError",
    "ReportAccessDeniedError",
    "ReportNotFoundError",
    "SYSTEM_INSTRUCTION",
    "UsageRecord",
    "benchmark_matches_offer",
    "build_analysis_input",
    "build_prompt",
    "estimate_cost",
]
