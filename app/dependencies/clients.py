"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from app.clients import BenchmarkStore, GeminiClient, OfferStore, ReportStore
from app.core.config import get_settings
from app.services import (
    AnalysisEngine,
    AnalysisRateLimiter,
    InMemoryRateWindowStore,
    OfferAnalysisService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_offer_store() -> OfferStore:
    """Provide shared SQLite offer store."""
    return OfferStore(_settings().database_path)


@lru_cache()
def get_benchmark_store() -> BenchmarkStore:
    """Provide shared SQLite benchmark store."""
    return BenchmarkStore(_settings().database_path)


@lru_cache()
def get_report_store() -> ReportStore:
    """Provide shared SQLite report store."""
    return ReportStore(_settings().database_path)


@lru_cache()
def get_gemini_client() -> GeminiClient:
    """Provide Gemini client instance."""
    return GeminiClient(_settings().gemini)


@lru_cache()
def get_rate_limiter() -> AnalysisRateLimiter:
    """Provide the process-wide analysis quota tracker."""
    settings = _settings()
    return AnalysisRateLimiter(
        max_requests=settings.rate_limit.max_requests,
        window_seconds=settings.rate_limit.window_seconds,
        store=InMemoryRateWindowStore(),
    )


def get_analysis_engine() -> AnalysisEngine:
    """Build an analysis engine using Gemini."""
    return AnalysisEngine(get_gemini_client(), _settings().gemini)


def get_offer_analysis_service() -> OfferAnalysisService:
    """Build the offer analysis service using configured clients."""
    return OfferAnalysisService(
        offer_store=get_offer_store(),
        benchmark_store=get_benchmark_store(),
        report_store=get_report_store(),
        rate_limiter=get_rate_limiter(),
        engine=get_analysis_engine(),
    )


__all__ = [
    "get_analysis_engine",
    "get_benchmark_store",
    "get_gemini_client",
    "get_offer_analysis_service",
    "get_offer_store",
    "get_rate_limiter",
    "get_report_store",
]
