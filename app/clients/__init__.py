"""Expose constructed client wrappers."""

from .benchmark_store import BenchmarkStore
from .gemini import GeminiClient, GeminiModelError
from .offer_store import OfferStore
from .report_store import ReportStore
from .sqlite_store import SQLiteStore

__all__ = [
    "BenchmarkStore",
    "GeminiClient",
    "GeminiModelError",
    "OfferStore",
    "ReportStore",
    "SQLiteStore",
]
