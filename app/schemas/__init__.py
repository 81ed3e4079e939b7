"""Public schema exports."""

from .analysis import (
    ActionItem,
    AnalysisInput,
    AnalysisOutput,
    BenchmarkContext,
    BenchmarkMetric,
    Bottleneck,
    MetricsContext,
    OfferContext,
    OutputValidation,
    validate_analysis_output,
)
from .report import (
    AnalyzeOfferResponse,
    OfferReportsResponse,
    ReportDetail,
    ReportDetailResponse,
    ReportOfferSummary,
    ReportSummary,
    ReportUsage,
    UsageSummary,
)

__all__ = [
    "ActionItem",
    "AnalysisInput",
    "AnalysisOutput",
    "AnalyzeOfferResponse",
    "BenchmarkContext",
    "BenchmarkMetric",
    "Bottleneck",
    "MetricsContext",
    "OfferContext",
    "OfferReportsResponse",
    "OutputValidation",
    "ReportDetail",
    "ReportDetailResponse",
    "ReportOfferSummary",
    "ReportSummary",
    "ReportUsage",
    "UsageSummary",
    "validate_analysis_output",
]
