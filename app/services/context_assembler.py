"""Build the bounded analysis context from stored offer data."""

from __future__ import annotations

from typing import Iterable, Optional

from pydantic import ValidationError

from app.models.offer import StoredBenchmark, StoredMetrics, StoredOffer
from app.schemas.analysis import (
    AnalysisInput,
    BenchmarkContext,
    MetricsContext,
    OfferContext,
)

from .errors import InvalidOfferDataError, MissingMetricsError

_COUNT_FIELDS = ("impressions", "clicks", "leads", "sales")
_RATE_FIELDS = (
    "ctr",
    "cpc",
    "cpm",
    "conversion_rate",
    "roas",
    "aov",
    "revenue",
    "cost",
)


def benchmark_matches_offer(benchmark: StoredBenchmark, offer: StoredOffer) -> bool:
    """Exact scope match, or a niche-wide benchmark with no other scope set."""
    if benchmark.niche != offer.niche:
        return False
    if benchmark.is_global:
        return True
    return (
        benchmark.country == offer.country
        and benchmark.traffic_source == offer.traffic_source
        and benchmark.funnel_type == offer.funnel_type
    )


def _offer_context(offer: StoredOffer) -> OfferContext:
    return OfferContext(
        name=offer.name,
        niche=offer.niche,
        country=offer.country,
        traffic_source=offer.traffic_source,
        funnel_type=offer.funnel_type,
        budget=offer.budget,
        start_date=offer.start_date.date(),
        end_date=offer.end_date.date() if offer.end_date else None,
    )


def _metrics_context(metrics: StoredMetrics) -> MetricsContext:
    values: dict[str, float | int] = {}
    for name in _COUNT_FIELDS:
        values[name] = int(getattr(metrics, name) or 0)
    for name in _RATE_FIELDS:
        values[name] = float(getattr(metrics, name) or 0)
    return MetricsContext(**values)


def _benchmark_context(benchmark: StoredBenchmark) -> BenchmarkContext:
    return BenchmarkContext(
        metric_name=benchmark.metric_name,
        min_value=benchmark.min_value,
        ideal_value=benchmark.ideal_value,
        max_value=benchmark.max_value,
    )


def _violations(exc: ValidationError, prefix: str) -> list[str]:
    paths = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        paths.append(f"{prefix}.{loc}" if loc else prefix)
    return paths


def build_analysis_input(
    offer: StoredOffer,
    metrics: Optional[StoredMetrics],
    benchmarks: Iterable[StoredBenchmark],
) -> AnalysisInput:
    """Map stored records to an ``AnalysisInput``.

    Raises ``MissingMetricsError`` when the offer has never been measured and
    ``InvalidOfferDataError`` when stored rows violate the context models.
    Candidate benchmarks that do not match the offer's scope are dropped;
    the rest keep their retrieval order so the rendered prompt is stable.
    """
    if metrics is None:
        raise MissingMetricsError(offer.id)

    violations: list[str] = []
    try:
        offer_context = _offer_context(offer)
    except ValidationError as exc:
        violations.extend(_violations(exc, "offer"))
    try:
        metrics_context = _metrics_context(metrics)
    except ValidationError as exc:
        violations.extend(_violations(exc, "metrics"))

    matching: list[BenchmarkContext] = []
    for benchmark in benchmarks:
        if not benchmark_matches_offer(benchmark, offer):
            continue
        try:
            matching.append(_benchmark_context(benchmark))
        except ValidationError as exc:
            violations.extend(_violations(exc, f"benchmark {benchmark.id}"))

    if violations:
        raise InvalidOfferDataError(offer.id, violations=violations)

    return AnalysisInput(
        offer=offer_context,
        metrics=metrics_context,
        benchmarks=tuple(matching),
    )


__all__ = ["benchmark_matches_offer", "build_analysis_input"]
