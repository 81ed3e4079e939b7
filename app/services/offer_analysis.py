"""
Orchestrates AI analysis of an offer and serves the resulting report history.
"""

from __future__ import annotations

import logging

from app.clients import BenchmarkStore, OfferStore, ReportStore
from app.models.offer import StoredOffer
from app.models.report import ReportDraft, StoredReport
from app.schemas import (
    AnalysisOutput,
    AnalyzeOfferResponse,
    OfferReportsResponse,
    ReportDetail,
    ReportDetailResponse,
    ReportOfferSummary,
    ReportSummary,
    ReportUsage,
    UsageSummary,
)

from .analysis_engine import AnalysisEngine, AnalysisResult
from .context_assembler import build_analysis_input
from .errors import (
    MissingMetricsError,
    OfferAccessDeniedError,
    OfferNotFoundError,
    RateLimitedError,
    ReportAccessDeniedError,
    ReportNotFoundError,
)
from .rate_limiter import AnalysisRateLimiter

logger = logging.getLogger(__name__)


class OfferAnalysisService:
    """Compose rate limiting, context assembly, and analysis into a report."""

    def __init__(
        self,
        *,
        offer_store: OfferStore,
        benchmark_store: BenchmarkStore,
        report_store: ReportStore,
        rate_limiter: AnalysisRateLimiter,
        engine: AnalysisEngine,
    ) -> None:
        self._offers = offer_store
        self._benchmarks = benchmark_store
        self._reports = report_store
        self._rate_limiter = rate_limiter
        self._engine = engine

    async def analyze_offer(self, *, user_id: str, offer_id: str) -> AnalyzeOfferResponse:
        """Generate, persist, and return a fresh AI report for ``offer_id``."""
        found = self._offers.find_offer_with_metrics(offer_id)
        if found is None:
            raise OfferNotFoundError(offer_id)
        offer, metrics = found
        self._ensure_owner(offer, user_id)

        # Preconditions run before the quota; a rejected request never uses a slot.
        if metrics is None:
            raise MissingMetricsError(offer_id)

        benchmarks = self._benchmarks.find_matching(
            niche=offer.niche,
            country=offer.country,
            traffic_source=offer.traffic_source,
            funnel_type=offer.funnel_type,
        )
        context = build_analysis_input(offer, metrics, benchmarks)

        if not self._rate_limiter.can_analyze(user_id):
            raise RateLimitedError(
                max_requests=self._rate_limiter.max_requests,
                window_seconds=self._rate_limiter.window_seconds,
            )

        logger.info(
            "Analyzing offer %s for user %s with %d benchmarks",
            offer_id,
            user_id,
            len(context.benchmarks),
        )

        result = await self._engine.analyze(context)
        report = self._reports.save(
            self._build_draft(user_id=user_id, offer_id=offer_id, result=result)
        )

        return AnalyzeOfferResponse(
            report_id=report.id,
            analysis=result.analysis,
            usage=UsageSummary(
                tokens_used=result.usage.total_tokens,
                estimated_cost=result.usage.formatted_cost(),
            ),
            created_at=report.created_at,
        )

    def list_offer_reports(self, *, user_id: str, offer_id: str) -> OfferReportsResponse:
        owner = self._offers.find_owner_of(offer_id)
        if owner is None:
            raise OfferNotFoundError(offer_id)
        if owner != user_id:
            raise OfferAccessDeniedError(offer_id)

        reports = [
            ReportSummary(
                id=report.id,
                summary=report.summary,
                validation_status=report.validation_status,
                ai_model=report.ai_model,
                total_tokens=report.total_tokens,
                estimated_cost=report.estimated_cost,
                created_at=report.created_at,
            )
            for report in self._reports.list_by_offer(offer_id)
        ]
        return OfferReportsResponse(count=len(reports), reports=reports)

    def get_report(self, *, user_id: str, report_id: str) -> ReportDetailResponse:
        report = self._reports.get_by_id(report_id)
        if report is None:
            raise ReportNotFoundError(report_id)
        if report.user_id != user_id:
            raise ReportAccessDeniedError(report_id)

        offer = self._offers.get_offer(report.offer_id)
        if offer is None:
            raise OfferNotFoundError(report.offer_id)

        return ReportDetailResponse(report=self._to_detail(report, offer))

    @staticmethod
    def _ensure_owner(offer: StoredOffer, user_id: str) -> None:
        if offer.user_id != user_id:
            raise OfferAccessDeniedError(offer.id)

    def _build_draft(
        self, *, user_id: str, offer_id: str, result: AnalysisResult
    ) -> ReportDraft:
        analysis = result.analysis
        document = analysis.model_dump(mode="json")
        return ReportDraft(
            user_id=user_id,
            offer_id=offer_id,
            summary=analysis.summary,
            validation_status=analysis.validation_status,
            validation_explanation=analysis.validation_explanation,
            bottlenecks=document["bottlenecks"],
            action_plan=document["action_plan"],
            missing_data=document["missing_data"],
            next_test_recommendations=analysis.next_test_recommendations,
            full_report=document,
            ai_model=self._engine.model_name,
            prompt_tokens=result.usage.prompt_tokens,
            completion_tokens=result.usage.completion_tokens,
            total_tokens=result.usage.total_tokens,
            estimated_cost=result.usage.estimated_cost,
        )

    @staticmethod
    def _to_detail(report: StoredReport, offer: StoredOffer) -> ReportDetail:
        return ReportDetail(
            id=report.id,
            offer=ReportOfferSummary(
                id=offer.id,
                name=offer.name,
                niche=offer.niche,
                country=offer.country,
            ),
            summary=report.summary,
            validation_status=report.validation_status,
            full_report=AnalysisOutput.model_validate(report.full_report),
            ai_model=report.ai_model,
            usage=ReportUsage(
                prompt_tokens=report.prompt_tokens,
                completion_tokens=report.completion_tokens,
                total_tokens=report.total_tokens,
                estimated_cost=report.estimated_cost,
            ),
            created_at=report.created_at,
        )


__all__ = ["OfferAnalysisService"]
