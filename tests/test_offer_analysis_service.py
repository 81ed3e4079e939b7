try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
import re
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from app.clients import BenchmarkStore, OfferStore, ReportStore
from app.clients.gemini import GeminiModelError
from app.core.config import GeminiSettings
from app.models.offer import StoredMetrics
from app.services import (
    AnalysisEngine,
    AnalysisRateLimiter,
    InvalidOfferDataError,
    MissingMetricsError,
    ModelOutputFailure,
    ModelOutputInvalidError,
    OfferAccessDeniedError,
    OfferAnalysisService,
    OfferNotFoundError,
    RateLimitedError,
    ReportAccessDeniedError,
    ReportNotFoundError,
)

_EXACT_SCOPE = {"country": "BR", "traffic_source": "facebook", "funnel_type": "direct_sales"}


class StubGemini:
    def __init__(self, reply: str = "", *, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def generate_json(self, *, prompt: str, **_: object) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    async def count_tokens(self, text: str) -> int:
        return 320 if text == self.reply else 1480


@dataclass
class Harness:
    service: OfferAnalysisService
    offers: OfferStore
    benchmarks: BenchmarkStore
    reports: ReportStore
    limiter: AnalysisRateLimiter
    gemini: StubGemini


@pytest.fixture()
def harness(tmp_path, valid_analysis: dict) -> Harness:
    db_path = str(tmp_path / "service.db")
    offers = OfferStore(db_path)
    benchmarks = BenchmarkStore(db_path)
    reports = ReportStore(db_path)
    limiter = AnalysisRateLimiter(max_requests=5, window_seconds=3600)
    gemini = StubGemini(json.dumps(valid_analysis))
    settings = GeminiSettings(GEMINI_API_KEY="test-key", GEMINI_MODEL_NAME="gemini-2.5-flash")
    service = OfferAnalysisService(
        offer_store=offers,
        benchmark_store=benchmarks,
        report_store=reports,
        rate_limiter=limiter,
        engine=AnalysisEngine(gemini, settings),
    )
    return Harness(service, offers, benchmarks, reports, limiter, gemini)


def _seed_offer(harness: Harness, *, user_id: str = "user-1", with_metrics: bool = True) -> str:
    offer = harness.offers.add_offer(
        user_id=user_id,
        name="Sneaker drop",
        niche="ecommerce",
        traffic_source="facebook",
        funnel_type="direct_sales",
        country="BR",
        start_date=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )
    if with_metrics:
        harness.offers.upsert_metrics(
            StoredMetrics(
                offer_id=offer.id,
                impressions=8000,
                clicks=100,
                leads=30,
                sales=12,
                ctr=1.25,
                roas=3.5,
                revenue=1050.0,
                cost=300.0,
            )
        )
    return offer.id


def _benchmark_lines(prompt: str) -> list[str]:
    table = prompt.split("MARKET BENCHMARKS:\n", 1)[1].split("\n\n", 1)[0]
    return table.splitlines()


@pytest.mark.asyncio
async def test_analyze_offer_end_to_end(harness: Harness, valid_analysis: dict) -> None:
    offer_id = _seed_offer(harness)
    harness.benchmarks.add_benchmark(niche="ecommerce", metric_name="ctr", min_value=1.2, ideal_value=2.5, max_value=3.5, **_EXACT_SCOPE)
    harness.benchmarks.add_benchmark(niche="ecommerce", metric_name="cpc", min_value=0.3, ideal_value=0.6, max_value=1.2, **_EXACT_SCOPE)
    harness.benchmarks.add_benchmark(niche="ecommerce", metric_name="roas", min_value=2, ideal_value=4.5, max_value=6)
    harness.benchmarks.add_benchmark(niche="ecommerce", metric_name="aov", min_value=50, ideal_value=80, max_value=120, **{**_EXACT_SCOPE, "country": "US"})

    response = await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)

    assert _benchmark_lines(harness.gemini.prompts[0]) == [
        "- ctr: Min 1.20 | Ideal 2.50 | Max 3.50",
        "- cpc: Min 0.30 | Ideal 0.60 | Max 1.20",
        "- roas: Min 2.00 | Ideal 4.50 | Max 6.00",
    ]
    assert response.success is True
    assert response.analysis.model_dump() == valid_analysis
    assert response.usage.tokens_used == 1480 + 320
    assert re.fullmatch(r"\$\d+\.\d{6}", response.usage.estimated_cost)
    assert response.usage.estimated_cost == "$0.000207"

    stored = harness.reports.get_by_id(response.report_id)
    assert stored is not None
    assert stored.created_at == response.created_at
    assert stored.ai_model == "gemini-2.5-flash"
    assert stored.prompt_tokens == 1480
    assert stored.completion_tokens == 320
    assert stored.full_report == valid_analysis
    assert stored.validation_status == "validated"
    assert harness.limiter.remaining("user-1") == 4


@pytest.mark.asyncio
async def test_missing_metrics_fails_before_quota_is_touched(harness: Harness) -> None:
    offer_id = _seed_offer(harness, with_metrics=False)

    with pytest.raises(MissingMetricsError):
        await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)

    assert harness.limiter.remaining("user-1") == 5
    assert harness.gemini.prompts == []


@pytest.mark.asyncio
async def test_malformed_reply_persists_nothing(harness: Harness) -> None:
    offer_id = _seed_offer(harness)
    harness.gemini.reply = "not json"

    with pytest.raises(ModelOutputInvalidError) as excinfo:
        await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)

    assert excinfo.value.kind is ModelOutputFailure.MALFORMED_JSON
    assert harness.reports.list_by_offer(offer_id) == []


@pytest.mark.asyncio
async def test_transport_failure_propagates_and_persists_nothing(harness: Harness) -> None:
    offer_id = _seed_offer(harness)
    harness.gemini.error = GeminiModelError("Gemini generate_content failed: unavailable")

    with pytest.raises(GeminiModelError):
        await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)

    assert harness.reports.list_by_offer(offer_id) == []


@pytest.mark.asyncio
async def test_unknown_offer_and_foreign_offer(harness: Harness) -> None:
    offer_id = _seed_offer(harness, user_id="owner")

    with pytest.raises(OfferNotFoundError):
        await harness.service.analyze_offer(user_id="owner", offer_id="missing")
    with pytest.raises(OfferAccessDeniedError):
        await harness.service.analyze_offer(user_id="intruder", offer_id=offer_id)

    assert harness.limiter.remaining("intruder") == 5


@pytest.mark.asyncio
async def test_sixth_analysis_within_the_hour_is_rate_limited(harness: Harness) -> None:
    offer_id = _seed_offer(harness)

    for _ in range(5):
        await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)

    with pytest.raises(RateLimitedError) as excinfo:
        await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)

    assert excinfo.value.max_requests == 5
    assert len(harness.gemini.prompts) == 5
    assert len(harness.reports.list_by_offer(offer_id)) == 5


@pytest.mark.asyncio
async def test_report_history_and_detail(harness: Harness, valid_analysis: dict) -> None:
    offer_id = _seed_offer(harness)
    first = await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)
    second = await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)

    history = harness.service.list_offer_reports(user_id="user-1", offer_id=offer_id)
    assert history.count == 2
    assert [r.id for r in history.reports] == [second.report_id, first.report_id]
    assert history.reports[0].total_tokens == 1800

    detail = harness.service.get_report(user_id="user-1", report_id=first.report_id)
    assert detail.report.offer.id == offer_id
    assert detail.report.offer.niche == "ecommerce"
    assert detail.report.full_report.model_dump() == valid_analysis
    assert detail.report.usage.total_tokens == 1800


@pytest.mark.asyncio
async def test_history_and_detail_enforce_ownership(harness: Harness) -> None:
    offer_id = _seed_offer(harness)
    created = await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)

    with pytest.raises(OfferAccessDeniedError):
        harness.service.list_offer_reports(user_id="intruder", offer_id=offer_id)
    with pytest.raises(OfferNotFoundError):
        harness.service.list_offer_reports(user_id="user-1", offer_id="missing")
    with pytest.raises(ReportAccessDeniedError):
        harness.service.get_report(user_id="intruder", report_id=created.report_id)
    with pytest.raises(ReportNotFoundError):
        harness.service.get_report(user_id="user-1", report_id="missing")


@pytest.mark.asyncio
async def test_non_finite_reply_is_rejected_and_not_stored(
    harness: Harness, valid_analysis: dict
) -> None:
    offer_id = _seed_offer(harness)
    valid_analysis["bottlenecks"][0]["current_value"] = float("nan")
    harness.gemini.reply = json.dumps(valid_analysis)

    with pytest.raises(ModelOutputInvalidError) as excinfo:
        await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)

    assert excinfo.value.kind is ModelOutputFailure.MALFORMED_JSON
    assert harness.reports.list_by_offer(offer_id) == []


@pytest.mark.asyncio
async def test_invalid_stored_benchmark_fails_before_quota_is_touched(
    harness: Harness,
) -> None:
    offer_id = _seed_offer(harness)
    with sqlite3.connect(harness.benchmarks.db_path) as conn:
        conn.execute(
            """
            INSERT INTO benchmarks (
                id, niche, metric_name, min_value, ideal_value, max_value, created_at
            )
            VALUES ('legacy-1', 'ecommerce', 'frequency', 1, 2, 3, '2026-01-01T00:00:00+00:00')
            """
        )

    with pytest.raises(InvalidOfferDataError) as excinfo:
        await harness.service.analyze_offer(user_id="user-1", offer_id=offer_id)

    assert excinfo.value.violations == ("benchmark legacy-1.metric_name",)
    assert harness.limiter.remaining("user-1") == 5
    assert harness.gemini.prompts == []
