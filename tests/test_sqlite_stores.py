try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timezone

import pytest

from app.clients import BenchmarkStore, OfferStore, ReportStore
from app.models.offer import StoredMetrics
from app.models.report import ReportDraft


@pytest.fixture()
def db_path(tmp_path) -> str:
    return str(tmp_path / "nested" / "offers.db")


def _add_offer(store: OfferStore, **overrides):
    values = {
        "user_id": "user-1",
        "name": "Sneaker drop",
        "niche": "ecommerce",
        "country": "BR",
        "traffic_source": "facebook",
        "funnel_type": "direct_sales",
        "start_date": datetime(2026, 3, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return store.add_offer(**values)


def _draft(offer_id: str, summary: str) -> ReportDraft:
    return ReportDraft(
        user_id="user-1",
        offer_id=offer_id,
        summary=summary,
        validation_status="validated",
        validation_explanation="ROAS and sales clear the bar.",
        bottlenecks=[{"stage": "funnel", "metric": "ctr"}],
        action_plan=[{"priority": 1, "action": "Shorten checkout"}],
        missing_data=["device split"],
        next_test_recommendations="Test one-step checkout.",
        full_report={"summary": summary},
        ai_model="gemini-2.5-flash",
        prompt_tokens=1000,
        completion_tokens=250,
        total_tokens=1250,
        estimated_cost=0.00015,
    )


def test_offer_round_trip_with_and_without_metrics(db_path: str) -> None:
    store = OfferStore(db_path)
    offer = _add_offer(store, budget=250.5)

    found = store.find_offer_with_metrics(offer.id)
    assert found is not None
    stored_offer, metrics = found
    assert stored_offer.budget == 250.5
    assert stored_offer.end_date is None
    assert stored_offer.start_date == offer.start_date
    assert metrics is None

    store.upsert_metrics(StoredMetrics(offer_id=offer.id, clicks=100, roas=None))
    store.upsert_metrics(StoredMetrics(offer_id=offer.id, clicks=120, sales=4))

    _, metrics = store.find_offer_with_metrics(offer.id)
    assert metrics is not None
    assert metrics.clicks == 120
    assert metrics.sales == 4
    assert metrics.roas is None


def test_unknown_offer_and_owner_lookup(db_path: str) -> None:
    store = OfferStore(db_path)
    offer = _add_offer(store, user_id="owner-7")

    assert store.find_offer_with_metrics("missing") is None
    assert store.find_owner_of("missing") is None
    assert store.find_owner_of(offer.id) == "owner-7"
    assert store.get_offer(offer.id).name == "Sneaker drop"


def test_benchmark_lookup_unions_exact_and_niche_wide(db_path: str) -> None:
    store = BenchmarkStore(db_path)
    exact = {"country": "BR", "traffic_source": "facebook", "funnel_type": "direct_sales"}
    store.add_benchmark(niche="ecommerce", metric_name="ctr", min_value=1, ideal_value=2, max_value=3, **exact)
    store.add_benchmark(niche="ecommerce", metric_name="roas", min_value=2, ideal_value=4, max_value=6)
    store.add_benchmark(niche="ecommerce", metric_name="cpc", min_value=0.2, ideal_value=0.5, max_value=1, country="BR")
    store.add_benchmark(niche="ecommerce", metric_name="cpm", min_value=5, ideal_value=8, max_value=12, **{**exact, "country": "US"})
    store.add_benchmark(niche="finance", metric_name="aov", min_value=50, ideal_value=90, max_value=120)
    store.add_benchmark(niche="ecommerce", metric_name="conversion_rate", min_value=1, ideal_value=3, max_value=5, **exact)

    matching = store.find_matching(
        niche="ecommerce",
        country="BR",
        traffic_source="facebook",
        funnel_type="direct_sales",
    )

    assert [b.metric_name for b in matching] == ["ctr", "roas", "conversion_rate"]
    assert matching[1].is_global


def test_reports_are_listed_most_recent_first(db_path: str) -> None:
    store = ReportStore(db_path)
    first = store.save(_draft("offer-1", "First analysis of the offer"))
    second = store.save(_draft("offer-1", "Second analysis of the offer"))
    store.save(_draft("offer-2", "Unrelated offer analysis"))

    listed = store.list_by_offer("offer-1")

    assert [r.id for r in listed] == [second.id, first.id]
    assert store.list_by_offer("offer-3") == []


def test_report_save_assigns_identity_and_preserves_documents(db_path: str) -> None:
    store = ReportStore(db_path)

    saved = store.save(_draft("offer-1", "Stored analysis summary"))
    loaded = store.get_by_id(saved.id)

    assert saved.id
    assert saved.created_at.tzinfo is not None
    assert loaded == saved
    assert loaded.bottlenecks == [{"stage": "funnel", "metric": "ctr"}]
    assert store.get_by_id("missing") is None


def test_stores_share_one_database_file(db_path: str) -> None:
    offers = OfferStore(db_path)
    reports = ReportStore(db_path)
    offer = _add_offer(offers)

    reports.save(_draft(offer.id, "Shared database summary"))

    assert offers.db_path == reports.db_path
    assert len(reports.list_by_offer(offer.id)) == 1


@pytest.mark.parametrize(
    ("values", "message"),
    [
        ({"metric_name": "frequency", "min_value": 1, "ideal_value": 2, "max_value": 3}, "Unknown benchmark metric"),
        ({"metric_name": "ctr", "min_value": 3, "ideal_value": 2, "max_value": 4}, "min_value <= ideal_value"),
        ({"metric_name": "ctr", "min_value": 1, "ideal_value": 5, "max_value": 4}, "min_value <= ideal_value"),
    ],
)
def test_invalid_benchmarks_are_rejected_on_write(db_path: str, values: dict, message: str) -> None:
    store = BenchmarkStore(db_path)

    with pytest.raises(ValueError, match=message):
        store.add_benchmark(niche="ecommerce", **values)

    assert store.find_matching(
        niche="ecommerce", country="BR", traffic_source="facebook", funnel_type="direct_sales"
    ) == []
