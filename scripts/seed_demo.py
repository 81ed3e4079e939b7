"""Load a demo offer, its metrics, and matching benchmarks into SQLite.

Example::

    python -m scripts.seed_demo --user-id demo-user
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.clients import BenchmarkStore, OfferStore  # noqa: E402
from app.models.offer import StoredMetrics  # noqa: E402

DEMO_BENCHMARKS: tuple[dict, ...] = (
    {"metric_name": "ctr", "min_value": 1.2, "ideal_value": 2.5, "max_value": 3.5},
    {"metric_name": "cpc", "min_value": 0.3, "ideal_value": 0.6, "max_value": 1.2},
    {
        "metric_name": "conversion_rate",
        "min_value": 1.0,
        "ideal_value": 3.0,
        "max_value": 5.0,
        "scoped": False,
    },
    {
        "metric_name": "roas",
        "min_value": 2.0,
        "ideal_value": 4.5,
        "max_value": 6.0,
        "scoped": False,
    },
)


def seed(db_path: str, user_id: str) -> str:
    offers = OfferStore(db_path)
    benchmarks = BenchmarkStore(db_path)

    offer = offers.add_offer(
        user_id=user_id,
        name="Summer sneakers launch",
        niche="ecommerce",
        country="BR",
        traffic_source="facebook",
        funnel_type="direct_sales",
        budget=5000.0,
        start_date=datetime(2026, 1, 5, tzinfo=timezone.utc),
    )
    offers.upsert_metrics(
        StoredMetrics(
            offer_id=offer.id,
            impressions=120_000,
            clicks=2_400,
            leads=310,
            sales=48,
            ctr=2.0,
            cpc=0.55,
            cpm=11.0,
            conversion_rate=2.0,
            roas=2.8,
            aov=150.5,
            revenue=7224.0,
            cost=2580.0,
        )
    )

    for entry in DEMO_BENCHMARKS:
        values = dict(entry)
        scoped = values.pop("scoped", True)
        scope = (
            {"country": "BR", "traffic_source": "facebook", "funnel_type": "direct_sales"}
            if scoped
            else {}
        )
        benchmarks.add_benchmark(niche="ecommerce", **scope, **values)

    return offer.id


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed demo offer data.")
    parser.add_argument("--user-id", default="demo-user")
    parser.add_argument(
        "--db-path",
        default=None,
        help="SQLite file to seed (defaults to DATABASE_PATH from settings).",
    )
    args = parser.parse_args(argv)

    db_path = args.db_path
    if db_path is None:
        from app.core.config import get_settings

        db_path = get_settings().database_path

    offer_id = seed(db_path, args.user_id)
    print(f"Seeded offer {offer_id} for user {args.user_id} in {db_path}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
