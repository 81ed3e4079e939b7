"""SQLite-backed storage for market benchmarks."""

from __future__ import annotations

import sqlite3
from typing import Optional
from uuid import uuid4

from app.models.offer import StoredBenchmark
from app.schemas.analysis import BenchmarkMetric

from .sqlite_store import SQLiteStore, from_iso, to_iso


class BenchmarkStore(SQLiteStore):
    """Benchmarks scoped by niche and, optionally, country/traffic/funnel."""

    _SCHEMA = (
        """
        CREATE TABLE IF NOT EXISTS benchmarks (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            niche TEXT NOT NULL,
            country TEXT,
            traffic_source TEXT,
            funnel_type TEXT,
            metric_name TEXT NOT NULL,
            min_value REAL NOT NULL,
            ideal_value REAL NOT NULL,
            max_value REAL NOT NULL,
            description TEXT,
            created_at TEXT NOT NULL
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_benchmarks_niche ON benchmarks (niche)
        """,
    )

    def add_benchmark(
        self,
        *,
        niche: str,
        metric_name: str,
        min_value: float,
        ideal_value: float,
        max_value: float,
        country: Optional[str] = None,
        traffic_source: Optional[str] = None,
        funnel_type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> StoredBenchmark:
        """Insert a benchmark; unknown metrics and unordered ranges are rejected."""
        try:
            metric = BenchmarkMetric(metric_name)
        except ValueError as exc:
            raise ValueError(f"Unknown benchmark metric: {metric_name!r}") from exc
        if not min_value <= ideal_value <= max_value:
            raise ValueError(
                "Benchmark values must satisfy min_value <= ideal_value <= max_value"
            )

        benchmark = StoredBenchmark(
            id=uuid4().hex,
            niche=niche,
            country=country,
            traffic_source=traffic_source,
            funnel_type=funnel_type,
            metric_name=metric.value,
            min_value=min_value,
            ideal_value=ideal_value,
            max_value=max_value,
            description=description,
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO benchmarks (
                    id, niche, country, traffic_source, funnel_type, metric_name,
                    min_value, ideal_value, max_value, description, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    benchmark.id,
                    benchmark.niche,
                    benchmark.country,
                    benchmark.traffic_source,
                    benchmark.funnel_type,
                    benchmark.metric_name,
                    benchmark.min_value,
                    benchmark.ideal_value,
                    benchmark.max_value,
                    benchmark.description,
                    to_iso(benchmark.created_at),
                ),
            )
        return benchmark

    def find_matching(
        self,
        *,
        niche: str,
        country: str,
        traffic_source: str,
        funnel_type: str,
    ) -> list[StoredBenchmark]:
        """Exact-scope benchmarks plus niche-wide ones, in insertion order."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM benchmarks
                WHERE niche = ?
                  AND (
                    (country = ? AND traffic_source = ? AND funnel_type = ?)
                    OR (
                        country IS NULL
                        AND traffic_source IS NULL
                        AND funnel_type IS NULL
                    )
                  )
                ORDER BY seq
                """,
                (niche, country, traffic_source, funnel_type),
            ).fetchall()
        return [self._row_to_benchmark(row) for row in rows]

    @staticmethod
    def _row_to_benchmark(row: sqlite3.Row) -> StoredBenchmark:
        return StoredBenchmark(
            id=row["id"],
            niche=row["niche"],
            country=row["country"],
            traffic_source=row["traffic_source"],
            funnel_type=row["funnel_type"],
            metric_name=row["metric_name"],
            min_value=row["min_value"],
            ideal_value=row["ideal_value"],
            max_value=row["max_value"],
            description=row["description"],
            created_at=from_iso(row["created_at"]),
        )


__all__ = ["BenchmarkStore"]
