"""SQLite-backed storage for offers and their metrics snapshot."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import uuid4

from app.models.offer import StoredMetrics, StoredOffer

from .sqlite_store import SQLiteStore, from_iso, to_iso

_METRIC_COLUMNS: tuple[str, ...] = (
    "impressions",
    "clicks",
    "leads",
    "sales",
    "ctr",
    "cpc",
    "cpm",
    "conversion_rate",
    "roas",
    "aov",
    "revenue",
    "cost",
)


class OfferStore(SQLiteStore):
    """Offers keyed by id, each with at most one metrics snapshot."""

    _SCHEMA = (
        """
        CREATE TABLE IF NOT EXISTS offers (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            name TEXT NOT NULL,
            niche TEXT NOT NULL,
            country TEXT NOT NULL,
            traffic_source TEXT NOT NULL,
            funnel_type TEXT NOT NULL,
            budget REAL,
            start_date TEXT NOT NULL,
            end_date TEXT,
            created_at TEXT NOT NULL
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS offer_metrics (
            offer_id TEXT PRIMARY KEY REFERENCES offers(id) ON DELETE CASCADE,
            impressions INTEGER,
            clicks INTEGER,
            leads INTEGER,
            sales INTEGER,
            ctr REAL,
            cpc REAL,
            cpm REAL,
            conversion_rate REAL,
            roas REAL,
            aov REAL,
            revenue REAL,
            cost REAL,
            updated_at TEXT NOT NULL
        )
        """,
    )

    def add_offer(
        self,
        *,
        user_id: str,
        name: str,
        niche: str,
        country: str,
        traffic_source: str,
        funnel_type: str,
        start_date: datetime,
        budget: float | None = None,
        end_date: datetime | None = None,
        offer_id: str | None = None,
    ) -> StoredOffer:
        offer = StoredOffer(
            id=offer_id or uuid4().hex,
            user_id=user_id,
            name=name,
            niche=niche,
            country=country,
            traffic_source=traffic_source,
            funnel_type=funnel_type,
            budget=budget,
            start_date=start_date,
            end_date=end_date,
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO offers (
                    id, user_id, name, niche, country, traffic_source,
                    funnel_type, budget, start_date, end_date, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    offer.id,
                    offer.user_id,
                    offer.name,
                    offer.niche,
                    offer.country,
                    offer.traffic_source,
                    offer.funnel_type,
                    offer.budget,
                    to_iso(offer.start_date),
                    to_iso(offer.end_date),
                    to_iso(offer.created_at),
                ),
            )
        return offer

    def upsert_metrics(self, metrics: StoredMetrics) -> None:
        """Replace the offer's metrics snapshot."""
        columns = ", ".join(_METRIC_COLUMNS)
        placeholders = ", ".join("?" for _ in _METRIC_COLUMNS)
        updates = ", ".join(f"{col} = excluded.{col}" for col in _METRIC_COLUMNS)
        values = [getattr(metrics, col) for col in _METRIC_COLUMNS]
        updated_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO offer_metrics (offer_id, {columns}, updated_at)
                VALUES (?, {placeholders}, ?)
                ON CONFLICT(offer_id) DO UPDATE SET
                    {updates},
                    updated_at = excluded.updated_at
                """,
                (metrics.offer_id, *values, to_iso(updated_at)),
            )

    def get_offer(self, offer_id: str) -> Optional[StoredOffer]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM offers WHERE id = ?", (offer_id,)
            ).fetchone()
        if not row:
            return None
        return self._row_to_offer(row)

    def find_offer_with_metrics(
        self, offer_id: str
    ) -> Optional[Tuple[StoredOffer, Optional[StoredMetrics]]]:
        """Return the offer and its metrics snapshot, or None for unknown ids."""
        with self._connect() as conn:
            offer_row = conn.execute(
                "SELECT * FROM offers WHERE id = ?", (offer_id,)
            ).fetchone()
            if not offer_row:
                return None
            metrics_row = conn.execute(
                "SELECT * FROM offer_metrics WHERE offer_id = ?", (offer_id,)
            ).fetchone()
        metrics = self._row_to_metrics(metrics_row) if metrics_row else None
        return self._row_to_offer(offer_row), metrics

    def find_owner_of(self, offer_id: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT user_id FROM offers WHERE id = ?", (offer_id,)
            ).fetchone()
        return row["user_id"] if row else None

    @staticmethod
    def _row_to_offer(row: sqlite3.Row) -> StoredOffer:
        return StoredOffer(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            niche=row["niche"],
            country=row["country"],
            traffic_source=row["traffic_source"],
            funnel_type=row["funnel_type"],
            budget=row["budget"],
            start_date=from_iso(row["start_date"]),
            end_date=from_iso(row["end_date"]),
            created_at=from_iso(row["created_at"]),
        )

    @staticmethod
    def _row_to_metrics(row: sqlite3.Row) -> StoredMetrics:
        values = {col: row[col] for col in _METRIC_COLUMNS}
        return StoredMetrics(
            offer_id=row["offer_id"],
            updated_at=from_iso(row["updated_at"]),
            **values,
        )


__all__ = ["OfferStore"]
