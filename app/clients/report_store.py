"""SQLite-backed storage for generated AI reports."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from app.models.report import ReportDraft, StoredReport

from .sqlite_store import SQLiteStore, from_iso, to_iso


class ReportStore(SQLiteStore):
    """Append-only report history keyed by offer."""

    _SCHEMA = (
        """
        CREATE TABLE IF NOT EXISTS ai_reports (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            offer_id TEXT NOT NULL,
            user_id TEXT NOT NULL,
            summary TEXT NOT NULL,
            validation_status TEXT NOT NULL,
            validation_explanation TEXT NOT NULL,
            bottlenecks TEXT NOT NULL,
            action_plan TEXT NOT NULL,
            missing_data TEXT NOT NULL,
            next_test_recommendations TEXT NOT NULL,
            full_report TEXT NOT NULL,
            ai_model TEXT NOT NULL,
            prompt_tokens INTEGER NOT NULL,
            completion_tokens INTEGER NOT NULL,
            total_tokens INTEGER NOT NULL,
            estimated_cost REAL NOT NULL,
            created_at TEXT NOT NULL
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_ai_reports_offer ON ai_reports (offer_id)
        """,
    )

    def save(self, draft: ReportDraft) -> StoredReport:
        """Persist a report, assigning its id and creation timestamp."""
        report = StoredReport(
            **draft.model_dump(),
            id=uuid4().hex,
            created_at=datetime.now(timezone.utc),
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO ai_reports (
                    id, offer_id, user_id, summary, validation_status,
                    validation_explanation, bottlenecks, action_plan,
                    missing_data, next_test_recommendations, full_report,
                    ai_model, prompt_tokens, completion_tokens, total_tokens,
                    estimated_cost, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    report.id,
                    report.offer_id,
                    report.user_id,
                    report.summary,
                    report.validation_status,
                    report.validation_explanation,
                    json.dumps(report.bottlenecks),
                    json.dumps(report.action_plan),
                    json.dumps(report.missing_data),
                    report.next_test_recommendations,
                    json.dumps(report.full_report),
                    report.ai_model,
                    report.prompt_tokens,
                    report.completion_tokens,
                    report.total_tokens,
                    report.estimated_cost,
                    to_iso(report.created_at),
                ),
            )
        return report

    def list_by_offer(self, offer_id: str) -> list[StoredReport]:
        """Return the offer's reports, most recent first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM ai_reports
                WHERE offer_id = ?
                ORDER BY created_at DESC, seq DESC
                """,
                (offer_id,),
            ).fetchall()
        return [self._row_to_report(row) for row in rows]

    def get_by_id(self, report_id: str) -> Optional[StoredReport]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM ai_reports WHERE id = ?", (report_id,)
            ).fetchone()
        if not row:
            return None
        return self._row_to_report(row)

    @staticmethod
    def _row_to_report(row: sqlite3.Row) -> StoredReport:
        return StoredReport(
            id=row["id"],
            offer_id=row["offer_id"],
            user_id=row["user_id"],
            summary=row["summary"],
            validation_status=row["validation_status"],
            validation_explanation=row["validation_explanation"],
            bottlenecks=json.loads(row["bottlenecks"]),
            action_plan=json.loads(row["action_plan"]),
            missing_data=json.loads(row["missing_data"]),
            next_test_recommendations=row["next_test_recommendations"],
            full_report=json.loads(row["full_report"]),
            ai_model=row["ai_model"],
            prompt_tokens=row["prompt_tokens"],
            completion_tokens=row["completion_tokens"],
            total_tokens=row["total_tokens"],
            estimated_cost=row["estimated_cost"],
            created_at=from_iso(row["created_at"]),
        )


__all__ = ["ReportStore"]
