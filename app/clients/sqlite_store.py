"""Shared SQLite plumbing for the offer, benchmark, and report stores."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional


def _ensure_directory(db_path: Path) -> None:
    if db_path.parent and not db_path.parent.exists():
        db_path.parent.mkdir(parents=True, exist_ok=True)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class SQLiteStore:
    """Base class owning the connection factory and table bootstrap.

    Subclasses list their ``CREATE TABLE IF NOT EXISTS`` statements in
    ``_SCHEMA``; several stores may share one database file.
    """

    _SCHEMA: tuple[str, ...] = ()

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        _ensure_directory(self._db_path)
        self._ensure_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            for statement in self._SCHEMA:
                conn.execute(statement)


__all__ = ["SQLiteStore", "from_iso", "to_iso"]
