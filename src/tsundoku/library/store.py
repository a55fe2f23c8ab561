"""SQLite-backed document store for the book collection."""

from __future__ import annotations

import json
import logging
import math
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .characters import resolve_character
from .errors import PersistenceFailure
from .models import Book, Character

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at REAL NOT NULL
);
"""


@dataclass
class StoreResult:
    ok: bool
    error: Optional[str] = None


def _coerce_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    if value is None:
        return 0.0
    return None


def _repair_pages(raw_total: Any, raw_current: Any) -> tuple[int, int]:
    """Coerce page fields to ints and restore 0 <= current <= total, total >= 1."""
    total = _coerce_number(raw_total)
    total_page = int(total) if total else 1
    if total_page < 1:
        total_page = 1

    current = _coerce_number(raw_current)
    current_page = int(current) if current else 0
    current_page = max(0, min(total_page, current_page))
    return total_page, current_page


class BookStore:
    def __init__(self, db_path: Path, key: str = "tsundoku-books") -> None:
        self._db_path = db_path
        self._key = key
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._init_schema()
        self.last_result: Optional[StoreResult] = None

    def _init_schema(self) -> None:
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    @property
    def key(self) -> str:
        return self._key

    def close(self) -> None:
        self._conn.close()

    # ── Load ───────────────────────────────────────────

    def load(self) -> Optional[list[Book]]:
        """Return the stored books, or None if nothing usable is stored."""
        try:
            raw = self._read()
        except PersistenceFailure as e:
            log.error("Failed to read books from storage: %s", e)
            return None
        if raw is None:
            return None

        try:
            records = json.loads(raw)
        except (ValueError, RecursionError) as e:
            log.error("Failed to parse books from storage: %s", e)
            return None
        if not isinstance(records, list):
            log.error(
                "Failed to parse books from storage: expected a list, got %s",
                type(records).__name__,
            )
            return None

        books: list[Book] = []
        for i, record in enumerate(records):
            book = self._record_to_book(record)
            if book is None:
                log.warning("Skipping malformed book record at index %d", i)
                continue
            books.append(book)
        return books

    def _read(self) -> Optional[str]:
        try:
            row = self._conn.execute(
                "SELECT value FROM documents WHERE key = ?", (self._key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceFailure(str(e)) from e
        return row["value"] if row else None

    @staticmethod
    def _record_to_book(record: Any) -> Optional[Book]:
        if not isinstance(record, dict) or not record.get("id"):
            return None

        total_page, current_page = _repair_pages(
            record.get("totalPage"), record.get("currentPage")
        )
        genre = str(record.get("genre") or "")

        char = record.get("character")
        if isinstance(char, dict) and all(
            isinstance(char.get(k), str) for k in ("type", "emoji", "personality")
        ):
            character = Character(
                type=char["type"], emoji=char["emoji"], personality=char["personality"]
            )
        else:
            character = resolve_character(genre)

        created_at = _coerce_number(record.get("createdAt"))
        return Book(
            id=str(record["id"]),
            title=str(record.get("title") or ""),
            genre=genre,
            total_page=total_page,
            current_page=current_page,
            reason=str(record.get("reason") or ""),
            latest_dialogue=str(record.get("latestDialogue") or ""),
            cover_image=str(record.get("coverImage") or ""),
            character=character,
            created_at=created_at if created_at is not None else 0.0,
        )

    # ── Save ───────────────────────────────────────────

    def save(self, books: list[Book]) -> StoreResult:
        """Write the whole collection. Failures are logged and reported, not raised."""
        try:
            document = json.dumps([b.to_dict() for b in books], ensure_ascii=False)
            self._write(document)
        except (PersistenceFailure, TypeError, ValueError) as e:
            log.error("Failed to save books to storage: %s", e)
            result = StoreResult(ok=False, error=str(e))
        else:
            result = StoreResult(ok=True)
        self.last_result = result
        return result

    def _write(self, document: str) -> None:
        try:
            with self._conn:
                self._conn.execute(
                    """INSERT OR REPLACE INTO documents (key, value, updated_at)
                       VALUES (?, ?, ?)""",
                    (self._key, document, time.time()),
                )
        except sqlite3.Error as e:
            raise PersistenceFailure(str(e)) from e
