"""Tests for the book document store."""

from __future__ import annotations

import json
import time
from pathlib import Path

import pytest

from tsundoku.library.characters import CHARACTER_TEMPLATES
from tsundoku.library.models import Book
from tsundoku.library.store import BookStore


def _make_book(book_id: str = "b1", title: str = "Test Book", **overrides) -> Book:
    fields = dict(
        id=book_id,
        title=title,
        genre="novel",
        total_page=200,
        current_page=40,
        reason="心が洗われたい",
        latest_dialogue="🌸 続きを読もう",
        cover_image="https://example.com/c.png",
        character=CHARACTER_TEMPLATES["novel"],
        created_at=time.time(),
    )
    fields.update(overrides)
    return Book(**fields)


def _put_raw(store: BookStore, value: str) -> None:
    store._conn.execute(
        "INSERT OR REPLACE INTO documents (key, value, updated_at) VALUES (?, ?, ?)",
        (store.key, value, time.time()),
    )
    store._conn.commit()


def _record(**overrides) -> dict:
    record = _make_book().to_dict()
    record.update(overrides)
    return record


class TestLoadSave:
    def test_load_empty_store_is_absent(self, store: BookStore):
        assert store.load() is None

    def test_round_trip(self, store: BookStore):
        books = [
            _make_book("a", "Alpha"),
            _make_book(
                "b",
                "ベータ",
                genre="study",
                character=CHARACTER_TEMPLATES["study"],
                current_page=200,
            ),
        ]
        result = store.save(books)
        assert result.ok
        assert store.load() == books

    def test_save_load_save_is_stable(self, store: BookStore):
        store.save([_make_book()])
        first = store._read()
        store.save(store.load())
        assert store._read() == first

    def test_empty_collection_is_present(self, store: BookStore):
        store.save([])
        assert store.load() == []

    def test_save_replaces_whole_document(self, store: BookStore):
        store.save([_make_book("a"), _make_book("b")])
        store.save([_make_book("b")])
        assert [b.id for b in store.load()] == ["b"]

    def test_document_is_readable_json(self, store: BookStore):
        store.save([_make_book()])
        data = json.loads(store._read())
        assert data[0]["title"] == "Test Book"
        assert "心が洗われたい" in store._read()

    def test_separate_keys_do_not_collide(self, tmp_path: Path):
        a = BookStore(tmp_path / "shared.db", key="one")
        b = BookStore(tmp_path / "shared.db", key="two")
        try:
            a.save([_make_book("x")])
            assert b.load() is None
        finally:
            a.close()
            b.close()

    def test_persists_across_instances(self, tmp_path: Path):
        first = BookStore(tmp_path / "p.db")
        first.save([_make_book()])
        first.close()
        second = BookStore(tmp_path / "p.db")
        try:
            assert second.load()[0].title == "Test Book"
        finally:
            second.close()


class TestLoadRepair:
    def test_string_pages_coerced(self, store: BookStore):
        _put_raw(store, json.dumps([_record(currentPage="50", totalPage="200")]))
        book = store.load()[0]
        assert book.current_page == 50
        assert isinstance(book.current_page, int)
        assert book.total_page == 200

    @pytest.mark.parametrize("bad", ["abc", "", None, 0, -4, "0"])
    def test_invalid_total_defaults_to_one(self, store: BookStore, bad):
        _put_raw(store, json.dumps([_record(totalPage=bad, currentPage=0)]))
        assert store.load()[0].total_page == 1

    @pytest.mark.parametrize("bad", ["abc", "", None, -3])
    def test_invalid_current_defaults_to_zero(self, store: BookStore, bad):
        _put_raw(store, json.dumps([_record(currentPage=bad)]))
        assert store.load()[0].current_page == 0

    def test_current_above_total_is_clamped(self, store: BookStore):
        _put_raw(store, json.dumps([_record(currentPage=500, totalPage=300)]))
        book = store.load()[0]
        assert book.current_page == 300

    def test_float_pages_truncated(self, store: BookStore):
        _put_raw(store, json.dumps([_record(currentPage=12.7, totalPage="99.0")]))
        book = store.load()[0]
        assert (book.current_page, book.total_page) == (12, 99)

    def test_missing_character_resolved_from_genre(self, store: BookStore):
        record = _record(genre="philosophy")
        del record["character"]
        _put_raw(store, json.dumps([record]))
        assert store.load()[0].character == CHARACTER_TEMPLATES["philosophy"]

    def test_page_too_large_for_float_defaults(self, store: BookStore):
        huge = 10**400
        _put_raw(store, json.dumps([_record(totalPage=huge, currentPage=huge)]))
        book = store.load()[0]
        assert (book.total_page, book.current_page) == (1, 0)

    def test_malformed_records_skipped(self, store: BookStore):
        _put_raw(store, json.dumps([_record(id="ok"), "junk", {"title": "no id"}]))
        assert [b.id for b in store.load()] == ["ok"]


class TestFailures:
    def test_corrupt_document_treated_as_absent(self, store: BookStore, caplog):
        _put_raw(store, "{not json")
        with caplog.at_level("ERROR"):
            assert store.load() is None
        assert "Failed to parse books" in caplog.text

    def test_deeply_nested_document_treated_as_absent(self, store: BookStore, caplog):
        _put_raw(store, "[" * 100000 + "]" * 100000)
        with caplog.at_level("ERROR"):
            assert store.load() is None
        assert "Failed to parse books" in caplog.text

    def test_non_list_document_treated_as_absent(self, store: BookStore):
        _put_raw(store, json.dumps({"books": []}))
        assert store.load() is None

    def test_save_failure_is_reported_not_raised(self, store: BookStore, caplog):
        store.save([_make_book("keep")])
        store._conn.execute("DROP TABLE documents")
        with caplog.at_level("ERROR"):
            result = store.save([_make_book("lost")])
        assert result.ok is False
        assert result.error
        assert store.last_result is result
        assert "Failed to save books" in caplog.text

    def test_failed_save_keeps_previous_document(self, tmp_path: Path):
        db_path = tmp_path / "ro.db"
        store = BookStore(db_path)
        store.save([_make_book("keep")])
        store._conn.execute(
            """CREATE TRIGGER refuse BEFORE INSERT ON documents
               BEGIN SELECT RAISE(ABORT, 'disk full'); END"""
        )
        result = store.save([])
        assert not result.ok
        assert "disk full" in result.error
        assert [b.id for b in store.load()] == ["keep"]
        store.close()

    def test_unreadable_store_treated_as_absent(self, store: BookStore):
        store._conn.execute("DROP TABLE documents")
        assert store.load() is None

    def test_last_result_tracks_success(self, store: BookStore):
        assert store.last_result is None
        store.save([])
        assert store.last_result.ok
