"""Add, progress and delete books while keeping the stored collection consistent."""

from __future__ import annotations

import dataclasses
import logging
import math
import time
from typing import Mapping, Optional, Protocol

from .characters import CHARACTER_TEMPLATES, resolve_character
from .errors import NotFoundError, ValidationError
from .models import Book, Character, placeholder_cover
from .progress import clamp_page
from .samples import create_sample_books
from .store import BookStore

log = logging.getLogger(__name__)


class DialogueGenerator(Protocol):
    async def generate(
        self,
        title: str,
        total_page: int,
        current_page: int,
        reason: str,
        character: Character,
    ) -> str: ...


class BookOperations:
    """The only path through which books are created, progressed or removed.

    Every mutation builds a new list and swaps it in together with the save,
    with no suspension point in between, so readers never see a half-applied
    change. Book records are replaced, never edited in place, so a page and
    its dialogue always travel together.

    Progress updates for one book are last-issued-wins: each call takes a
    sequence token before awaiting the dialogue, and only commits if no newer
    update for the same book was issued meanwhile.
    """

    def __init__(
        self,
        store: BookStore,
        dialogue: DialogueGenerator,
        catalog: Mapping[str, Character] = CHARACTER_TEMPLATES,
    ) -> None:
        self._store = store
        self._dialogue = dialogue
        self._catalog = catalog
        self._books: list[Book] = []
        self._sequence: dict[str, int] = {}

    @property
    def books(self) -> list[Book]:
        return list(self._books)

    def get(self, book_id: str) -> Optional[Book]:
        for book in self._books:
            if book.id == book_id:
                return book
        return None

    def load_or_seed(self) -> list[Book]:
        """Load the stored collection, seeding sample books if none exists."""
        books = self._store.load()
        if books is None:
            log.info("No stored books, seeding samples")
            books = create_sample_books()
            self._store.save(books)
        self._books = books
        self._sequence.clear()
        return self.books

    # ── Add ─────────────────────────────────────────────

    async def add(
        self,
        title: str,
        genre: str,
        total_page: int,
        cover_image: Optional[str],
        reason: str,
    ) -> Book:
        title = (title or "").strip()
        reason = (reason or "").strip()
        if not title:
            raise ValidationError("Title must not be empty")
        if not reason:
            raise ValidationError("Reason must not be empty")
        if (
            isinstance(total_page, bool)
            or not isinstance(total_page, int)
            or total_page < 1
        ):
            raise ValidationError(f"Total pages must be at least 1, got {total_page!r}")

        character = resolve_character(genre, self._catalog)
        dialogue = await self._dialogue.generate(
            title=title,
            total_page=total_page,
            current_page=0,
            reason=reason,
            character=character,
        )

        book = Book(
            id=self._new_id(),
            title=title,
            genre=genre,
            total_page=total_page,
            current_page=0,
            reason=reason,
            latest_dialogue=dialogue,
            cover_image=cover_image or placeholder_cover(title),
            character=character,
            created_at=time.time(),
        )
        self._commit([*self._books, book])
        log.info("Added book %s (%s)", book.id, book.title)
        return book

    def _new_id(self) -> str:
        existing = {b.id for b in self._books}
        book_id = Book.make_id()
        while book_id in existing:
            book_id = Book.make_id()
        return book_id

    # ── Update progress ─────────────────────────────────

    async def update_progress(self, book_id: str, new_page: int) -> Book:
        book = self.get(book_id)
        if book is None:
            raise NotFoundError(book_id)

        page = clamp_page(self._as_page(new_page), 0, book.total_page)
        token = self._sequence.get(book_id, 0) + 1
        self._sequence[book_id] = token

        dialogue = await self._dialogue.generate(
            title=book.title,
            total_page=book.total_page,
            current_page=page,
            reason=book.reason,
            character=book.character,
        )

        current = self.get(book_id)
        if current is None:
            # deleted while the dialogue was being generated
            raise NotFoundError(book_id)
        if self._sequence.get(book_id) != token:
            log.debug("Progress update %d for %s superseded", token, book_id)
            return current

        updated = dataclasses.replace(
            current, current_page=page, latest_dialogue=dialogue
        )
        self._commit([updated if b.id == book_id else b for b in self._books])
        return updated

    @staticmethod
    def _as_page(value: int) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"Page must be a number, got {value!r}")
        if not math.isfinite(value):
            raise ValidationError(f"Page must be finite, got {value!r}")
        return int(value)

    # ── Delete ──────────────────────────────────────────

    async def delete(self, book_id: str) -> None:
        if self.get(book_id) is None:
            return
        self._commit([b for b in self._books if b.id != book_id])
        self._sequence.pop(book_id, None)
        log.info("Deleted book %s", book_id)

    # ── Commit ──────────────────────────────────────────

    def _commit(self, books: list[Book]) -> None:
        # in-memory state stays authoritative if the save fails
        self._books = books
        self._store.save(books)
