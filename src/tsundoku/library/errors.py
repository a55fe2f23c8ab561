"""Error taxonomy for book operations."""

from __future__ import annotations


class TsundokuError(Exception):
    """Base class for all tsundoku errors."""


class ValidationError(TsundokuError):
    """Caller supplied invalid input when creating a book."""


class NotFoundError(TsundokuError):
    def __init__(self, book_id: str) -> None:
        super().__init__(f"Book not found: {book_id}")
        self.book_id = book_id


class GenerationFailure(TsundokuError):
    """Dialogue service failed or returned nothing. Always recovered locally."""


class PersistenceFailure(TsundokuError):
    """Reading or writing the stored document failed. Always recovered locally."""
