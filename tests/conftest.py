"""Shared fixtures for tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tsundoku.config import AppConfig
from tsundoku.library.models import Character
from tsundoku.library.operations import BookOperations
from tsundoku.library.store import BookStore


class FakeDialogue:
    """Records calls and returns a message naming the page it was asked about."""

    def __init__(self) -> None:
        self.calls: list[dict] = []

    async def generate(
        self,
        title: str,
        total_page: int,
        current_page: int,
        reason: str,
        character: Character,
    ) -> str:
        self.calls.append(
            {
                "title": title,
                "total_page": total_page,
                "current_page": current_page,
                "reason": reason,
                "character": character,
            }
        )
        return f"{character.emoji} page {current_page}"


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
    )


@pytest.fixture
def store(tmp_path: Path) -> BookStore:
    db_path = tmp_path / "test.db"
    book_store = BookStore(db_path)
    yield book_store
    book_store.close()


@pytest.fixture
def dialogue() -> FakeDialogue:
    return FakeDialogue()


@pytest.fixture
def ops(store: BookStore, dialogue: FakeDialogue) -> BookOperations:
    operations = BookOperations(store, dialogue)
    store.save([])
    operations.load_or_seed()
    return operations
