"""Data models for the book collection."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote

PLACEHOLDER_COVER_URL = "https://placehold.co/150x200/4f46e5/ffffff?text={text}"
NO_COVER_URL = "https://placehold.co/150x200/cccccc/333333?text=No+Cover"


def placeholder_cover(title: str) -> str:
    """Deterministic cover URI synthesized from the title."""
    return PLACEHOLDER_COVER_URL.format(text=quote(title, safe=""))


@dataclass(frozen=True)
class Character:
    type: str  # display label
    emoji: str
    personality: str  # prompt flavor only

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "emoji": self.emoji, "personality": self.personality}


@dataclass
class Book:
    id: str
    title: str
    genre: str
    total_page: int
    reason: str
    character: Character
    current_page: int = 0
    latest_dialogue: str = ""
    cover_image: str = ""
    created_at: float = field(default_factory=time.time)

    @staticmethod
    def make_id() -> str:
        return uuid.uuid4().hex[:16]

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted field names."""
        return {
            "id": self.id,
            "title": self.title,
            "genre": self.genre,
            "totalPage": self.total_page,
            "currentPage": self.current_page,
            "reason": self.reason,
            "latestDialogue": self.latest_dialogue,
            "coverImage": self.cover_image,
            "character": self.character.to_dict(),
            "createdAt": self.created_at,
        }


@dataclass
class BookInfo:
    """Partial book data returned by a bibliographic lookup."""

    title: str
    genre: str = "magazine"
    total_page: int = 0  # 0 = unknown
    cover_image: Optional[str] = None
    isbn: Optional[str] = None

    def apply_to(self, draft: dict[str, Any]) -> dict[str, Any]:
        """Merge the fields that were found onto a form draft."""
        merged = dict(draft)
        merged["title"] = self.title
        merged["genre"] = self.genre
        if self.total_page > 0:
            merged["total_page"] = self.total_page
        if self.cover_image:
            merged["cover_image"] = self.cover_image
        return merged
