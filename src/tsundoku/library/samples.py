"""Sample books seeded into an empty library."""

from __future__ import annotations

import time

from .characters import CHARACTER_TEMPLATES
from .models import Book


def create_sample_books() -> list[Book]:
    now = time.time()
    return [
        Book(
            id="1",
            title="Next.jsとReactの教科書",
            genre="study",
            total_page=350,
            current_page=120,
            reason="この技術をマスターして、ウェブ開発のプロになりたい！",
            latest_dialogue="進捗34%！目標達成のために、熱血パワーで進むぞ！",
            cover_image="https://placehold.co/150x200/505050/ffffff?text=Next.js+React",
            character=CHARACTER_TEMPLATES["study"],
            created_at=now,
        ),
        Book(
            id="2",
            title="海辺の静かな物語",
            genre="novel",
            total_page=280,
            current_page=50,
            reason="忙しい日常から離れて、心が洗われるような感動を得たい。",
            latest_dialogue="🌸素敵な物語が、あなたを待っています...",
            cover_image="https://placehold.co/150x200/1e40af/ffffff?text=Novel",
            character=CHARACTER_TEMPLATES["novel"],
            created_at=now,
        ),
    ]
