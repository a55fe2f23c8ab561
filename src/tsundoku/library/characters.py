"""Genre to character persona catalog."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from .models import Character

DEFAULT_GENRE = "magazine"

CHARACTER_TEMPLATES: Mapping[str, Character] = MappingProxyType(
    {
        "study": Character(type="熱血系", emoji="💪", personality="passionate"),
        "novel": Character(type="ロマンチスト", emoji="🌸", personality="romantic"),
        "philosophy": Character(type="達観系", emoji="🧘", personality="zen"),
        "magazine": Character(type="フレンドリー", emoji="😊", personality="friendly"),
    }
)

GENRE_LABELS = {
    "study": "勉強・技術書",
    "novel": "小説",
    "philosophy": "哲学・思想",
    "magazine": "雑誌・その他",
}


def resolve_character(
    genre: Optional[str],
    catalog: Mapping[str, Character] = CHARACTER_TEMPLATES,
    default_genre: str = DEFAULT_GENRE,
) -> Character:
    """Look up the persona for a genre, falling back to the friendly one."""
    if genre and genre in catalog:
        return catalog[genre]
    fallback = catalog.get(default_genre)
    return fallback if fallback is not None else CHARACTER_TEMPLATES[DEFAULT_GENRE]


def genre_choices(
    catalog: Mapping[str, Character] = CHARACTER_TEMPLATES,
) -> list[tuple[str, str]]:
    """(label, genre) pairs for selection widgets."""
    return [(GENRE_LABELS.get(g, g), g) for g in catalog]
