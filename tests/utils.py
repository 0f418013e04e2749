"""Utility helpers for test factories."""

from __future__ import annotations

from toevol.library import LibraryService
from toevol.models import Vocabulary, VocabularyCreate


def create_vocabulary(
    library: LibraryService,
    word: str = "happy",
    meaning: str = "vui vẻ",
    synonyms: list[str] | None = None,
    **kwargs,
) -> Vocabulary:
    payload = VocabularyCreate(word=word, meaning=meaning, synonyms=synonyms or [], **kwargs)
    return library.create(payload)


def seed_words(library: LibraryService, count: int) -> list[Vocabulary]:
    return [
        create_vocabulary(library, word=f"word{index}", meaning=f"nghĩa {index}")
        for index in range(count)
    ]
