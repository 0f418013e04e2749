import logging
import math
from typing import Any, Dict, List, Optional

from .config import settings
from .errors import NotFoundError, ValidationError
from .models import Pagination, Vocabulary, VocabularyCreate, VocabularyPage, VocabularyUpdate
from .store import VocabularyStore

logger = logging.getLogger(__name__)

OPTIONAL_TEXT_FIELDS = ("part_of_speech", "example_source", "example_target", "image_url")


def clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def clean_synonyms(synonyms: List[str]) -> List[str]:
    return [s.strip().lower() for s in synonyms if s and s.strip()]


class LibraryService:
    """Browse and edit the vocabulary library."""

    def __init__(self, store: VocabularyStore):
        self.store = store

    def search(
        self,
        word: Optional[str] = None,
        meaning: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> VocabularyPage:
        page = max(page, 1)
        limit = min(max(limit or settings.DEFAULT_PAGE_SIZE, 1), settings.MAX_PAGE_SIZE)
        entries, total = self.store.search_vocabularies(
            word=(word or "").strip() or None,
            meaning=(meaning or "").strip() or None,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return VocabularyPage(
            data=entries,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit),
            ),
        )

    def get(self, vocabulary_id: str) -> Vocabulary:
        vocabulary = self.store.get_vocabulary(vocabulary_id)
        if not vocabulary:
            raise NotFoundError("vocabulary_not_found", "Vocabulary not found")
        return vocabulary

    def create(self, payload: VocabularyCreate) -> Vocabulary:
        word = (payload.word or "").strip().lower()
        meaning = (payload.meaning or "").strip()
        if not word or not meaning:
            raise ValidationError("word_and_meaning_required", "word and meaning are required")

        fields: Dict[str, Any] = {"word": word, "meaning": meaning}
        for name in OPTIONAL_TEXT_FIELDS:
            fields[name] = clean_optional(getattr(payload, name))

        vocabulary = self.store.insert_vocabulary(fields, clean_synonyms(payload.synonyms))
        logger.info(f"Created vocabulary '{vocabulary.word}' ({vocabulary.id})")
        return vocabulary

    def update(self, vocabulary_id: str, payload: VocabularyUpdate) -> Vocabulary:
        provided = payload.model_fields_set
        fields: Dict[str, Any] = {}
        if "word" in provided:
            word = (payload.word or "").strip().lower()
            if not word:
                raise ValidationError("word_required", "word cannot be empty")
            fields["word"] = word
        if "meaning" in provided:
            meaning = (payload.meaning or "").strip()
            if not meaning:
                raise ValidationError("meaning_required", "meaning cannot be empty")
            fields["meaning"] = meaning
        for name in OPTIONAL_TEXT_FIELDS:
            if name in provided:
                fields[name] = clean_optional(getattr(payload, name))

        synonyms = None
        if "synonyms" in provided:
            synonyms = clean_synonyms(payload.synonyms or [])

        vocabulary = self.store.update_vocabulary(vocabulary_id, fields, synonyms)
        if not vocabulary:
            raise NotFoundError("vocabulary_not_found", "Vocabulary not found")
        logger.info(f"Updated vocabulary {vocabulary_id}")
        return vocabulary

    def delete(self, vocabulary_id: str) -> None:
        if not self.store.delete_vocabulary(vocabulary_id):
            raise NotFoundError("vocabulary_not_found", "Vocabulary not found")
        logger.info(f"Deleted vocabulary {vocabulary_id}")
