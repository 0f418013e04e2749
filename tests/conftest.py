"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import random

import pytest

from toevol.library import LibraryService
from toevol.review import ReviewService
from toevol.sampling import RandomSampler
from toevol.store import VocabularyStore


@pytest.fixture()
def store(tmp_path) -> VocabularyStore:
    store = VocabularyStore(str(tmp_path / "toevol.db"), timeout=1.0)
    store.init_schema()
    return store


@pytest.fixture()
def library(store) -> LibraryService:
    return LibraryService(store)


@pytest.fixture()
def review_service(store) -> ReviewService:
    return ReviewService(store, sampler=RandomSampler(random.Random(1234)))
