import pytest

from toevol.errors import ConflictError, NotFoundError, ValidationError
from toevol.models import VocabularyCreate, VocabularyUpdate
from tests.utils import create_vocabulary, seed_words


def test_create_cleans_fields(library):
    vocabulary = create_vocabulary(
        library,
        word="  Happy ",
        meaning=" vui vẻ ",
        synonyms=[" Joyful", "", "GLAD "],
        part_of_speech=" adj ",
        example_source="   ",
    )
    assert vocabulary.word == "happy"
    assert vocabulary.meaning == "vui vẻ"
    assert vocabulary.part_of_speech == "adj"
    assert vocabulary.example_source is None
    assert sorted(vocabulary.synonym_words) == ["glad", "joyful"]


def test_create_requires_word_and_meaning(library):
    with pytest.raises(ValidationError):
        library.create(VocabularyCreate(word="run"))
    with pytest.raises(ValidationError):
        library.create(VocabularyCreate(word="  ", meaning="chạy"))


def test_duplicate_word_conflicts(library):
    create_vocabulary(library, word="run")
    with pytest.raises(ConflictError) as exc:
        create_vocabulary(library, word="RUN ")
    assert exc.value.code == "vocabulary_exists"
    assert exc.value.status_code == 409


def test_get_missing_vocabulary(library):
    with pytest.raises(NotFoundError):
        library.get("missing")


def test_update_replaces_synonyms(library):
    vocabulary = create_vocabulary(library, word="run", synonyms=["sprint", "dash"])
    updated = library.update(vocabulary.id, VocabularyUpdate(synonyms=["Jog"]))
    assert updated.synonym_words == ["jog"]
    assert updated.meaning == vocabulary.meaning

    updated = library.update(vocabulary.id, VocabularyUpdate(meaning="chạy nhanh"))
    assert updated.synonym_words == ["jog"]
    assert updated.meaning == "chạy nhanh"


def test_update_clears_optional_field(library):
    vocabulary = create_vocabulary(library, word="run", image_url="http://img/run.png")
    updated = library.update(vocabulary.id, VocabularyUpdate(image_url=""))
    assert updated.image_url is None


def test_update_errors(library):
    first = create_vocabulary(library, word="run")
    create_vocabulary(library, word="walk")
    with pytest.raises(ConflictError):
        library.update(first.id, VocabularyUpdate(word="Walk"))
    with pytest.raises(NotFoundError):
        library.update("missing", VocabularyUpdate(meaning="x"))
    with pytest.raises(ValidationError):
        library.update(first.id, VocabularyUpdate(word=" "))


def test_delete_removes_synonyms(library, store):
    vocabulary = create_vocabulary(library, word="run", synonyms=["sprint"])
    library.delete(vocabulary.id)
    with pytest.raises(NotFoundError):
        library.get(vocabulary.id)
    with pytest.raises(NotFoundError):
        library.delete(vocabulary.id)
    with store.transaction() as conn:
        assert conn.execute("SELECT COUNT(*) FROM synonyms").fetchone()[0] == 0


def test_search_is_case_insensitive_substring(library):
    create_vocabulary(library, word="happy", meaning="Vui Vẻ")
    create_vocabulary(library, word="unhappy", meaning="buồn")
    create_vocabulary(library, word="run", meaning="chạy")

    page = library.search(word="HAPP")
    assert sorted(v.word for v in page.data) == ["happy", "unhappy"]
    assert page.pagination.total == 2

    page = library.search(meaning="vui vẻ")
    assert [v.word for v in page.data] == ["happy"]

    page = library.search(word="happy", meaning="buồn")
    assert [v.word for v in page.data] == ["unhappy"]


def test_search_paginates_newest_first(library):
    seed_words(library, 5)
    page = library.search(page=1, limit=2)
    assert [v.word for v in page.data] == ["word4", "word3"]
    assert page.pagination.total == 5
    assert page.pagination.total_pages == 3

    last = library.search(page=3, limit=2)
    assert [v.word for v in last.data] == ["word0"]

    empty = library.search(page=9, limit=2)
    assert empty.data == []
