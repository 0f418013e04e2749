from toevol.store import VocabularyStore
from tests.utils import seed_words


def test_record_outcome_never_exceeds_total(library, store):
    vocabularies = seed_words(library, 2)
    session, _ = store.create_review_session([v.id for v in vocabularies])

    counts = []
    for is_correct in (True, False, True, True):
        with store.transaction() as conn:
            VocabularyStore.record_outcome(conn, session["id"], is_correct)
        counts.append(store.get_review_session(session["id"])["correct_answers"])

    assert counts == [1, 1, 2, 2]


def test_record_answer_only_applies_once(library, store):
    vocabularies = seed_words(library, 1)
    session, questions = store.create_review_session([vocabularies[0].id])
    question_id = questions[0]["id"]

    assert store.record_answer(session["id"], question_id, "word0", None, True) is True
    assert store.record_answer(session["id"], question_id, "other", None, True) is False

    row = store.get_review_question(session["id"], question_id)
    assert row["user_answer_word"] == "word0"
    assert store.get_review_session(session["id"])["correct_answers"] == 1
    assert store.count_answered(session["id"]) == 1


def test_questions_keep_creation_order(library, store):
    vocabularies = seed_words(library, 3)
    ids = [v.id for v in reversed(vocabularies)]
    session, _ = store.create_review_session(ids)

    assert [q["vocabulary_id"] for q in store.get_review_questions(session["id"])] == ids
