import logging
import threading
from typing import List, Optional

from .config import settings
from .errors import ConflictError, DependencyError, NotFoundError, ValidationError
from .grading import grade
from .models import (
    CreateReviewResponse,
    GradeResult,
    ReviewQuestionDetail,
    ReviewQuestionResult,
    ReviewSessionResult,
    ReviewSessionSummary,
    UserAnswer,
    VocabularyAnswer,
)
from .sampling import QuestionSampler, RandomSampler
from .store import VocabularyStore, utcnow_iso

logger = logging.getLogger(__name__)

STATUS_CREATED = "created"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"


def score_percentage(correct: int, total: int) -> int:
    """Percentage of correct answers, rounded half away from zero."""
    if total <= 0:
        return 0
    # Integer form of round(correct / total * 100) with halves going up.
    return (200 * correct + total) // (2 * total)


def session_status(answered: int, total: int) -> str:
    if answered <= 0:
        return STATUS_CREATED
    if answered < total:
        return STATUS_IN_PROGRESS
    return STATUS_COMPLETED


def split_stored_synonyms(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [piece.strip() for piece in raw.split(",") if piece.strip()]


class SessionLocks:
    """A fixed pool of locks; answers to the same review session always share one."""

    def __init__(self, size: int = 64):
        self._locks: List[threading.Lock] = [threading.Lock() for _ in range(size)]

    def __len__(self) -> int:
        return len(self._locks)

    def for_session(self, session_id: str) -> threading.Lock:
        return self._locks[hash(session_id) % len(self._locks)]


class ReviewService:
    """Creates review sessions, checks answers and reports results."""

    def __init__(
        self,
        store: VocabularyStore,
        sampler: Optional[QuestionSampler] = None,
        locks: Optional[SessionLocks] = None,
    ):
        self.store = store
        self.sampler = sampler or RandomSampler()
        self.locks = locks or SessionLocks()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def create_session(self, number_of_questions: Optional[int]) -> CreateReviewResponse:
        pool = self.store.list_vocabulary_ids()
        selected_ids = self.sampler.sample(pool, number_of_questions)
        vocabularies = self.store.get_vocabularies(selected_ids)
        # An entry deleted between listing and fetching is simply left out.
        selected_ids = [vocabulary_id for vocabulary_id in selected_ids if vocabulary_id in vocabularies]
        if not selected_ids:
            raise ValidationError(
                "no_vocabularies_available", "No vocabularies available for review"
            )

        session, questions = self.store.create_review_session(selected_ids)
        logger.info(
            f"New review session {session['id']}: "
            f"{session['total_questions']} of {number_of_questions} requested questions"
        )

        details = []
        for question in questions:
            vocabulary = vocabularies[question["vocabulary_id"]]
            details.append(
                ReviewQuestionDetail(
                    question_id=question["id"],
                    vocabulary_id=vocabulary.id,
                    meaning=vocabulary.meaning,
                    part_of_speech=vocabulary.part_of_speech,
                    example_source=vocabulary.example_source,
                    example_target=vocabulary.example_target,
                    image_url=vocabulary.image_url,
                )
            )
        return CreateReviewResponse(
            session_id=session["id"],
            total_questions=session["total_questions"],
            questions=details,
        )

    def list_sessions(self, limit: Optional[int] = None) -> List[ReviewSessionSummary]:
        rows = self.store.list_review_sessions(limit or settings.REVIEW_HISTORY_LIMIT)
        return [ReviewSessionSummary(**row) for row in rows]

    def get_result(self, session_id: str) -> ReviewSessionResult:
        session = self.store.get_review_session(session_id)
        if not session:
            raise NotFoundError("review_session_not_found", "Review session not found")

        questions = self.store.get_review_questions(session_id)
        vocabularies = self.store.get_vocabularies(
            [q["vocabulary_id"] for q in questions if q["vocabulary_id"]]
        )

        results = []
        answered = 0
        for question in questions:
            if question["answered_at"]:
                answered += 1
            vocabulary = vocabularies.get(question["vocabulary_id"])
            results.append(
                ReviewQuestionResult(
                    question_id=question["id"],
                    vocabulary=(
                        VocabularyAnswer(
                            word=vocabulary.word,
                            meaning=vocabulary.meaning,
                            synonyms=vocabulary.synonym_words,
                        )
                        if vocabulary
                        else None
                    ),
                    user_answer=UserAnswer(
                        word=question["user_answer_word"],
                        synonyms=split_stored_synonyms(question["user_answer_synonyms"]),
                    ),
                    is_correct=(
                        None if question["is_correct"] is None else bool(question["is_correct"])
                    ),
                )
            )

        total = session["total_questions"]
        correct = session["correct_answers"]
        return ReviewSessionResult(
            session_id=session["id"],
            total_questions=total,
            correct_answers=correct,
            score_percentage=score_percentage(correct, total),
            status=session_status(answered, total),
            questions=results,
        )

    def check_answer(
        self,
        session_id: str,
        question_id: Optional[str],
        user_word: Optional[str],
        user_synonyms: Optional[str],
    ) -> GradeResult:
        """Grade one answer, then persist it and update the session score together."""
        if not question_id:
            raise ValidationError("question_id_required", "question_id is required")

        session = self.store.get_review_session(session_id)
        if not session:
            raise NotFoundError("review_session_not_found", "Review session not found")

        with self.locks.for_session(session_id):
            question = self.store.get_review_question(session_id, question_id)
            if not question:
                raise NotFoundError("question_not_found", "Question not found in this session")

            answered = self.store.count_answered(session_id)
            if session_status(answered, session["total_questions"]) == STATUS_COMPLETED:
                raise ConflictError("session_completed", "Review session is already completed")
            if question["answered_at"]:
                raise ConflictError(
                    "question_already_answered", "Question has already been answered"
                )

            vocabulary = (
                self.store.get_vocabulary(question["vocabulary_id"])
                if question["vocabulary_id"]
                else None
            )
            if vocabulary is None:
                raise NotFoundError("vocabulary_not_found", "Vocabulary not found")

            result = grade(vocabulary.word, vocabulary.synonym_words, user_word, user_synonyms)
            self._persist_answer(session_id, question_id, user_word, user_synonyms, result)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _persist_answer(
        self,
        session_id: str,
        question_id: str,
        user_word: Optional[str],
        user_synonyms: Optional[str],
        result: GradeResult,
    ) -> None:
        # The grade is returned even if this write fails; the failure is only logged.
        try:
            applied = self.store.record_answer(
                session_id,
                question_id,
                user_word=(user_word or "").strip() or None,
                user_synonyms=(user_synonyms or "").strip() or None,
                is_correct=result.is_correct,
                answered_at=utcnow_iso(),
            )
        except DependencyError as exc:
            logger.error(f"Failed to save answer for question {question_id}: {exc}")
            return

        if not applied:
            raise ConflictError("question_already_answered", "Question has already been answered")
        logger.info(
            f"Session {session_id} question {question_id} answered "
            f"({'correct' if result.is_correct else 'incorrect'})"
        )
