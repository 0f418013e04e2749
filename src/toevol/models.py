from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


# --- Grading ---
class SynonymComparison(BaseModel):
    missing: List[str]
    extra: List[str]
    matching: List[str]
    all_match: bool


class GradeResult(BaseModel):
    is_correct: bool
    correct_word: str
    user_word: str
    correct_synonyms: List[str]
    user_synonyms: List[str]
    missing_synonyms: List[str]
    extra_synonyms: List[str]
    word_correct: bool
    synonyms_correct: bool


# --- Vocabulary ---
class Synonym(BaseModel):
    id: str
    vocabulary_id: str
    word: str


class Vocabulary(BaseModel):
    id: str
    word: str
    meaning: str
    part_of_speech: Optional[str] = None
    example_source: Optional[str] = None
    example_target: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    synonyms: List[Synonym] = []

    @property
    def synonym_words(self) -> List[str]:
        return [s.word for s in self.synonyms]


class VocabularyCreate(BaseModel):
    word: Optional[str] = None
    meaning: Optional[str] = None
    part_of_speech: Optional[str] = None
    example_source: Optional[str] = None
    example_target: Optional[str] = None
    image_url: Optional[str] = None
    synonyms: List[str] = []


class VocabularyUpdate(BaseModel):
    word: Optional[str] = None
    meaning: Optional[str] = None
    part_of_speech: Optional[str] = None
    example_source: Optional[str] = None
    example_target: Optional[str] = None
    image_url: Optional[str] = None
    synonyms: Optional[List[str]] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class VocabularyPage(BaseModel):
    data: List[Vocabulary]
    pagination: Pagination


# --- Review sessions ---
class CreateReviewRequest(BaseModel):
    number_of_questions: Optional[int] = None


class ReviewQuestionDetail(BaseModel):
    question_id: str
    vocabulary_id: str
    meaning: str
    part_of_speech: Optional[str] = None
    example_source: Optional[str] = None
    example_target: Optional[str] = None
    image_url: Optional[str] = None


class CreateReviewResponse(BaseModel):
    session_id: str
    total_questions: int
    questions: List[ReviewQuestionDetail]


class ReviewSessionSummary(BaseModel):
    id: str
    total_questions: int
    correct_answers: int
    created_at: datetime


class CheckAnswerRequest(BaseModel):
    question_id: Optional[str] = None
    user_word: Optional[str] = None
    user_synonyms: Optional[str] = None


class VocabularyAnswer(BaseModel):
    word: str
    meaning: str
    synonyms: List[str]


class UserAnswer(BaseModel):
    word: Optional[str] = None
    synonyms: List[str]


class ReviewQuestionResult(BaseModel):
    question_id: str
    vocabulary: Optional[VocabularyAnswer] = None
    user_answer: UserAnswer
    is_correct: Optional[bool] = None


class ReviewSessionResult(BaseModel):
    session_id: str
    total_questions: int
    correct_answers: int
    score_percentage: int
    status: str
    questions: List[ReviewQuestionResult]
