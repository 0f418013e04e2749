from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from .errors import ToevolError
from .library import LibraryService
from .models import (
    CheckAnswerRequest,
    CreateReviewRequest,
    CreateReviewResponse,
    GradeResult,
    ReviewSessionResult,
    ReviewSessionSummary,
    Vocabulary,
    VocabularyCreate,
    VocabularyPage,
    VocabularyUpdate,
)
from .review import ReviewService

router = APIRouter()


# --- Dependencies ---
def get_review_service(request: Request) -> ReviewService:
    return request.app.state.review_service


def get_library(request: Request) -> LibraryService:
    return request.app.state.library


def _http_error(exc: ToevolError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


# --- Reviews ---
@router.post(
    "/reviews",
    response_model=CreateReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_review(
    payload: Optional[CreateReviewRequest] = None,
    service: ReviewService = Depends(get_review_service),
):
    count = payload.number_of_questions if payload else None
    try:
        return service.create_session(count)
    except ToevolError as exc:
        raise _http_error(exc) from exc


@router.get("/reviews", response_model=List[ReviewSessionSummary])
def list_reviews(service: ReviewService = Depends(get_review_service)):
    try:
        return service.list_sessions()
    except ToevolError as exc:
        raise _http_error(exc) from exc


@router.get("/reviews/{session_id}", response_model=ReviewSessionResult)
def get_review(session_id: str, service: ReviewService = Depends(get_review_service)):
    try:
        return service.get_result(session_id)
    except ToevolError as exc:
        raise _http_error(exc) from exc


@router.post("/reviews/{session_id}/check", response_model=GradeResult)
def check_answer(
    session_id: str,
    payload: CheckAnswerRequest,
    service: ReviewService = Depends(get_review_service),
):
    try:
        return service.check_answer(
            session_id,
            question_id=payload.question_id,
            user_word=payload.user_word,
            user_synonyms=payload.user_synonyms,
        )
    except ToevolError as exc:
        raise _http_error(exc) from exc


# --- Vocabulary library ---
@router.get("/vocabularies", response_model=VocabularyPage)
def list_vocabularies(
    word: Optional[str] = None,
    meaning: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    library: LibraryService = Depends(get_library),
):
    try:
        return library.search(word=word, meaning=meaning, page=page, limit=limit)
    except ToevolError as exc:
        raise _http_error(exc) from exc


@router.post(
    "/vocabularies",
    response_model=Vocabulary,
    status_code=status.HTTP_201_CREATED,
)
def create_vocabulary(
    payload: VocabularyCreate,
    library: LibraryService = Depends(get_library),
):
    try:
        return library.create(payload)
    except ToevolError as exc:
        raise _http_error(exc) from exc


@router.get("/vocabularies/{vocabulary_id}", response_model=Vocabulary)
def get_vocabulary(vocabulary_id: str, library: LibraryService = Depends(get_library)):
    try:
        return library.get(vocabulary_id)
    except ToevolError as exc:
        raise _http_error(exc) from exc


@router.put("/vocabularies/{vocabulary_id}", response_model=Vocabulary)
def update_vocabulary(
    vocabulary_id: str,
    payload: VocabularyUpdate,
    library: LibraryService = Depends(get_library),
):
    try:
        return library.update(vocabulary_id, payload)
    except ToevolError as exc:
        raise _http_error(exc) from exc


@router.delete("/vocabularies/{vocabulary_id}")
def delete_vocabulary(vocabulary_id: str, library: LibraryService = Depends(get_library)):
    try:
        library.delete(vocabulary_id)
    except ToevolError as exc:
        raise _http_error(exc) from exc
    return {"message": "Vocabulary deleted successfully"}


@router.get("/health")
def health(library: LibraryService = Depends(get_library)):
    try:
        total = library.store.count_vocabularies()
    except ToevolError as exc:
        raise _http_error(exc) from exc
    return {"status": "ok", "vocabularies": total}
