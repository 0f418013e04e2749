"""Answer checking for review questions.

Everything here is pure: no storage, no clock. The review service feeds it the
canonical vocabulary data and the raw text the learner typed.
"""

from typing import Iterable, List, Optional

from .models import GradeResult, SynonymComparison

SYNONYM_SEPARATOR = ","


def normalize(text: Optional[str]) -> str:
    """Trim surrounding whitespace and lowercase. ``None`` becomes ``""``."""
    if not text:
        return ""
    return text.strip().lower()


def parse_synonyms(raw: Optional[str]) -> List[str]:
    """Split a comma-separated synonym string into normalized, non-empty items.

    Duplicates are kept; the comparator collapses them.
    """
    if not raw or not raw.strip():
        return []
    pieces = (normalize(piece) for piece in raw.split(SYNONYM_SEPARATOR))
    return [piece for piece in pieces if piece]


def compare(expected: Iterable[str], actual: Iterable[str]) -> SynonymComparison:
    """Order-insensitive comparison of two synonym lists.

    Membership uses set semantics. ``missing`` and ``matching`` follow the
    order of ``expected``, ``extra`` the order of ``actual``. Extra items never
    make the comparison fail: a learner who knows more synonyms than stored is
    still right.
    """
    normalized_expected = [normalize(item) for item in expected]
    normalized_actual = [normalize(item) for item in actual]

    expected_set = set(normalized_expected)
    actual_set = set(normalized_actual)

    missing = [item for item in normalized_expected if item not in actual_set]
    extra = [item for item in normalized_actual if item not in expected_set]
    matching = [item for item in normalized_expected if item in actual_set]

    return SynonymComparison(
        missing=missing,
        extra=extra,
        matching=matching,
        all_match=not missing,
    )


def grade(
    canonical_word: str,
    canonical_synonyms: List[str],
    user_word: Optional[str],
    user_synonyms: Optional[str],
) -> GradeResult:
    """Decide whether one answer is correct.

    The word must match exactly after normalization and no canonical synonym
    may be missing. With no canonical synonyms only the word counts.
    """
    word_correct = normalize(user_word) == normalize(canonical_word)
    parsed_synonyms = parse_synonyms(user_synonyms)
    comparison = compare(canonical_synonyms, parsed_synonyms)

    return GradeResult(
        is_correct=word_correct and comparison.all_match,
        correct_word=canonical_word,
        user_word=user_word or "",
        correct_synonyms=list(canonical_synonyms),
        user_synonyms=parsed_synonyms,
        missing_synonyms=comparison.missing,
        extra_synonyms=comparison.extra,
        word_correct=word_correct,
        synonyms_correct=comparison.all_match,
    )
