import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, TypeVar

from .errors import ValidationError

T = TypeVar("T")


def fisher_yates(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a uniformly shuffled copy of ``items``."""
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class QuestionSampler(ABC):
    """Abstract base for strategies picking the entries of a review session."""

    @abstractmethod
    def choose(self, pool: Sequence[T], count: int) -> List[T]:
        pass

    def sample(self, pool: Sequence[T], requested: Optional[int]) -> List[T]:
        """Validate the request, cap it at the pool size and delegate the draw."""
        if requested is None or requested < 1:
            raise ValidationError(
                "invalid_number_of_questions", "number_of_questions must be at least 1"
            )
        if not pool:
            raise ValidationError(
                "no_vocabularies_available", "No vocabularies available for review"
            )
        return self.choose(pool, min(requested, len(pool)))


class RandomSampler(QuestionSampler):
    """Draws distinct entries uniformly from the whole pool."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def choose(self, pool: Sequence[T], count: int) -> List[T]:
        return fisher_yates(pool, self.rng)[:count]
