"""Rating aggregate: count and mean of the rated comments on a recipe."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

_ONE_DECIMAL = Decimal('0.1')


@dataclass(frozen=True)
class RatingSummary:
    count: int
    mean: float

    @property
    def has_ratings(self) -> bool:
        return self.count > 0

    @property
    def label(self) -> str:
        if not self.has_ratings:
            return 'No ratings yet'
        return f'{self.mean:.1f}'


NO_RATINGS = RatingSummary(count=0, mean=0.0)


def summarize_ratings(ratings: Iterable[Optional[int]]) -> RatingSummary:
    """
    Count and mean of the present ratings, mean rounded half-up to one place.

    With nothing rated the mean is 0.0, never NaN or None.
    """
    present = [r for r in ratings if r is not None]
    if not present:
        return NO_RATINGS
    mean = Decimal(sum(present)) / Decimal(len(present))
    return RatingSummary(
        count=len(present),
        mean=float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)),
    )


def summarize(comments) -> RatingSummary:
    """Recompute the aggregate from a full comment list."""
    return summarize_ratings(c.rating for c in comments)
