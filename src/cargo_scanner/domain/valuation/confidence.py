"""Confidence scoring for price observations"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from ..shared.market import PricePoint

AGE_FACTOR_FLOOR = 0.2
VOLATILITY_FACTOR_FLOOR = 0.3
UNREPORTED_VOLATILITY_FACTOR = 0.8


def age_factor(age: timedelta, ttl: timedelta) -> float:
    """
    Trust factor for data of a given age.

    1.0 up to ttl/2, then linear decay to AGE_FACTOR_FLOOR at 3 x ttl,
    flat at the floor beyond that. Negative ages (clock skew) count as 0.
    """
    ttl_seconds = ttl.total_seconds()
    if ttl_seconds <= 0:
        raise ValueError("ttl must be positive")

    age_seconds = max(age.total_seconds(), 0.0)
    decay_start = ttl_seconds / 2
    decay_end = ttl_seconds * 3

    if age_seconds <= decay_start:
        return 1.0
    if age_seconds >= decay_end:
        return AGE_FACTOR_FLOOR

    progress = (age_seconds - decay_start) / (decay_end - decay_start)
    return 1.0 - progress * (1.0 - AGE_FACTOR_FLOOR)


def volatility_factor(volatility: Optional[float], ceiling: float) -> float:
    """
    Trust factor for a single point's reported volatility.

    1.0 at zero volatility, linear decay to VOLATILITY_FACTOR_FLOOR at the
    ceiling. Points without a reported volatility get a neutral 0.8.
    """
    if ceiling <= 0:
        raise ValueError("volatility ceiling must be positive")
    if volatility is None:
        return UNREPORTED_VOLATILITY_FACTOR

    volatility = max(volatility, 0.0)
    if volatility >= ceiling:
        return VOLATILITY_FACTOR_FLOOR
    return 1.0 - (volatility / ceiling) * (1.0 - VOLATILITY_FACTOR_FLOOR)


@dataclass(frozen=True)
class ConfidenceScorer:
    """
    Derives a 0.0-1.0 confidence from observation age and volatility.

    Attributes:
        ttl: Price TTL the age factor is scaled against
        volatility_ceiling: Volatility at which the volatility factor bottoms out
    """
    ttl: timedelta
    volatility_ceiling: float

    def __post_init__(self):
        if self.ttl.total_seconds() <= 0:
            raise ValueError("ttl must be positive")
        if self.volatility_ceiling <= 0:
            raise ValueError("volatility ceiling must be positive")

    def score(self, points: Iterable[PricePoint], now: datetime) -> float:
        """
        Score the points contributing to one evaluation.

        Age is taken from the freshest point's observed_at; each point then
        contributes age_factor x its own volatility factor, and the result is
        the arithmetic mean. No points scores exactly 0.0.
        """
        points = tuple(points)
        if not points:
            return 0.0

        freshest = max(point.observed_at for point in points)
        age = age_factor(now - freshest, self.ttl)

        total = sum(
            age * volatility_factor(point.volatility, self.volatility_ceiling)
            for point in points
        )
        return min(1.0, max(0.0, total / len(points)))
