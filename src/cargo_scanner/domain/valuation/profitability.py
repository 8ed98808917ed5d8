"""Profitability scoring"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..shared.exceptions import InvalidParamsError

MAX_RISK_PCT = 0.4


class ProfitBand(Enum):
    """Discrete profitability indicator"""
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


def _require_non_negative(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidParamsError(f"{name} must be a finite number, got {value!r}")
    if value < 0:
        raise InvalidParamsError(f"{name} cannot be negative, got {value}")


@dataclass(frozen=True)
class ProfitabilityParams:
    """
    Cost inputs for one profitability evaluation

    Invariants:
    - risk_pct within [0, 0.4]
    - crew_hourly, time_minutes >= 0
    - crew_size is a whole number >= 0
    """
    risk_pct: float
    crew_hourly: float
    crew_size: int
    time_minutes: float

    def __post_init__(self):
        _require_non_negative("risk_pct", self.risk_pct)
        if self.risk_pct > MAX_RISK_PCT:
            raise InvalidParamsError(
                f"risk_pct must be within [0, {MAX_RISK_PCT}], got {self.risk_pct}"
            )
        _require_non_negative("crew_hourly", self.crew_hourly)
        if isinstance(self.crew_size, bool) or not isinstance(self.crew_size, int):
            raise InvalidParamsError(f"crew_size must be an integer, got {self.crew_size!r}")
        _require_non_negative("crew_size", self.crew_size)
        _require_non_negative("time_minutes", self.time_minutes)

    @property
    def crew_cost(self) -> float:
        return self.crew_hourly * self.crew_size * self.time_minutes / 60.0


@dataclass(frozen=True)
class ProfitThresholds:
    """Band cut-offs; value < low is RED, value >= high is GREEN"""
    low: float
    high: float

    def __post_init__(self):
        for name, value in (("threshold_low", self.low), ("threshold_high", self.high)):
            if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
                raise InvalidParamsError(f"{name} must be a number, got {value!r}")
        if self.low > self.high:
            raise InvalidParamsError(
                f"threshold_low ({self.low}) cannot exceed threshold_high ({self.high})"
            )

    def band_for(self, value: float) -> ProfitBand:
        if value < self.low:
            return ProfitBand.RED
        if value < self.high:
            return ProfitBand.YELLOW
        return ProfitBand.GREEN


@dataclass(frozen=True)
class ProfitabilityScore:
    """Net value after risk and crew costs, with its band"""
    value: float
    band: ProfitBand
    risk_cost: float
    crew_cost: float
    rationale: str


def score_profitability(
    total_ev: float,
    params: Optional[ProfitabilityParams],
    thresholds: Optional[ProfitThresholds]
) -> ProfitabilityScore:
    """
    Score a portfolio's total EV against risk, crew and time costs.

    value = total_ev - risk_pct * total_ev - crew_hourly * crew_size * minutes / 60

    The value is not clamped; a negative score is a valid signal.

    Raises:
        InvalidParamsError: If params or thresholds are missing
    """
    if params is None:
        raise InvalidParamsError("Profitability params are required to score")
    if thresholds is None:
        raise InvalidParamsError("Profit thresholds are required to score")

    risk_cost = params.risk_pct * total_ev
    crew_cost = params.crew_cost
    value = total_ev - risk_cost - crew_cost

    return ProfitabilityScore(
        value=value,
        band=thresholds.band_for(value),
        risk_cost=risk_cost,
        crew_cost=crew_cost,
        rationale=f"Net = {total_ev:.0f} - risk {risk_cost:.0f} - crew {crew_cost:.0f}"
    )
