import math
from dataclasses import dataclass
from typing import Callable, Optional

from ....domain.shared.exceptions import InvalidParamsError
from ....domain.valuation import (
    ProfitabilityParams,
    ProfitabilityScore,
    ProfitThresholds,
    score_profitability,
)
from ....mediator import Request, RequestHandler
from ....ports.outbound.cargo_repository import ICargoRepository


@dataclass(frozen=True)
class ScoreProfitabilityQuery(Request[ProfitabilityScore]):
    """
    Query scoring a total EV against costs

    params and thresholds fall back to the saved params and the configured
    thresholds when omitted.
    """
    total_ev: float
    params: Optional[ProfitabilityParams] = None
    thresholds: Optional[ProfitThresholds] = None

    def validate(self):
        if isinstance(self.total_ev, bool) or not isinstance(self.total_ev, (int, float)) \
                or not math.isfinite(self.total_ev):
            raise InvalidParamsError(f"total_ev must be a finite number, got {self.total_ev!r}")


class ScoreProfitabilityHandler(RequestHandler[ScoreProfitabilityQuery, ProfitabilityScore]):
    """Handler for profitability scoring"""

    def __init__(
        self,
        cargo_repository: ICargoRepository,
        thresholds_provider: Callable[[], Optional[ProfitThresholds]]
    ):
        self._cargo_repo = cargo_repository
        self._thresholds_provider = thresholds_provider

    async def handle(self, request: ScoreProfitabilityQuery) -> ProfitabilityScore:
        """
        Raises:
            InvalidParamsError: If no params or thresholds are given or saved
        """
        params = request.params or self._cargo_repo.load_profitability_params()
        thresholds = request.thresholds or self._thresholds_provider()
        return score_profitability(request.total_ev, params, thresholds)
