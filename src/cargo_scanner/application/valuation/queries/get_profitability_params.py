from dataclasses import dataclass
from typing import Optional

from ....domain.valuation import ProfitabilityParams
from ....mediator import Request, RequestHandler
from ....ports.outbound.cargo_repository import ICargoRepository


@dataclass(frozen=True)
class GetProfitabilityParamsQuery(Request[Optional[ProfitabilityParams]]):
    """Query for the saved profitability params"""
    pass


class GetProfitabilityParamsHandler(RequestHandler[GetProfitabilityParamsQuery, Optional[ProfitabilityParams]]):
    """Handler returning saved params, or None if never saved"""

    def __init__(self, cargo_repository: ICargoRepository):
        self._cargo_repo = cargo_repository

    async def handle(self, request: GetProfitabilityParamsQuery) -> Optional[ProfitabilityParams]:
        return self._cargo_repo.load_profitability_params()
