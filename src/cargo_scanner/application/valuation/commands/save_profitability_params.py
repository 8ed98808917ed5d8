import logging
from dataclasses import dataclass

from ....domain.valuation import ProfitabilityParams
from ....mediator import Request, RequestHandler
from ....ports.outbound.cargo_repository import ICargoRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveProfitabilityParamsCommand(Request[ProfitabilityParams]):
    """Command to persist profitability params for later evaluations"""
    params: ProfitabilityParams


class SaveProfitabilityParamsHandler(RequestHandler[SaveProfitabilityParamsCommand, ProfitabilityParams]):
    """Handler for saving profitability params"""

    def __init__(self, cargo_repository: ICargoRepository):
        self._cargo_repo = cargo_repository

    async def handle(self, request: SaveProfitabilityParamsCommand) -> ProfitabilityParams:
        self._cargo_repo.save_profitability_params(request.params)
        return request.params
