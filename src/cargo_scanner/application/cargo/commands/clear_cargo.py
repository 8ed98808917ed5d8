import logging
from dataclasses import dataclass
from typing import Optional

from ....mediator import Request, RequestHandler
from ....ports.outbound.cargo_repository import ICargoRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClearCargoCommand(Request[int]):
    """Command to drop one held commodity, or the whole cargo set"""
    commodity_id: Optional[str] = None


class ClearCargoHandler(RequestHandler[ClearCargoCommand, int]):
    """Handler for clearing cargo; returns the number of items removed"""

    def __init__(self, cargo_repository: ICargoRepository):
        self._cargo_repo = cargo_repository

    async def handle(self, request: ClearCargoCommand) -> int:
        removed = self._cargo_repo.update_manifest(
            lambda manifest: manifest.clear(request.commodity_id)
        )
        logger.info(f"Cleared {removed} cargo item(s)")
        return removed
