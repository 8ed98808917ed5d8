from dataclasses import dataclass

from ....domain.shared.cargo import CargoItem
from ....mediator import Request, RequestHandler
from ....ports.outbound.cargo_repository import ICargoRepository


@dataclass(frozen=True)
class ListCargoQuery(Request[tuple[CargoItem, ...]]):
    """Query for the held cargo set"""
    pass


class ListCargoHandler(RequestHandler[ListCargoQuery, tuple[CargoItem, ...]]):
    """Handler for listing held cargo, ordered by commodity id"""

    def __init__(self, cargo_repository: ICargoRepository):
        self._cargo_repo = cargo_repository

    async def handle(self, request: ListCargoQuery) -> tuple[CargoItem, ...]:
        items = self._cargo_repo.load_manifest().items
        return tuple(sorted(items, key=lambda item: item.commodity_id))
