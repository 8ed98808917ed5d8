from dataclasses import dataclass
from typing import Optional

from ....adapters.secondary.cache.price_cache import PriceCache
from ....mediator import Request, RequestHandler
from ....ports.outbound.price_cache_store import IPriceCacheStore


@dataclass(frozen=True)
class ClearPriceCacheCommand(Request[int]):
    """Command to drop cached prices for one commodity, or everything"""
    commodity_id: Optional[str] = None


class ClearPriceCacheHandler(RequestHandler[ClearPriceCacheCommand, int]):
    """Handler for clearing the price cache; returns entries dropped"""

    def __init__(self, price_cache: PriceCache, store: Optional[IPriceCacheStore] = None):
        self._price_cache = price_cache
        self._store = store

    async def handle(self, request: ClearPriceCacheCommand) -> int:
        dropped = self._price_cache.clear(request.commodity_id)
        if self._store is not None:
            self._store.delete_entries(request.commodity_id)
        return dropped
