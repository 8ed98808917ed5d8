import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ....adapters.secondary.cache.price_cache import PriceCache
from ....domain.shared.exceptions import PriceFeedError
from ....domain.shared.market import CachedCommodities, Freshness
from ....mediator import Request, RequestHandler
from ....ports.outbound.price_cache_store import IPriceCacheStore
from ....ports.outbound.price_feed import IPriceFeed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshCommoditiesCommand(Request[CachedCommodities]):
    """Command to load the commodities list, fetching it when not fresh"""
    force: bool = False


class RefreshCommoditiesHandler(RequestHandler[RefreshCommoditiesCommand, CachedCommodities]):
    """Handler for the cached commodities list"""

    def __init__(
        self,
        price_feed: IPriceFeed,
        price_cache: PriceCache,
        store: Optional[IPriceCacheStore] = None
    ):
        self._price_feed = price_feed
        self._price_cache = price_cache
        self._store = store

    async def handle(self, request: RefreshCommoditiesCommand) -> CachedCommodities:
        """
        Return the commodities list, refetching unless it is fresh.

        Raises:
            PriceFeedError: If the fetch fails and nothing is cached
        """
        cached = self._price_cache.get_commodities()
        if cached.freshness is Freshness.FRESH and not request.force:
            return cached

        try:
            commodities = await asyncio.to_thread(self._price_feed.fetch_commodities)
        except PriceFeedError as e:
            if cached.freshness is Freshness.MISSING:
                raise
            logger.warning(f"Failed to refresh commodities, serving cached list: {e}")
            return cached

        self._price_cache.upsert_commodities(commodities)
        refreshed = self._price_cache.get_commodities()
        if self._store is not None:
            self._store.save_commodities(refreshed.commodities, refreshed.fetched_at)
        return refreshed
