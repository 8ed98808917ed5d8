import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ....adapters.secondary.cache.price_cache import PriceCache
from ....domain.shared.exceptions import InvalidParamsError, PriceFeedError
from ....domain.shared.market import CommodityId, Freshness
from ....mediator import Request, RequestHandler
from ....ports.outbound.price_cache_store import IPriceCacheStore
from ....ports.outbound.price_feed import IPriceFeed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshFailure:
    """A commodity whose prices could not be fetched"""
    commodity_id: CommodityId
    reason: str


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of a refresh pass"""
    refreshed: tuple[CommodityId, ...] = ()
    skipped: tuple[CommodityId, ...] = ()
    failed: tuple[RefreshFailure, ...] = ()

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


@dataclass(frozen=True)
class RefreshPricesCommand(Request[RefreshResult]):
    """
    Command to fetch current prices for commodities into the cache

    Attributes:
        commodity_ids: Commodities to refresh
        force: Refetch even when the cached entry is still fresh
    """
    commodity_ids: tuple[CommodityId, ...] = field(default_factory=tuple)
    force: bool = False

    def validate(self):
        for commodity_id in self.commodity_ids:
            if not isinstance(commodity_id, str) or not commodity_id.strip():
                raise InvalidParamsError(f"Invalid commodity id: {commodity_id!r}")


class RefreshPricesHandler(RequestHandler[RefreshPricesCommand, RefreshResult]):
    """
    Handler for refreshing cached prices from the feed

    A failed fetch never removes what is cached: the previous (now stale)
    entry keeps being served and the failure is reported in the result.
    Refreshed entries are written through to the store when one is given.
    """

    def __init__(
        self,
        price_feed: IPriceFeed,
        price_cache: PriceCache,
        store: Optional[IPriceCacheStore] = None
    ):
        self._price_feed = price_feed
        self._price_cache = price_cache
        self._store = store

    async def handle(self, request: RefreshPricesCommand) -> RefreshResult:
        refreshed: List[CommodityId] = []
        skipped: List[CommodityId] = []
        failed: List[RefreshFailure] = []

        for commodity_id in dict.fromkeys(request.commodity_ids):
            if not request.force and self._price_cache.freshness(commodity_id) is Freshness.FRESH:
                logger.debug(f"Prices for {commodity_id} are fresh, skipping fetch")
                skipped.append(commodity_id)
                continue

            try:
                points = await asyncio.to_thread(self._price_feed.fetch_prices, commodity_id)
            except PriceFeedError as e:
                logger.warning(f"Failed to refresh prices for {commodity_id}: {e}")
                failed.append(RefreshFailure(commodity_id=commodity_id, reason=str(e)))
                continue

            entry = self._price_cache.upsert(commodity_id, points)
            if self._store is not None:
                self._store.save_entry(entry)
            refreshed.append(commodity_id)

        result = RefreshResult(
            refreshed=tuple(refreshed),
            skipped=tuple(skipped),
            failed=tuple(failed)
        )
        logger.info(
            f"Price refresh: {len(result.refreshed)} refreshed, "
            f"{len(result.skipped)} fresh, {len(result.failed)} failed"
        )
        return result
