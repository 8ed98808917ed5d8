from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ....adapters.secondary.cache.price_cache import PriceCache
from ....domain.shared.market import CommodityId, Freshness
from ....mediator import Request, RequestHandler


@dataclass(frozen=True)
class CacheStatusEntry:
    """Freshness of one commodity's cached prices"""
    commodity_id: CommodityId
    freshness: Freshness
    point_count: int
    fetched_at: Optional[datetime] = None
    age: Optional[timedelta] = None


@dataclass(frozen=True)
class GetCacheStatusQuery(Request[tuple[CacheStatusEntry, ...]]):
    """Query cache freshness; commodity_ids=None reports everything cached"""
    commodity_ids: Optional[tuple[CommodityId, ...]] = None


class GetCacheStatusHandler(RequestHandler[GetCacheStatusQuery, tuple[CacheStatusEntry, ...]]):
    """Handler reporting cache freshness from a single snapshot"""

    def __init__(self, price_cache: PriceCache):
        self._price_cache = price_cache

    async def handle(self, request: GetCacheStatusQuery) -> tuple[CacheStatusEntry, ...]:
        snapshot = self._price_cache.snapshot(request.commodity_ids)

        entries = []
        for commodity_id in sorted(snapshot.entries):
            cached = snapshot.get(commodity_id)
            entries.append(CacheStatusEntry(
                commodity_id=commodity_id,
                freshness=cached.freshness,
                point_count=len(cached.points),
                fetched_at=cached.fetched_at,
                age=snapshot.taken_at - cached.fetched_at if cached.fetched_at else None
            ))
        return tuple(entries)
