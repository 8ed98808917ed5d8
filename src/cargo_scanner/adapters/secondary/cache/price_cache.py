"""In-memory TTL cache of commodity price observations.

The cache is the only mutable state in the valuation pipeline. It has one
writer (the refresh command) and any number of readers. Writers build a new
immutable CacheEntry, copy the entry map, and swap the reference under a
lock; readers dereference the current map without locking, so a read never
sees a half-written point set.
"""
import logging
import threading
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, Mapping, Optional

from ....domain.shared.market import (
    CacheEntry,
    CachedCommodities,
    CachedPrices,
    Commodity,
    CommodityId,
    Freshness,
    PricePoint,
    PriceSnapshot,
)

logger = logging.getLogger(__name__)


class CacheResource(Enum):
    """Resource kinds with their own TTL"""
    COMMODITIES = "commodities"
    PRICES = "prices"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PriceCache:
    """
    TTL cache of price observations per commodity

    Invariants:
    - get() never blocks on a writer and never raises
    - Staleness (now - fetched_at > ttl) is computed at read time only
    - Stale entries are kept and served until replaced or cleared
    """

    def __init__(
        self,
        ttls: Mapping[CacheResource, timedelta],
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize cache.

        Args:
            ttls: TTL per resource kind (all kinds required)
            clock: Callable returning the current aware datetime (default: UTC now)
        """
        missing = [resource.value for resource in CacheResource if resource not in ttls]
        if missing:
            raise ValueError(f"Missing TTL for: {', '.join(missing)}")

        self._ttls = dict(ttls)
        self._clock = clock or _utc_now
        self._entries: Dict[CommodityId, CacheEntry] = {}
        self._commodities: Optional[tuple[tuple[Commodity, ...], datetime]] = None
        self._write_lock = threading.Lock()

    def ttl(self, resource: CacheResource) -> timedelta:
        return self._ttls[resource]

    def now(self) -> datetime:
        return self._clock()

    # ----- Price points -----

    def upsert(
        self,
        commodity_id: CommodityId,
        points: Iterable[PricePoint],
        fetched_at: Optional[datetime] = None
    ) -> CacheEntry:
        """
        Replace the full point set for a commodity.

        Args:
            commodity_id: Commodity identifier
            points: New observations (supersede all previous ones)
            fetched_at: Fetch instant (default: now)

        Returns:
            The stored CacheEntry
        """
        entry = CacheEntry(
            commodity_id=commodity_id,
            points=tuple(points),
            fetched_at=fetched_at or self._clock()
        )

        with self._write_lock:
            entries = dict(self._entries)
            entries[commodity_id] = entry
            self._entries = entries

        logger.info(f"Cached {len(entry.points)} price points for {commodity_id}")
        return entry

    def restore(self, entries: Iterable[CacheEntry]) -> int:
        """
        Load previously persisted entries, keeping their original fetched_at.

        Entries already in the cache win over restored ones.

        Returns:
            Number of entries restored
        """
        with self._write_lock:
            merged = {entry.commodity_id: entry for entry in entries}
            restored = len(merged.keys() - self._entries.keys())
            merged.update(self._entries)
            self._entries = merged

        logger.debug(f"Restored {restored} price cache entries")
        return restored

    def get(self, commodity_id: CommodityId) -> CachedPrices:
        """
        Read cached prices for a commodity.

        Returns:
            CachedPrices with FRESH/STALE freshness, or MISSING with no points
        """
        return self._read(self._entries, commodity_id, self._clock())

    def freshness(self, commodity_id: CommodityId) -> Freshness:
        return self.get(commodity_id).freshness

    def snapshot(self, commodity_ids: Optional[Iterable[CommodityId]] = None) -> PriceSnapshot:
        """
        Take an immutable snapshot for an evaluation pass.

        Args:
            commodity_ids: Commodities to include (default: everything cached)

        Returns:
            PriceSnapshot with freshness evaluated at a single instant
        """
        entries = self._entries
        now = self._clock()
        ids = list(entries) if commodity_ids is None else list(dict.fromkeys(commodity_ids))

        return PriceSnapshot(
            taken_at=now,
            entries={commodity_id: self._read(entries, commodity_id, now) for commodity_id in ids}
        )

    def clear(self, commodity_id: Optional[CommodityId] = None) -> int:
        """
        Drop one commodity's entry, or every entry (including the commodities list).

        Returns:
            Number of price entries dropped
        """
        with self._write_lock:
            if commodity_id is None:
                dropped = len(self._entries)
                self._entries = {}
                self._commodities = None
            else:
                entries = dict(self._entries)
                dropped = 1 if entries.pop(commodity_id, None) is not None else 0
                self._entries = entries

        logger.info(
            f"Cleared {dropped} price cache entr{'y' if dropped == 1 else 'ies'}"
            + (f" for {commodity_id}" if commodity_id else "")
        )
        return dropped

    def _read(
        self,
        entries: Mapping[CommodityId, CacheEntry],
        commodity_id: CommodityId,
        now: datetime
    ) -> CachedPrices:
        entry = entries.get(commodity_id)
        if entry is None:
            return CachedPrices(commodity_id=commodity_id, points=(), freshness=Freshness.MISSING)

        stale = entry.is_stale(now, self._ttls[CacheResource.PRICES])
        if stale:
            logger.debug(f"Serving stale prices for {commodity_id} (age {entry.age(now)})")

        return CachedPrices(
            commodity_id=commodity_id,
            points=entry.points,
            freshness=Freshness.STALE if stale else Freshness.FRESH,
            fetched_at=entry.fetched_at
        )

    # ----- Commodities list -----

    def upsert_commodities(
        self,
        commodities: Iterable[Commodity],
        fetched_at: Optional[datetime] = None
    ) -> None:
        """Replace the cached commodities list"""
        stored = (tuple(commodities), fetched_at or self._clock())
        with self._write_lock:
            self._commodities = stored
        logger.info(f"Cached {len(stored[0])} commodities")

    def get_commodities(self) -> CachedCommodities:
        """Read the cached commodities list"""
        stored = self._commodities
        if stored is None:
            return CachedCommodities(commodities=(), freshness=Freshness.MISSING)

        commodities, fetched_at = stored
        stale = self._clock() - fetched_at > self._ttls[CacheResource.COMMODITIES]
        return CachedCommodities(
            commodities=commodities,
            freshness=Freshness.STALE if stale else Freshness.FRESH,
            fetched_at=fetched_at
        )
