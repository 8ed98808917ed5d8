"""Market domain value objects"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

# Opaque commodity identifier as issued by the price feed
CommodityId = str


class DemandLevel(Enum):
    """Demand reported for one side (sell or buy) of a location"""
    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"
    UNAVAILABLE = "UNAVAILABLE"


class Freshness(Enum):
    """Freshness of a cache read"""
    FRESH = "FRESH"
    STALE = "STALE"
    MISSING = "MISSING"


@dataclass(frozen=True)
class Commodity:
    """Tradeable good as listed by the price feed"""
    commodity_id: CommodityId
    name: str
    category: str = "Unknown"
    code: Optional[str] = None


@dataclass(frozen=True)
class PricePoint:
    """
    Price point value object

    One observation of market conditions at a location for a commodity.
    Prices follow the trader's perspective:
    - sell_price_per_scu: What the trader RECEIVES when selling here
    - buy_price_per_scu: What the trader PAYS when buying here
    """
    location_id: str                          # Terminal identifier
    observed_at: datetime                     # When the feed recorded this price
    sell_price_per_scu: Optional[float] = None
    buy_price_per_scu: Optional[float] = None
    stock_scu: Optional[float] = None         # Capacity the location accepts
    buy_stock_scu: Optional[float] = None     # Stock the location sells to traders
    sell_demand: DemandLevel = DemandLevel.NORMAL
    buy_demand: DemandLevel = DemandLevel.NORMAL
    volatility: Optional[float] = None
    location_name: str = ""
    system: Optional[str] = None              # Star system, e.g. "Stanton"
    armistice: bool = False

    def __post_init__(self):
        if not self.location_id:
            raise ValueError("location_id cannot be empty")
        if self.volatility is not None and self.volatility < 0:
            raise ValueError("volatility cannot be negative")

    @property
    def display_name(self) -> str:
        return self.location_name or self.location_id

    def is_sell_available(self) -> bool:
        """Check if this location currently buys the commodity from traders"""
        price = self.sell_price_per_scu
        if price is None or not math.isfinite(price) or price <= 0:
            return False
        return self.sell_demand is not DemandLevel.UNAVAILABLE

    def is_buy_available(self) -> bool:
        """Check if traders can currently buy the commodity here"""
        price = self.buy_price_per_scu
        if price is None or not math.isfinite(price) or price <= 0:
            return False
        return self.buy_demand is not DemandLevel.UNAVAILABLE


@dataclass(frozen=True)
class CacheEntry:
    """Full point set for one commodity as of a single fetch"""
    commodity_id: CommodityId
    points: tuple[PricePoint, ...]
    fetched_at: datetime

    def age(self, now: datetime) -> timedelta:
        return now - self.fetched_at

    def is_stale(self, now: datetime, ttl: timedelta) -> bool:
        return self.age(now) > ttl


@dataclass(frozen=True)
class CachedPrices:
    """Result of reading one commodity from the price cache"""
    commodity_id: CommodityId
    points: tuple[PricePoint, ...]
    freshness: Freshness
    fetched_at: Optional[datetime] = None

    @property
    def is_missing(self) -> bool:
        return self.freshness is Freshness.MISSING


@dataclass(frozen=True)
class CachedCommodities:
    """Result of reading the commodities list from the price cache"""
    commodities: tuple[Commodity, ...]
    freshness: Freshness
    fetched_at: Optional[datetime] = None


@dataclass(frozen=True, eq=False)
class PriceSnapshot:
    """
    Immutable view of the price cache taken at one instant.

    Valuation and ranking read from a snapshot instead of the live cache, so a
    concurrent upsert can never change the data mid-evaluation.
    """
    taken_at: datetime
    entries: Mapping[CommodityId, CachedPrices] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'entries', MappingProxyType(dict(self.entries)))

    def get(self, commodity_id: CommodityId) -> CachedPrices:
        cached = self.entries.get(commodity_id)
        if cached is None:
            return CachedPrices(commodity_id=commodity_id, points=(), freshness=Freshness.MISSING)
        return cached

    def points(self, commodity_id: CommodityId) -> tuple[PricePoint, ...]:
        return self.get(commodity_id).points

    def freshness(self, commodity_id: CommodityId) -> Freshness:
        return self.get(commodity_id).freshness
