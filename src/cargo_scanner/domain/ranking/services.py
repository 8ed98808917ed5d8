"""Ranking domain services - where to sell held cargo"""
from dataclasses import dataclass
from enum import Enum
from typing import Collection, Iterable, List, Optional

from ..shared.cargo import CargoItem
from ..shared.market import CommodityId, PricePoint, PriceSnapshot


class PenaltyFlag(Enum):
    """Heuristic penalties a location can carry"""
    CROSS_SYSTEM = "Cross-system"
    ARMISTICE = "Armistice"
    HOTSPOT = "Hotspot"


@dataclass(frozen=True)
class PenaltyConfig:
    """
    Flat per-SCU penalties applied before ranking

    Attributes:
        cross_system: Location is outside the home system
        armistice: Location is inside an armistice zone
        hotspot: Location is a known congestion/piracy hotspot
        home_system: System the trader operates from
        top_n: Number of locations returned per commodity
    """
    cross_system: float
    armistice: float
    hotspot: float
    home_system: str
    top_n: int = 3

    def __post_init__(self):
        for name in ("cross_system", "armistice", "hotspot"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} penalty cannot be negative")
        if self.top_n < 1:
            raise ValueError("top_n must be at least 1")


@dataclass(frozen=True)
class RankedLocation:
    """Sell location with its penalty-adjusted price"""
    location_id: str
    location_name: str
    price_per_scu: float
    penalty: float
    adjusted_price: float
    stock_scu: Optional[float] = None
    flags: tuple[PenaltyFlag, ...] = ()

    @property
    def notes(self) -> Optional[str]:
        if not self.flags:
            return None
        return ", ".join(flag.value for flag in self.flags)


@dataclass(frozen=True)
class CommodityRanking:
    """Top-N sell locations for one commodity, best first"""
    commodity_id: CommodityId
    locations: tuple[RankedLocation, ...]

    @property
    def best(self) -> Optional[RankedLocation]:
        return self.locations[0] if self.locations else None


@dataclass(frozen=True)
class BestOverall:
    """Single best sale across the cargo set, weighted by held quantity"""
    commodity_id: CommodityId
    quantity_scu: float
    location: RankedLocation
    weighted_value: float


@dataclass(frozen=True)
class BestPriceSummary:
    """Per-commodity rankings plus the overall recommendation"""
    rankings: tuple[CommodityRanking, ...]
    best_overall: Optional[BestOverall]


def _is_hotspot(point: PricePoint, known_hotspots: Collection[str]) -> bool:
    if point.location_id in known_hotspots:
        return True
    name = point.location_name.lower()
    return any(spot and spot.lower() in name for spot in known_hotspots)


def location_penalty(
    point: PricePoint,
    known_hotspots: Collection[str],
    config: PenaltyConfig
) -> tuple[float, tuple[PenaltyFlag, ...]]:
    """
    Sum the flat penalties that apply to a location.

    A point with no reported system counts as cross-system.

    Returns:
        (penalty, flags applied)
    """
    flags = []
    penalty = 0.0

    if point.system != config.home_system:
        flags.append(PenaltyFlag.CROSS_SYSTEM)
        penalty += config.cross_system
    if point.armistice:
        flags.append(PenaltyFlag.ARMISTICE)
        penalty += config.armistice
    if _is_hotspot(point, known_hotspots):
        flags.append(PenaltyFlag.HOTSPOT)
        penalty += config.hotspot

    return penalty, tuple(flags)


def _ranking_key(location: RankedLocation):
    # Unknown stock sorts after any known stock
    stock = location.stock_scu if location.stock_scu is not None else float('-inf')
    return (-location.adjusted_price, -stock, location.location_id)


def rank_locations(
    commodity_id: CommodityId,
    price_points: Iterable[PricePoint],
    known_hotspots: Collection[str],
    config: PenaltyConfig
) -> CommodityRanking:
    """
    Rank sell locations for one commodity.

    Order: adjusted price descending, then stock descending, then
    location_id ascending. Locations without a usable sell price are
    dropped before ranking.

    Args:
        commodity_id: Commodity being ranked
        price_points: Cached observations for the commodity
        known_hotspots: Hotspot location ids or name fragments
        config: Penalty configuration

    Returns:
        CommodityRanking with at most config.top_n locations
    """
    ranked: List[RankedLocation] = []
    for point in price_points:
        if not point.is_sell_available():
            continue

        penalty, flags = location_penalty(point, known_hotspots, config)
        ranked.append(RankedLocation(
            location_id=point.location_id,
            location_name=point.display_name,
            price_per_scu=point.sell_price_per_scu,
            penalty=penalty,
            adjusted_price=point.sell_price_per_scu - penalty,
            stock_scu=point.stock_scu,
            flags=flags
        ))

    ranked.sort(key=_ranking_key)
    return CommodityRanking(commodity_id=commodity_id, locations=tuple(ranked[:config.top_n]))


def rank_cargo(
    items: Iterable[CargoItem],
    snapshot: PriceSnapshot,
    known_hotspots: Collection[str],
    config: PenaltyConfig
) -> BestPriceSummary:
    """
    Rank sell locations for every held commodity and pick the best overall.

    The overall pick maximises adjusted_price x held quantity, so a large
    holding at a good price beats a token amount at a great one. Equal
    weighted values resolve to the lower commodity id.
    """
    rankings = []
    best: Optional[BestOverall] = None

    for item in items:
        ranking = rank_locations(
            item.commodity_id,
            snapshot.points(item.commodity_id),
            known_hotspots,
            config
        )
        rankings.append(ranking)

        top = ranking.best
        if top is None:
            continue

        weighted = top.adjusted_price * item.quantity_scu
        if best is None or weighted > best.weighted_value or (
            weighted == best.weighted_value and item.commodity_id < best.commodity_id
        ):
            best = BestOverall(
                commodity_id=item.commodity_id,
                quantity_scu=item.quantity_scu,
                location=top,
                weighted_value=weighted
            )

    return BestPriceSummary(rankings=tuple(rankings), best_overall=best)
