"""Trade route domain services - profitable buy/sell location pairs"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from ..shared.market import CommodityId, PricePoint


@dataclass(frozen=True)
class TradeRoute:
    """
    Buy a commodity at one location and sell it at another

    Prices follow the trader's perspective: buy_price is paid at the buy
    location, sell_price is received at the sell location. buy_stock is what
    the buy location has on offer and sell_demand what the sell location
    accepts.
    """
    commodity_id: CommodityId
    buy_location_id: str
    buy_location_name: str
    buy_system: Optional[str]
    buy_price: float
    buy_stock: float
    sell_location_id: str
    sell_location_name: str
    sell_system: Optional[str]
    sell_price: float
    sell_demand: float

    @property
    def profit_per_scu(self) -> float:
        return self.sell_price - self.buy_price

    @property
    def roi_percent(self) -> float:
        return self.profit_per_scu / self.buy_price * 100.0

    def for_quantity(self, scu: float) -> 'RouteQuote':
        """
        Price the route for a cargo hold of scu.

        The traded quantity is capped by both the buy stock and the sell
        demand, in whole SCU.
        """
        max_tradeable = int(min(self.buy_stock, self.sell_demand))
        quantity = max(0, min(int(scu), max_tradeable))
        invest = self.buy_price * quantity

        return RouteQuote(
            route=self,
            quantity=quantity,
            max_tradeable=max_tradeable,
            invest=invest,
            profit_total=self.sell_price * quantity - invest
        )


@dataclass(frozen=True)
class RouteQuote:
    """Trade route priced for a concrete quantity"""
    route: TradeRoute
    quantity: int
    max_tradeable: int
    invest: float
    profit_total: float


class TradeRouteSort(Enum):
    """Orderings for route listings (all descending)"""
    ROI = "roi"
    PROFIT_TOTAL = "profit"
    PROFIT_PER_SCU = "margin"
    CARGO_VALUE = "value"


@dataclass(frozen=True)
class TradeRouteFilter:
    """
    Optional constraints on routes; unset fields do not filter

    Attributes:
        max_invest: Upper bound on the purchase cost for the quantity
        min_profit: Lower bound on total profit for the quantity
        min_roi_percent: Lower bound on return per SCU, in percent
        buy_system: Buy location must be in this system
        sell_system: Sell location must be in this system
    """
    max_invest: Optional[float] = None
    min_profit: Optional[float] = None
    min_roi_percent: Optional[float] = None
    buy_system: Optional[str] = None
    sell_system: Optional[str] = None

    def matches(self, route: TradeRoute, scu: float) -> bool:
        quote = route.for_quantity(scu)

        if self.max_invest is not None and quote.invest > self.max_invest:
            return False
        if self.min_profit is not None and quote.profit_total < self.min_profit:
            return False
        if self.min_roi_percent is not None and route.roi_percent < self.min_roi_percent:
            return False
        if self.buy_system is not None and not _same_system(route.buy_system, self.buy_system):
            return False
        if self.sell_system is not None and not _same_system(route.sell_system, self.sell_system):
            return False
        return True


def _same_system(actual: Optional[str], wanted: str) -> bool:
    return actual is not None and actual.casefold() == wanted.casefold()


def find_routes(commodity_id: CommodityId, points: Iterable[PricePoint]) -> List[TradeRoute]:
    """
    Pair every location selling the commodity with every location buying it.

    A buy side needs a usable buy price and stock on offer; a sell side needs
    a usable sell price and room to accept cargo. Pairs at the same location
    and pairs that would not make a profit are skipped.

    Args:
        commodity_id: Commodity the points belong to
        points: Cached observations for the commodity

    Returns:
        Profitable routes in no particular order
    """
    points = list(points)
    buy_sides = [
        point for point in points
        if point.is_buy_available() and (point.buy_stock_scu or 0) > 0
    ]
    sell_sides = [
        point for point in points
        if point.is_sell_available() and (point.stock_scu or 0) > 0
    ]

    routes = []
    for buy in buy_sides:
        for sell in sell_sides:
            if buy.location_id == sell.location_id:
                continue
            if sell.sell_price_per_scu <= buy.buy_price_per_scu:
                continue

            routes.append(TradeRoute(
                commodity_id=commodity_id,
                buy_location_id=buy.location_id,
                buy_location_name=buy.display_name,
                buy_system=buy.system,
                buy_price=buy.buy_price_per_scu,
                buy_stock=buy.buy_stock_scu,
                sell_location_id=sell.location_id,
                sell_location_name=sell.display_name,
                sell_system=sell.system,
                sell_price=sell.sell_price_per_scu,
                sell_demand=sell.stock_scu
            ))
    return routes


def sort_routes(routes: Iterable[TradeRoute], sort: TradeRouteSort, scu: float) -> List[TradeRoute]:
    """
    Order routes best first.

    Ties are broken by commodity, buy location and sell location id so the
    listing is stable between runs.
    """
    def metric(route: TradeRoute) -> float:
        if sort is TradeRouteSort.ROI:
            return route.roi_percent
        if sort is TradeRouteSort.PROFIT_TOTAL:
            return route.for_quantity(scu).profit_total
        if sort is TradeRouteSort.PROFIT_PER_SCU:
            return route.profit_per_scu
        return route.buy_price

    return sorted(
        routes,
        key=lambda route: (-metric(route), route.commodity_id, route.buy_location_id, route.sell_location_id)
    )
