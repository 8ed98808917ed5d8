import logging
import math
from dataclasses import dataclass, field

from ....adapters.secondary.cache.price_cache import PriceCache
from ....domain.routes import (
    RouteQuote,
    TradeRouteFilter,
    TradeRouteSort,
    find_routes,
    sort_routes,
)
from ....domain.shared.exceptions import InvalidParamsError
from ....domain.shared.market import CommodityId, Freshness
from ....mediator import Request, RequestHandler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FindTradeRoutesQuery(Request[tuple[RouteQuote, ...]]):
    """
    Query profitable buy/sell routes for commodities

    Attributes:
        commodity_ids: Commodities to search
        scu: Cargo hold size each route is priced for
        sort: Listing order
        route_filter: Constraints a route must meet
        limit: Maximum routes returned
    """
    commodity_ids: tuple[CommodityId, ...]
    scu: float
    sort: TradeRouteSort = TradeRouteSort.ROI
    route_filter: TradeRouteFilter = field(default_factory=TradeRouteFilter)
    limit: int = 10

    def validate(self):
        if not self.commodity_ids:
            raise InvalidParamsError("At least one commodity id is required")
        for commodity_id in self.commodity_ids:
            if not isinstance(commodity_id, str) or not commodity_id.strip():
                raise InvalidParamsError(f"Invalid commodity id: {commodity_id!r}")
        if isinstance(self.scu, bool) or not isinstance(self.scu, (int, float)) \
                or not math.isfinite(self.scu) or self.scu <= 0:
            raise InvalidParamsError(f"scu must be a positive number, got {self.scu!r}")
        if self.limit < 1:
            raise InvalidParamsError("limit must be at least 1")


class FindTradeRoutesHandler(RequestHandler[FindTradeRoutesQuery, tuple[RouteQuote, ...]]):
    """Handler for trade route search over a cache snapshot"""

    def __init__(self, price_cache: PriceCache):
        self._price_cache = price_cache

    async def handle(self, request: FindTradeRoutesQuery) -> tuple[RouteQuote, ...]:
        snapshot = self._price_cache.snapshot(request.commodity_ids)

        routes = []
        for commodity_id in snapshot.entries:
            if snapshot.freshness(commodity_id) is Freshness.MISSING:
                logger.warning(f"No cached prices for {commodity_id}, no routes searched")
                continue
            routes.extend(find_routes(commodity_id, snapshot.points(commodity_id)))

        matching = [route for route in routes if request.route_filter.matches(route, request.scu)]
        ranked = sort_routes(matching, request.sort, request.scu)[:request.limit]

        logger.info(f"Found {len(routes)} routes, {len(matching)} matching, returning {len(ranked)}")
        return tuple(route.for_quantity(request.scu) for route in ranked)
