"""Routes domain - buy at one location, sell at another"""

from .services import (
    RouteQuote,
    TradeRoute,
    TradeRouteFilter,
    TradeRouteSort,
    find_routes,
    sort_routes
)

__all__ = [
    'RouteQuote',
    'TradeRoute',
    'TradeRouteFilter',
    'TradeRouteSort',
    'find_routes',
    'sort_routes',
]
