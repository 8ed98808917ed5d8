import argparse
import asyncio

from ....application.routes.queries.find_trade_routes import FindTradeRoutesQuery
from ....configuration.container import get_mediator
from ....domain.routes import TradeRouteFilter, TradeRouteSort
from ....domain.shared.exceptions import DomainException
from .market_cli import commodity_names, format_price, refresh_commodities

SORT_CHOICES = {sort.value: sort for sort in TradeRouteSort}


def routes_command(args: argparse.Namespace) -> int:
    """Handle routes command"""
    commodity_ids = tuple(args.commodity_ids)
    query = FindTradeRoutesQuery(
        commodity_ids=commodity_ids,
        scu=args.scu,
        sort=SORT_CHOICES[args.sort],
        route_filter=TradeRouteFilter(
            max_invest=args.max_invest,
            min_profit=args.min_profit,
            min_roi_percent=args.min_roi,
            buy_system=args.buy_system,
            sell_system=args.sell_system
        ),
        limit=args.limit
    )

    try:
        query.validate()
        names = {}
        if not args.no_refresh:
            refresh_commodities(commodity_ids, force=args.force)
            names = commodity_names()
        quotes = asyncio.run(get_mediator().send_async(query))
    except DomainException as e:
        print(f"❌ Error: {e}")
        return 1

    if not quotes:
        print("No profitable route found")
        return 0

    print(f"Trade routes for {args.scu:g} SCU:")
    for rank, quote in enumerate(quotes, start=1):
        route = quote.route
        print(
            f"  {rank}. {names.get(route.commodity_id, route.commodity_id)}: "
            f"{route.buy_location_name} ({route.buy_system or '?'}) @ {format_price(route.buy_price)}"
            f" → {route.sell_location_name} ({route.sell_system or '?'}) @ {format_price(route.sell_price)}"
        )
        print(
            f"     {quote.quantity} SCU (max {quote.max_tradeable})"
            f"  invest {quote.invest:,.0f}  profit {quote.profit_total:,.0f} aUEC"
            f"  margin {route.profit_per_scu:,.0f}/SCU  ROI {route.roi_percent:.1f}%"
        )
    return 0


def setup_routes_commands(subparsers):
    """Setup trade route CLI commands"""
    routes_parser = subparsers.add_parser("routes", help="Find buy-here sell-there trade routes")
    routes_parser.add_argument("commodity_ids", nargs="+", help="Commodity ids to search")
    routes_parser.add_argument("--scu", type=float, required=True, help="Cargo hold size in SCU")
    routes_parser.add_argument("--sort", choices=sorted(SORT_CHOICES), default="roi", help="Listing order")
    routes_parser.add_argument("--max-invest", type=float, help="Maximum purchase cost")
    routes_parser.add_argument("--min-profit", type=float, help="Minimum total profit")
    routes_parser.add_argument("--min-roi", type=float, help="Minimum ROI in percent")
    routes_parser.add_argument("--buy-system", help="Only buy in this system")
    routes_parser.add_argument("--sell-system", help="Only sell in this system")
    routes_parser.add_argument("--limit", type=int, default=10, help="Routes shown")
    routes_parser.add_argument("--no-refresh", action="store_true", help="Use cached prices only")
    routes_parser.add_argument("--force", action="store_true", help="Refetch even fresh prices")
    routes_parser.set_defaults(func=routes_command)
