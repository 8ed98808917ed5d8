import argparse
import asyncio
from typing import Dict, Iterable, Optional

from ....application.cargo.queries.list_cargo import ListCargoQuery
from ....application.market.commands.clear_price_cache import ClearPriceCacheCommand
from ....application.market.commands.refresh_commodities import RefreshCommoditiesCommand
from ....application.market.commands.refresh_prices import RefreshPricesCommand, RefreshResult
from ....application.market.queries.get_cache_status import GetCacheStatusQuery
from ....configuration.container import get_mediator, get_price_cache
from ....domain.shared.exceptions import DomainException, PriceFeedError
from ....domain.shared.market import Freshness


def format_price(value: Optional[float]) -> str:
    if value is None or value < 0:
        return "—"
    return f"{value:,.0f}"


def format_stock(value: Optional[float]) -> str:
    if value is None or value <= 0:
        return "—"
    return f"{value:,.0f} SCU"


def commodity_names() -> Dict[str, str]:
    """Commodity id -> name from the feed; empty when the feed is unreachable"""
    try:
        cached = asyncio.run(get_mediator().send_async(RefreshCommoditiesCommand()))
    except PriceFeedError:
        return {}
    return {commodity.commodity_id: commodity.name for commodity in cached.commodities}


def refresh_commodities(commodity_ids: Iterable[str], force: bool = False) -> RefreshResult:
    """Refresh prices and print a warning per failed commodity"""
    command = RefreshPricesCommand(commodity_ids=tuple(commodity_ids), force=force)
    result = asyncio.run(get_mediator().send_async(command))
    for failure in result.failed:
        print(f"⚠️  Warning: prices for {failure.commodity_id} not refreshed: {failure.reason}")
    return result


def held_commodity_ids() -> tuple[str, ...]:
    items = asyncio.run(get_mediator().send_async(ListCargoQuery()))
    return tuple(item.commodity_id for item in items)


def list_commodities_command(args: argparse.Namespace) -> int:
    """Handle commodities command"""
    try:
        cached = asyncio.run(get_mediator().send_async(RefreshCommoditiesCommand(force=args.force)))
    except PriceFeedError as e:
        print(f"❌ Error: {e}")
        return 1

    commodities = cached.commodities
    if args.search:
        needle = args.search.lower()
        commodities = tuple(
            commodity for commodity in commodities
            if needle in commodity.name.lower() or needle in (commodity.code or "").lower()
        )

    if not commodities:
        print("No commodities found")
        return 0

    if cached.freshness is Freshness.STALE:
        print("⚠️  Warning: commodity list is stale")
    for commodity in sorted(commodities, key=lambda c: c.name):
        code = f" [{commodity.code}]" if commodity.code else ""
        print(f"  {commodity.commodity_id:>6}  {commodity.name}{code} ({commodity.category})")
    return 0


def refresh_prices_command(args: argparse.Namespace) -> int:
    """Handle prices refresh command"""
    commodity_ids = args.commodity_ids or held_commodity_ids()
    if not commodity_ids:
        print("No commodities given and no cargo held")
        return 0

    try:
        result = refresh_commodities(commodity_ids, force=args.force)
    except DomainException as e:
        print(f"❌ Error: {e}")
        return 1

    cache = get_price_cache()
    for commodity_id in result.refreshed:
        cached = cache.get(commodity_id)
        sellable = sorted(
            (point for point in cached.points if point.is_sell_available()),
            key=lambda point: point.sell_price_per_scu,
            reverse=True
        )
        print(f"{commodity_id}: {len(cached.points)} locations, {len(sellable)} buying")
        for point in sellable[:args.limit]:
            print(
                f"  {point.display_name:<40} sell {format_price(point.sell_price_per_scu):>8} aUEC"
                f"  stock {format_stock(point.stock_scu)}"
            )

    print(f"✅ Refreshed {len(result.refreshed)}, failed {len(result.failed)}")
    return 1 if result.failed and not result.refreshed else 0


def cache_status_command(args: argparse.Namespace) -> int:
    """Handle cache status command"""
    commodity_ids = tuple(args.commodity_ids) or None
    if args.refresh:
        refresh_commodities(commodity_ids or held_commodity_ids())

    entries = asyncio.run(get_mediator().send_async(GetCacheStatusQuery(commodity_ids=commodity_ids)))
    if not entries:
        print("Price cache is empty")
        return 0

    for entry in entries:
        age = f"{int(entry.age.total_seconds() // 60)} min old" if entry.age is not None else "never fetched"
        print(f"  {entry.commodity_id:<20} {entry.freshness.value:<8} {entry.point_count:>4} points  {age}")
    return 0


def cache_clear_command(args: argparse.Namespace) -> int:
    """Handle cache clear command"""
    dropped = asyncio.run(get_mediator().send_async(ClearPriceCacheCommand(commodity_id=args.commodity_id)))
    print(f"✅ Dropped {dropped} cached price set(s)")
    return 0


def setup_market_commands(subparsers):
    """Setup market data CLI commands"""
    commodities_parser = subparsers.add_parser("commodities", help="List tradable commodities")
    commodities_parser.add_argument("--search", help="Filter by name or code")
    commodities_parser.add_argument("--force", action="store_true", help="Refetch even if cached")
    commodities_parser.set_defaults(func=list_commodities_command)

    prices_parser = subparsers.add_parser("prices", help="Commodity prices")
    prices_subparsers = prices_parser.add_subparsers(dest="prices_command")

    refresh_parser = prices_subparsers.add_parser("refresh", help="Fetch current prices")
    refresh_parser.add_argument("commodity_ids", nargs="*", help="Commodity ids (default: held cargo)")
    refresh_parser.add_argument("--force", action="store_true", help="Refetch fresh entries too")
    refresh_parser.add_argument("--limit", type=int, default=5, help="Locations shown per commodity")
    refresh_parser.set_defaults(func=refresh_prices_command)

    cache_parser = subparsers.add_parser("cache", help="Price cache")
    cache_subparsers = cache_parser.add_subparsers(dest="cache_command")

    status_parser = cache_subparsers.add_parser("status", help="Show cache freshness")
    status_parser.add_argument("commodity_ids", nargs="*")
    status_parser.add_argument("--refresh", action="store_true", help="Refresh before reporting")
    status_parser.set_defaults(func=cache_status_command)

    clear_parser = cache_subparsers.add_parser("clear", help="Drop cached prices")
    clear_parser.add_argument("commodity_id", nargs="?", default=None)
    clear_parser.set_defaults(func=cache_clear_command)
