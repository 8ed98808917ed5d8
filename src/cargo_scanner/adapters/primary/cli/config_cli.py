import argparse
import asyncio

from ....application.valuation.commands.save_profitability_params import SaveProfitabilityParamsCommand
from ....application.valuation.queries.get_profitability_params import GetProfitabilityParamsQuery
from ....configuration.config import get_config
from ....configuration.container import get_mediator
from ....configuration.settings import settings
from ....domain.shared.exceptions import DomainException
from ....domain.valuation import ProfitabilityParams, ProfitThresholds


def set_thresholds_command(args: argparse.Namespace) -> int:
    """Handle config thresholds command"""
    config = get_config()

    if args.clear:
        config.clear_profit_thresholds()
        print("✅ Cleared profit thresholds")
        return 0

    if args.low is None or args.high is None:
        thresholds = config.profit_thresholds
        if thresholds is None:
            print("Profit thresholds not set")
        else:
            print(f"Profit thresholds: RED < {thresholds.low:,g} <= YELLOW < {thresholds.high:,g} <= GREEN")
        return 0

    try:
        thresholds = ProfitThresholds(low=args.low, high=args.high)
    except DomainException as e:
        print(f"❌ Error: {e}")
        return 1

    config.set_profit_thresholds(thresholds)
    print(f"✅ Profit thresholds set to {thresholds.low:,g} / {thresholds.high:,g}")
    return 0


def set_params_command(args: argparse.Namespace) -> int:
    """Handle config params command"""
    try:
        params = ProfitabilityParams(
            risk_pct=args.risk,
            crew_hourly=args.crew_hourly,
            crew_size=args.crew_size,
            time_minutes=args.minutes
        )
        asyncio.run(get_mediator().send_async(SaveProfitabilityParamsCommand(params=params)))
    except DomainException as e:
        print(f"❌ Error: {e}")
        return 1

    print(
        f"✅ Saved profitability params: risk {params.risk_pct:.0%}, "
        f"crew {params.crew_size} x {params.crew_hourly:,g}/h, {params.time_minutes:g} min"
    )
    return 0


def show_config_command(args: argparse.Namespace) -> int:
    """Handle config show command"""
    config = get_config()
    params = asyncio.run(get_mediator().send_async(GetProfitabilityParamsQuery()))
    thresholds = config.profit_thresholds

    print("Configuration:")
    print(f"  Config file: {config.config_path}")
    print(f"  Database: {settings.db_path}")
    print(f"  Home system: {settings.home_system}")
    print(f"  Known hotspots: {', '.join(settings.known_hotspots)}")
    print(
        f"  Penalties: cross-system {settings.cross_system_penalty:g}, "
        f"armistice {settings.armistice_penalty:g}, hotspot {settings.hotspot_penalty:g}"
    )
    print(f"  Price TTL: {int(settings.prices_ttl.total_seconds() // 60)} min")
    if thresholds is None:
        print("  Profit thresholds: not set")
    else:
        print(f"  Profit thresholds: {thresholds.low:,g} / {thresholds.high:,g}")
    if params is None:
        print("  Profitability params: not set")
    else:
        print(
            f"  Profitability params: risk {params.risk_pct:.0%}, crew {params.crew_size} x "
            f"{params.crew_hourly:,g}/h, {params.time_minutes:g} min"
        )
    return 0


def setup_config_commands(subparsers):
    """Setup config CLI commands"""
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    thresholds_parser = config_subparsers.add_parser("thresholds", help="Show or set profit band thresholds")
    thresholds_parser.add_argument("low", type=float, nargs="?", help="RED/YELLOW cut-off")
    thresholds_parser.add_argument("high", type=float, nargs="?", help="YELLOW/GREEN cut-off")
    thresholds_parser.add_argument("--clear", action="store_true", help="Remove stored thresholds")
    thresholds_parser.set_defaults(func=set_thresholds_command)

    params_parser = config_subparsers.add_parser("params", help="Save profitability params")
    params_parser.add_argument("--risk", type=float, required=True, help="Risk share of EV (0-0.4)")
    params_parser.add_argument("--crew-hourly", type=float, required=True)
    params_parser.add_argument("--crew-size", type=int, required=True)
    params_parser.add_argument("--minutes", type=float, required=True)
    params_parser.set_defaults(func=set_params_command)

    show_parser = config_subparsers.add_parser("show", help="Show current configuration")
    show_parser.set_defaults(func=show_config_command)
