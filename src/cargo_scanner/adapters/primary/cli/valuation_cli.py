import argparse
import asyncio
from typing import List, Mapping, Optional

from ....application.ranking.queries.rank_best_prices import RankBestPricesQuery
from ....application.valuation.queries.evaluate_cargo import EvaluateCargoQuery
from ....application.valuation.queries.score_profitability import ScoreProfitabilityQuery
from ....configuration.config import get_config
from ....configuration.container import get_mediator
from ....domain.ranking import BestPriceSummary, RankedLocation
from ....domain.shared.exceptions import DomainException, InvalidParamsError
from ....domain.valuation import ProfitBand, ProfitabilityParams, ProfitThresholds
from .market_cli import commodity_names, format_price, format_stock, held_commodity_ids, refresh_commodities

BAND_MARKERS = {
    ProfitBand.GREEN: "🟢",
    ProfitBand.YELLOW: "🟡",
    ProfitBand.RED: "🔴",
}

_PARAM_FLAGS = ("risk", "crew_hourly", "crew_size", "minutes")


def params_from_args(args: argparse.Namespace) -> Optional[ProfitabilityParams]:
    """
    Build params from --risk/--crew-hourly/--crew-size/--minutes.

    Returns None when none of the flags are given.

    Raises:
        InvalidParamsError: If only some flags are given or values are out of range
    """
    given = [name for name in _PARAM_FLAGS if getattr(args, name, None) is not None]
    if not given:
        return None
    if len(given) != len(_PARAM_FLAGS):
        missing = ", ".join(f"--{name.replace('_', '-')}" for name in _PARAM_FLAGS if name not in given)
        raise InvalidParamsError(f"Missing profitability flags: {missing}")

    return ProfitabilityParams(
        risk_pct=args.risk,
        crew_hourly=args.crew_hourly,
        crew_size=args.crew_size,
        time_minutes=args.minutes
    )


def thresholds_from_args(args: argparse.Namespace) -> Optional[ProfitThresholds]:
    if args.low is None and args.high is None:
        return None
    if args.low is None or args.high is None:
        raise InvalidParamsError("Both --low and --high are required to override thresholds")
    return ProfitThresholds(low=args.low, high=args.high)


def _prepare(args: argparse.Namespace) -> Optional[Mapping[str, str]]:
    """Refresh held commodities; returns commodity names, or None when nothing is held"""
    commodity_ids = held_commodity_ids()
    if not commodity_ids:
        print("No cargo held")
        return None

    if args.no_refresh:
        return {}

    refresh_commodities(commodity_ids, force=args.force)
    return commodity_names()


def evaluate_command(args: argparse.Namespace) -> int:
    """Handle evaluate command"""
    try:
        params = params_from_args(args)
        thresholds = thresholds_from_args(args)
        names = _prepare(args)
    except DomainException as e:
        print(f"❌ Error: {e}")
        return 1

    if names is None:
        return 0

    evaluation = asyncio.run(get_mediator().send_async(EvaluateCargoQuery()))

    print("Cargo valuation:")
    for item in evaluation.items:
        name = names.get(item.commodity_id, item.commodity_id)
        if item.partial:
            print(f"  {name:<28} {item.quantity_scu:>8g} SCU  no sell prices available (partial)")
            continue
        print(
            f"  {name:<28} {item.quantity_scu:>8g} SCU  EV {item.ev:>12,.0f} aUEC"
            f"  range {format_price(item.min_value)}-{format_price(item.max_value)}"
            f"  confidence {item.confidence:.0%}"
        )

    print(f"Total EV: {evaluation.total_ev:,.0f} aUEC (confidence {evaluation.confidence:.0%})")
    if evaluation.is_partial:
        print(f"⚠️  {evaluation.partial_count} commodity price set(s) missing; totals are partial")

    if thresholds is None and get_config().profit_thresholds is None:
        print("Profitability: thresholds not configured (cargo-scanner config thresholds LOW HIGH)")
        return 0

    query = ScoreProfitabilityQuery(total_ev=evaluation.total_ev, params=params, thresholds=thresholds)
    try:
        score = asyncio.run(get_mediator().send_async(query))
    except InvalidParamsError as e:
        print(f"Profitability: not scored ({e})")
        return 0

    print(f"Profitability: {BAND_MARKERS[score.band]} {score.band.value} {score.value:,.0f} aUEC")
    print(f"  {score.rationale}")
    return 0


def _summary_line(prefix: str, location: RankedLocation) -> str:
    line = f"{prefix} @ {format_price(location.price_per_scu)} aUEC"
    stock = format_stock(location.stock_scu)
    if stock != "—":
        line += f" [stock {stock}]"
    if location.notes:
        line += f" ({location.notes})"
    return line


def build_summary_lines(summary: BestPriceSummary, names: Mapping[str, str]) -> List[str]:
    """
    Shareable one-line-per-commodity summary.

    Each line reads "<commodity> → <location> @ <price> aUEC" with stock and
    penalty notes appended, followed by the overall best.
    """
    lines = []
    for ranking in summary.rankings:
        best = ranking.best
        if best is None:
            continue
        name = names.get(ranking.commodity_id, ranking.commodity_id)
        lines.append(_summary_line(f"{name} → {best.location_name}", best))

    if summary.best_overall is not None:
        lines.append(_summary_line(
            f"Overall best: {summary.best_overall.location.location_name}",
            summary.best_overall.location
        ))
    return lines


def best_price_command(args: argparse.Namespace) -> int:
    """Handle best-price command"""
    try:
        names = _prepare(args)
    except DomainException as e:
        print(f"❌ Error: {e}")
        return 1

    if names is None:
        return 0

    summary = asyncio.run(get_mediator().send_async(RankBestPricesQuery()))

    if not args.summary_only:
        for ranking in summary.rankings:
            print(f"{names.get(ranking.commodity_id, ranking.commodity_id)}:")
            if not ranking.locations:
                print("  no location is buying")
                continue
            for rank, location in enumerate(ranking.locations, start=1):
                notes = f"  ({location.notes})" if location.notes else ""
                print(
                    f"  {rank}. {location.location_name:<36} sell {format_price(location.price_per_scu):>8}"
                    f"  adjusted {location.adjusted_price:>8,.0f}"
                    f"  stock {format_stock(location.stock_scu)}{notes}"
                )
        print()

    lines = build_summary_lines(summary, names)
    if not lines:
        print("No sell location found for held cargo")
        return 0
    print("\n".join(lines))
    return 0


def _add_refresh_flags(parser: argparse.ArgumentParser):
    parser.add_argument("--no-refresh", action="store_true", help="Use cached prices only")
    parser.add_argument("--force", action="store_true", help="Refetch even fresh prices")


def setup_valuation_commands(subparsers):
    """Setup valuation and ranking CLI commands"""
    evaluate_parser = subparsers.add_parser("evaluate", help="Value held cargo and score profitability")
    _add_refresh_flags(evaluate_parser)
    evaluate_parser.add_argument("--risk", type=float, help="Risk share of EV (0-0.4)")
    evaluate_parser.add_argument("--crew-hourly", type=float, help="Crew pay per hour")
    evaluate_parser.add_argument("--crew-size", type=int, help="Crew members")
    evaluate_parser.add_argument("--minutes", type=float, help="Trip time in minutes")
    evaluate_parser.add_argument("--low", type=float, help="RED/YELLOW threshold override")
    evaluate_parser.add_argument("--high", type=float, help="YELLOW/GREEN threshold override")
    evaluate_parser.set_defaults(func=evaluate_command)

    best_parser = subparsers.add_parser("best-price", help="Rank where to sell held cargo")
    _add_refresh_flags(best_parser)
    best_parser.add_argument("--summary-only", action="store_true", help="Print shareable lines only")
    best_parser.set_defaults(func=best_price_command)
