import argparse
import asyncio

from ....application.cargo.commands.adjust_cargo import AdjustCargoCommand
from ....application.cargo.commands.clear_cargo import ClearCargoCommand
from ....application.cargo.queries.list_cargo import ListCargoQuery
from ....configuration.container import get_mediator
from ....domain.shared.cargo import AdjustOutcome
from ....domain.shared.exceptions import DomainException


def _adjust(commodity_id: str, delta_scu: float) -> int:
    mediator = get_mediator()
    command = AdjustCargoCommand(commodity_id=commodity_id, delta_scu=delta_scu)

    try:
        adjustment = asyncio.run(mediator.send_async(command))
    except DomainException as e:
        print(f"❌ Error: {e}")
        return 1

    if adjustment.outcome is AdjustOutcome.REJECTED:
        print(f"❌ Rejected: {adjustment.reason}")
        return 1
    if adjustment.outcome is AdjustOutcome.REMOVED:
        print(f"✅ Removed {commodity_id} from cargo")
    elif adjustment.outcome is AdjustOutcome.UNCHANGED:
        print(f"No change: {commodity_id} is not held")
    else:
        print(f"✅ {commodity_id}: {adjustment.quantity_scu:g} SCU")
    return 0


def add_cargo_command(args: argparse.Namespace) -> int:
    """Handle cargo add command"""
    return _adjust(args.commodity_id, args.scu)


def remove_cargo_command(args: argparse.Namespace) -> int:
    """Handle cargo remove command"""
    return _adjust(args.commodity_id, -args.scu)


def list_cargo_command(args: argparse.Namespace) -> int:
    """Handle cargo list command"""
    items = asyncio.run(get_mediator().send_async(ListCargoQuery()))

    if not items:
        print("No cargo held")
        return 0

    total = sum(item.quantity_scu for item in items)
    print(f"Cargo ({len(items)} commodities, {total:g} SCU):")
    for item in items:
        print(f"  {item.commodity_id:<20} {item.quantity_scu:>10g} SCU")
    return 0


def clear_cargo_command(args: argparse.Namespace) -> int:
    """Handle cargo clear command"""
    removed = asyncio.run(get_mediator().send_async(ClearCargoCommand(commodity_id=args.commodity_id)))
    print(f"✅ Cleared {removed} cargo item(s)")
    return 0


def setup_cargo_commands(subparsers):
    """Setup cargo CLI commands"""
    cargo_parser = subparsers.add_parser("cargo", help="Held cargo management")
    cargo_subparsers = cargo_parser.add_subparsers(dest="cargo_command")

    add_parser = cargo_subparsers.add_parser("add", help="Add SCU of a commodity")
    add_parser.add_argument("commodity_id", help="Commodity id (see 'commodities')")
    add_parser.add_argument("scu", type=float, help="SCU to add")
    add_parser.set_defaults(func=add_cargo_command)

    remove_parser = cargo_subparsers.add_parser("remove", help="Remove SCU of a held commodity")
    remove_parser.add_argument("commodity_id")
    remove_parser.add_argument("scu", type=float, help="SCU to remove")
    remove_parser.set_defaults(func=remove_cargo_command)

    list_parser = cargo_subparsers.add_parser("list", help="List held cargo")
    list_parser.set_defaults(func=list_cargo_command)

    clear_parser = cargo_subparsers.add_parser("clear", help="Clear one commodity or all cargo")
    clear_parser.add_argument("commodity_id", nargs="?", default=None)
    clear_parser.set_defaults(func=clear_cargo_command)
