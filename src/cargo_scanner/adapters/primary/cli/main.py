#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path
from dotenv import load_dotenv

from .cargo_cli import setup_cargo_commands
from .config_cli import setup_config_commands
from .market_cli import setup_market_commands
from .routes_cli import setup_routes_commands
from .valuation_cli import setup_valuation_commands


def _load_env():
    # .env in the working directory wins over one in the project root
    for dotenv_path in (Path.cwd() / '.env', Path(__file__).parents[5] / '.env'):
        if dotenv_path.exists():
            load_dotenv(dotenv_path)
            return


def main(argv=None):
    _load_env()

    parser = argparse.ArgumentParser(description="Cargo value scanner")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    setup_cargo_commands(subparsers)
    setup_market_commands(subparsers)
    setup_valuation_commands(subparsers)
    setup_routes_commands(subparsers)
    setup_config_commands(subparsers)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    if hasattr(args, "func"):
        return args.func(args)

    parser.print_help()
    return 1


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
