"""
Integration tests for the routes CLI command.
"""
import argparse

import pytest

from cargo_scanner.adapters.primary.cli.main import main
from cargo_scanner.adapters.primary.cli.routes_cli import routes_command
from cargo_scanner.domain.shared.market import PricePoint


def _routes_args(**overrides):
    values = dict(
        commodity_ids=["LARA"], scu=100.0, sort="roi",
        max_invest=None, min_profit=None, min_roi=None,
        buy_system=None, sell_system=None,
        limit=10, no_refresh=False, force=False
    )
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture
def route_feed(price_feed, clock):
    """LARA bought at Port Olisar and Area18, sold at Area18 and Ruin Station"""
    observed = clock()
    points = [
        PricePoint(
            location_id="T0", observed_at=observed, buy_price_per_scu=20.0, buy_stock_scu=1000.0,
            location_name="Port Olisar", system="Stanton"
        ),
        PricePoint(
            location_id="T1", observed_at=observed, sell_price_per_scu=30.0, stock_scu=200.0,
            buy_price_per_scu=25.0, buy_stock_scu=300.0, location_name="Area18 TDD", system="Stanton"
        ),
        PricePoint(
            location_id="T2", observed_at=observed, sell_price_per_scu=40.0, stock_scu=50.0,
            location_name="Ruin Station", system="Pyro"
        ),
    ]
    price_feed.fetch_prices.side_effect = lambda commodity_id: list(points) if commodity_id == "LARA" else []
    return price_feed


class TestRoutesCommand:
    """Integration tests for routes"""

    def test_lists_routes_best_roi_first(self, capsys, route_feed):
        assert routes_command(_routes_args()) == 0

        output = capsys.readouterr().out
        assert "Trade routes for 100 SCU:" in output
        assert "1. Laranite: Port Olisar (Stanton) @ 20 → Ruin Station (Pyro) @ 40" in output
        assert "50 SCU (max 50)  invest 1,000  profit 1,000 aUEC  margin 20/SCU  ROI 100.0%" in output
        assert output.index("Port Olisar (Stanton) @ 20 → Ruin") < output.index("Area18 TDD (Stanton) @ 25")
        route_feed.fetch_prices.assert_called_once_with("LARA")

    def test_filters_and_limit(self, capsys, route_feed):
        assert routes_command(_routes_args(sell_system="Stanton", limit=1)) == 0

        output = capsys.readouterr().out
        assert "Port Olisar (Stanton) @ 20 → Area18 TDD (Stanton) @ 30" in output
        assert "Ruin Station" not in output

    def test_no_matching_route(self, capsys, route_feed):
        assert routes_command(_routes_args(min_roi=500.0)) == 0
        assert "No profitable route found" in capsys.readouterr().out

    def test_no_refresh_uses_cache_only(self, capsys, route_feed):
        assert routes_command(_routes_args(no_refresh=True)) == 0

        assert "No profitable route found" in capsys.readouterr().out
        route_feed.fetch_prices.assert_not_called()

    def test_invalid_scu_is_an_error(self, capsys, route_feed):
        assert routes_command(_routes_args(scu=0.0)) == 1

        assert "❌ Error: scu must be a positive number" in capsys.readouterr().out
        route_feed.fetch_prices.assert_not_called()

    def test_dispatch_through_main(self, capsys, route_feed):
        assert main(["routes", "LARA", "--scu", "100", "--sort", "margin"]) == 0
        assert "Trade routes for 100 SCU:" in capsys.readouterr().out

    def test_scu_is_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "LARA"])
        assert exc_info.value.code == 2
