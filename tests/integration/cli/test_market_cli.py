"""
Integration tests for commodities, prices and cache CLI commands.
"""
import argparse

from cargo_scanner.adapters.primary.cli.market_cli import (
    cache_clear_command,
    cache_status_command,
    list_commodities_command,
    refresh_prices_command,
)
from cargo_scanner.adapters.secondary.cache import price_cache as price_cache_module
from cargo_scanner.configuration import container
from cargo_scanner.domain.shared.exceptions import PriceFeedError
from cargo_scanner.domain.shared.market import Freshness


class TestCommoditiesCommand:
    """Integration tests for commodities"""

    def test_lists_sorted_by_name(self, capsys, price_feed):
        assert list_commodities_command(argparse.Namespace(search=None, force=False)) == 0

        output = capsys.readouterr().out
        assert output.index("Gold") < output.index("Laranite")

    def test_search_filters(self, capsys, price_feed):
        assert list_commodities_command(argparse.Namespace(search="lara", force=False)) == 0

        output = capsys.readouterr().out
        assert "Laranite [LARA]" in output
        assert "Gold" not in output

    def test_feed_down_with_nothing_cached(self, capsys, price_feed):
        price_feed.fetch_commodities.side_effect = PriceFeedError("upstream down")

        assert list_commodities_command(argparse.Namespace(search=None, force=False)) == 1
        assert "❌ Error: upstream down" in capsys.readouterr().out


class TestPricesRefreshCommand:
    """Integration tests for prices refresh"""

    def test_refresh_named_commodity(self, capsys, price_feed, price_cache):
        args = argparse.Namespace(commodity_ids=["LARA"], force=False, limit=5)

        assert refresh_prices_command(args) == 0

        output = capsys.readouterr().out
        assert "LARA: 2 locations, 2 buying" in output
        assert output.index("Ruin Station") < output.index("Area18 TDD")
        assert "✅ Refreshed 1, failed 0" in output
        assert price_cache.freshness("LARA") is Freshness.FRESH

    def test_nothing_held_and_no_ids(self, capsys, price_feed):
        args = argparse.Namespace(commodity_ids=[], force=False, limit=5)

        assert refresh_prices_command(args) == 0
        assert "no cargo held" in capsys.readouterr().out
        price_feed.fetch_prices.assert_not_called()

    def test_all_failed_returns_error(self, capsys, price_feed):
        price_feed.fetch_prices.side_effect = PriceFeedError("timeout")
        args = argparse.Namespace(commodity_ids=["LARA"], force=False, limit=5)

        assert refresh_prices_command(args) == 1
        assert "prices for LARA not refreshed: timeout" in capsys.readouterr().out


class TestCacheCommands:
    """Integration tests for cache status/clear"""

    def test_empty_cache(self, capsys):
        assert cache_status_command(argparse.Namespace(commodity_ids=[], refresh=False)) == 0
        assert "Price cache is empty" in capsys.readouterr().out

    def test_status_after_refresh_then_clear(self, capsys, price_feed, clock, price_cache):
        assert cache_status_command(argparse.Namespace(commodity_ids=["LARA"], refresh=True)) == 0
        assert "FRESH" in capsys.readouterr().out

        cache_status_command(argparse.Namespace(commodity_ids=["QUAN"], refresh=False))
        assert "MISSING" in capsys.readouterr().out

        clock.advance(hours=2)
        cache_status_command(argparse.Namespace(commodity_ids=["LARA"], refresh=False))
        assert "STALE" in capsys.readouterr().out

        assert cache_clear_command(argparse.Namespace(commodity_id=None)) == 0
        assert "Dropped 1 cached price set(s)" in capsys.readouterr().out
        assert price_cache.freshness("LARA") is Freshness.MISSING

    def test_refreshed_prices_are_reported_after_restart(self, capsys, price_feed, clock, monkeypatch):
        assert cache_status_command(argparse.Namespace(commodity_ids=["LARA"], refresh=True)) == 0
        capsys.readouterr()

        # Next run: same database, empty process state
        monkeypatch.setattr(container, "_price_cache", None)
        monkeypatch.setattr(price_cache_module, "_utc_now", clock)
        clock.advance(minutes=10)

        assert cache_status_command(argparse.Namespace(commodity_ids=[], refresh=False)) == 0

        output = capsys.readouterr().out
        assert "LARA" in output
        assert "FRESH" in output
        assert "2 points  10 min old" in output
        price_feed.fetch_prices.assert_called_once_with("LARA")

    def test_clear_survives_restart(self, capsys, price_feed, clock, monkeypatch):
        cache_status_command(argparse.Namespace(commodity_ids=["LARA"], refresh=True))
        assert cache_clear_command(argparse.Namespace(commodity_id="LARA")) == 0
        capsys.readouterr()

        monkeypatch.setattr(container, "_price_cache", None)
        monkeypatch.setattr(price_cache_module, "_utc_now", clock)

        assert cache_status_command(argparse.Namespace(commodity_ids=[], refresh=False)) == 0
        assert "Price cache is empty" in capsys.readouterr().out
