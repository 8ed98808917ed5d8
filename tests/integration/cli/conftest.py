"""
Shared fixtures for CLI integration tests.

Only the external price feed is mocked; the container, mediator, handlers
and repository run for real against the in-memory test database.
"""
from unittest.mock import Mock

import pytest

from cargo_scanner.configuration import container
from cargo_scanner.domain.shared.market import Commodity, DemandLevel, PricePoint
from cargo_scanner.ports.outbound.price_feed import IPriceFeed


@pytest.fixture
def cargo_repo():
    return container.get_cargo_repository()


@pytest.fixture
def price_feed(monkeypatch, clock, price_cache):
    """
    Mock feed with prices for LARA (Laranite) and GOLD (Gold).

    LARA sells at Area18 (65, home system) and at a Pyro terminal (70,
    cross-system). GOLD has no buying location.
    """
    observed = clock()
    prices = {
        "LARA": [
            PricePoint(
                location_id="T1", observed_at=observed, sell_price_per_scu=65.0,
                stock_scu=500.0, location_name="Area18 TDD", system="Stanton", volatility=0.0
            ),
            PricePoint(
                location_id="T2", observed_at=observed, sell_price_per_scu=70.0,
                location_name="Ruin Station", system="Pyro", volatility=0.0
            ),
        ],
        "GOLD": [
            PricePoint(
                location_id="T3", observed_at=observed, sell_price_per_scu=300.0,
                sell_demand=DemandLevel.UNAVAILABLE, location_name="Lorville", system="Stanton"
            ),
        ],
    }

    feed = Mock(spec=IPriceFeed)
    feed.fetch_prices.side_effect = lambda commodity_id: list(prices.get(commodity_id, []))
    feed.fetch_commodities.return_value = [
        Commodity(commodity_id="LARA", name="Laranite", category="Metal", code="LARA"),
        Commodity(commodity_id="GOLD", name="Gold", category="Metal", code="GOLD"),
    ]
    monkeypatch.setattr(container, "_price_feed", feed)
    return feed
