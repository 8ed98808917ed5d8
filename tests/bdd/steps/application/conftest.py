"""Fixtures for application BDD tests"""
from unittest.mock import Mock

import pytest

from cargo_scanner.configuration import container
from cargo_scanner.domain.shared.exceptions import PriceFeedError
from cargo_scanner.ports.outbound.price_feed import IPriceFeed


class FeedScript:
    """Per-commodity responses for a mocked price feed"""

    def __init__(self):
        self.responses = {}

    def fetch_prices(self, commodity_id):
        response = self.responses.get(commodity_id)
        if response is None:
            raise PriceFeedError(f"no prices scripted for {commodity_id}")
        if isinstance(response, Exception):
            raise response
        return list(response)


@pytest.fixture
def feed_script():
    return FeedScript()


@pytest.fixture
def price_feed(feed_script, monkeypatch):
    """Mocked price feed installed in the container"""
    feed = Mock(spec=IPriceFeed)
    feed.fetch_prices.side_effect = feed_script.fetch_prices
    feed.fetch_commodities.return_value = []
    monkeypatch.setattr(container, "_price_feed", feed)
    return feed
