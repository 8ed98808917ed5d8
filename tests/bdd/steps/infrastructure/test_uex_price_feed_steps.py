"""BDD steps for the UEX price feed client"""
import json
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests
from pytest_bdd import scenarios, given, when, then, parsers

from cargo_scanner.adapters.secondary.api import uex_client
from cargo_scanner.adapters.secondary.api.uex_client import UexPriceFeed
from cargo_scanner.domain.shared.exceptions import PriceFeedError
from cargo_scanner.domain.shared.market import DemandLevel

scenarios('../../features/infrastructure/uex_price_feed.feature')


def _response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = json.dumps(payload)
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} error")
    return response


@pytest.fixture
def mock_session():
    session = Mock()
    session.headers = {}
    return session


def _build_client(context, session, clock, token=None):
    context['sleeps'] = []
    context['session'] = session
    context['client'] = UexPriceFeed(
        token=token,
        session=session,
        rate_limiter=Mock(),
        clock=clock,
        sleep=context['sleeps'].append
    )


@given('a price feed client with a mocked session')
def client(context, mock_session, clock):
    _build_client(context, mock_session, clock)


@given(parsers.parse('a price feed client with a mocked session and token "{token}"'))
def client_with_token(context, mock_session, clock, token):
    _build_client(context, mock_session, clock, token=token)


@given(parsers.parse('the feed responds with status "{status}" and data'))
def feed_responds(context, status, docstring):
    context['session'].get.return_value = _response(
        payload={"status": status, "data": json.loads(docstring)}
    )


@given(parsers.parse('the feed responds with status "{status}" and message "{message}"'))
def feed_responds_with_error(context, status, message):
    context['session'].get.return_value = _response(
        payload={"status": status, "message": message, "data": None}
    )


@given(parsers.parse('the row mapper rejects terminal "{terminal_id}"'))
def mapper_rejects(monkeypatch, terminal_id):
    original = uex_client.price_point_from_row

    def mapper(row, fetched_at):
        if str(row.get("id_terminal")) == terminal_id:
            raise ValueError(f"unusable row for terminal {terminal_id}")
        return original(row, fetched_at)

    monkeypatch.setattr(uex_client, "price_point_from_row", mapper)


@given('the feed responds with a body that is not JSON')
def feed_responds_with_garbage(context):
    response = _response(payload=None)
    response.text = "<html>maintenance</html>"
    response.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", response.text, 0)
    context['session'].get.return_value = response


@given(parsers.parse('the feed first responds with HTTP 429 and then with status "{status}" and data'))
def feed_rate_limits(context, status, docstring):
    context['session'].get.side_effect = [
        _response(status_code=429, payload={"status": "error"}),
        _response(payload={"status": status, "data": json.loads(docstring)}),
    ]


@given('the feed connection always fails')
def feed_fails(context):
    context['session'].get.side_effect = requests.exceptions.ConnectionError("connection refused")


@when(parsers.parse('I fetch prices for commodity "{commodity_id}"'))
def fetch_prices(context, commodity_id):
    points = context['client'].fetch_prices(commodity_id)
    context['points'] = {point.location_id: point for point in points}
    context['point_list'] = points


@when(parsers.parse('I try to fetch prices for commodity "{commodity_id}"'))
def try_fetch_prices(context, commodity_id):
    try:
        context['client'].fetch_prices(commodity_id)
        context['error'] = None
    except PriceFeedError as e:
        context['error'] = e


@when('I fetch the commodity list')
def fetch_commodities(context):
    context['commodities'] = context['client'].fetch_commodities()


@then(parsers.parse('the request should target "{endpoint}" with commodity "{commodity_id}"'))
def check_request(context, endpoint, commodity_id):
    args, kwargs = context['session'].get.call_args
    assert args[0].endswith(f"/{endpoint}")
    assert kwargs['params'] == {"id_commodity": commodity_id}


@then(parsers.parse('{count:d} price points should be returned'))
def check_count(context, count):
    assert len(context['point_list']) == count


@then(parsers.parse('point "{location_id}" should sell at {sell:g} and buy at {buy:g}'))
def check_prices(context, location_id, sell, buy):
    point = context['points'][location_id]
    assert point.sell_price_per_scu == pytest.approx(sell)
    assert point.buy_price_per_scu == pytest.approx(buy)


@then(parsers.parse('point "{location_id}" should sell at {sell:g}'))
def check_sell(context, location_id, sell):
    assert context['points'][location_id].sell_price_per_scu == pytest.approx(sell)


@then(parsers.parse('point "{location_id}" should have no sell price'))
def check_no_sell(context, location_id):
    point = context['points'][location_id]
    assert point.sell_price_per_scu is None
    assert not point.is_sell_available()


@then(parsers.parse('point "{location_id}" should have stock {stock:g}'))
def check_stock(context, location_id, stock):
    assert context['points'][location_id].stock_scu == pytest.approx(stock)


@then(parsers.parse('point "{location_id}" should have sell demand "{sell}" and buy demand "{buy}"'))
def check_demand(context, location_id, sell, buy):
    point = context['points'][location_id]
    assert point.sell_demand is DemandLevel[sell]
    assert point.buy_demand is DemandLevel[buy]


@then(parsers.parse('point "{location_id}" should have volatility {volatility:g}'))
def check_volatility(context, location_id, volatility):
    assert context['points'][location_id].volatility == pytest.approx(volatility)


@then(parsers.parse('point "{location_id}" should have no volatility'))
def check_no_volatility(context, location_id):
    assert context['points'][location_id].volatility is None


@then(parsers.parse('point "{location_id}" should be in system "{system}"'))
def check_system(context, location_id, system):
    assert context['points'][location_id].system == system


@then(parsers.parse('point "{location_id}" should be in an armistice zone'))
def check_armistice(context, location_id):
    assert context['points'][location_id].armistice


@then(parsers.parse('point "{location_id}" should be observed at epoch {epoch:d}'))
def check_observed_epoch(context, location_id, epoch):
    assert context['points'][location_id].observed_at == datetime.fromtimestamp(epoch, tz=timezone.utc)


@then(parsers.parse('point "{location_id}" should be observed at fetch time'))
def check_observed_fetch_time(context, location_id, clock):
    assert context['points'][location_id].observed_at == clock()


@then(parsers.parse('a price feed error mentioning "{text}" should be raised'))
def check_feed_error(context, text):
    assert isinstance(context['error'], PriceFeedError)
    assert text in str(context['error'])


@then(parsers.parse('the client should have backed off {seconds:g} seconds'))
def check_backoff(context, seconds):
    assert context['sleeps'] == [seconds]


@then(parsers.parse('the session should have been called {count:d} times'))
def check_call_count(context, count):
    assert context['session'].get.call_count == count


@then(parsers.parse('the commodity list should be "{expected}"'))
def check_commodities(context, expected):
    actual = ", ".join(f"{c.commodity_id}:{c.name}" for c in context['commodities'])
    assert actual == expected


@then(parsers.parse('commodity "{commodity_id}" should have category "{category}"'))
def check_category(context, commodity_id, category):
    commodity = next(c for c in context['commodities'] if c.commodity_id == commodity_id)
    assert commodity.category == category


@then(parsers.parse('the session should send the header "{name}" as "{value}"'))
def check_header(context, name, value):
    assert context['session'].headers[name] == value


@then(parsers.parse('point "{location_id}" should have buy stock {stock:g}'))
def check_buy_stock(context, location_id, stock):
    assert context['points'][location_id].buy_stock_scu == pytest.approx(stock)


@then(parsers.parse('point "{location_id}" should be available to buy from'))
def check_buy_available(context, location_id):
    assert context['points'][location_id].is_buy_available()
