"""BDD steps for trade route search"""
import pytest
from pytest_bdd import scenarios, given, when, then, parsers

from cargo_scanner.domain.routes import TradeRouteFilter, TradeRouteSort, find_routes, sort_routes

scenarios('../../features/domain/trade_routes.feature')


def _label(route):
    return f"{route.buy_location_id}->{route.sell_location_id}"


def _route(context, label):
    routes = {_label(route): route for route in context['routes']}
    return routes[label]


@given(parsers.parse('market points for "{commodity_id}"'))
def market_points(context, datatable, points_from_table, commodity_id):
    context.setdefault('points', {})[commodity_id] = points_from_table(datatable)


@when(parsers.parse('I find routes for "{commodity_id}"'))
def find_for(context, commodity_id):
    context['routes'] = find_routes(commodity_id, context['points'][commodity_id])


@when(parsers.parse('I sort the routes by "{sort}" for {scu:g} SCU'))
def sort_by(context, sort, scu):
    context['routes'] = sort_routes(context['routes'], TradeRouteSort(sort), scu)


@when(parsers.parse('I keep routes for {scu:g} SCU where {criterion} is "{value}"'))
def keep_matching(context, scu, criterion, value):
    if criterion.endswith("_system"):
        route_filter = TradeRouteFilter(**{criterion: value})
    else:
        route_filter = TradeRouteFilter(**{criterion: float(value)})
    context['routes'] = [route for route in context['routes'] if route_filter.matches(route, scu)]


@then(parsers.parse('the routes should be "{expected}"'))
def check_routes(context, expected):
    assert ", ".join(_label(route) for route in context['routes']) == expected


@then('no routes should be found')
def check_no_routes(context):
    assert context['routes'] == []


@then(parsers.parse('route "{label}" should earn {profit:g} per SCU at {roi:g} percent ROI'))
def check_margin(context, label, profit, roi):
    route = _route(context, label)
    assert route.profit_per_scu == pytest.approx(profit)
    assert route.roi_percent == pytest.approx(roi)


@then(parsers.parse(
    'route "{label}" for {scu:g} SCU should trade {quantity:d} of at most {max_tradeable:d} SCU '
    'investing {invest:g} for {profit:g} profit'
))
def check_quote(context, label, scu, quantity, max_tradeable, invest, profit):
    quote = _route(context, label).for_quantity(scu)
    assert quote.quantity == quantity
    assert quote.max_tradeable == max_tradeable
    assert quote.invest == pytest.approx(invest)
    assert quote.profit_total == pytest.approx(profit)
