"""BDD steps for profitability scoring"""
import pytest
from pytest_bdd import scenarios, given, when, then, parsers

from cargo_scanner.domain.shared.exceptions import InvalidParamsError
from cargo_scanner.domain.valuation import (
    ProfitBand,
    ProfitabilityParams,
    ProfitThresholds,
    score_profitability,
)

scenarios('../../features/domain/profitability_scoring.feature')

PARAMS_STEP = (
    'profitability params with risk {risk}, crew pay {pay} per hour, '
    'crew size {size} and {minutes} minutes'
)


def _number(text: str):
    value = float(text)
    return int(value) if value.is_integer() and "." not in text else value


@given(parsers.parse(PARAMS_STEP))
def params(context, risk, pay, size, minutes):
    context['params'] = ProfitabilityParams(
        risk_pct=float(risk),
        crew_hourly=float(pay),
        crew_size=int(size),
        time_minutes=float(minutes)
    )


@given(parsers.parse('profit thresholds {low:g} and {high:g}'))
def thresholds(context, low, high):
    context['thresholds'] = ProfitThresholds(low=low, high=high)


@when(parsers.parse('I score a total EV of {ev:g}'))
def score(context, ev):
    context['score'] = score_profitability(ev, context['params'], context['thresholds'])


@when(parsers.parse('I score a total EV of {ev:g} without params'))
def score_without_params(context, ev):
    try:
        score_profitability(ev, None, context['thresholds'])
        context['error'] = None
    except InvalidParamsError as e:
        context['error'] = e


@when(parsers.parse('I build ' + PARAMS_STEP))
def build_params(context, risk, pay, size, minutes):
    try:
        ProfitabilityParams(
            risk_pct=float(risk),
            crew_hourly=float(pay),
            crew_size=_number(size),
            time_minutes=float(minutes)
        )
        context['error'] = None
    except InvalidParamsError as e:
        context['error'] = e


@when(parsers.parse('I build profit thresholds {low:g} and {high:g}'))
def build_thresholds(context, low, high):
    try:
        ProfitThresholds(low=low, high=high)
        context['error'] = None
    except InvalidParamsError as e:
        context['error'] = e


@then(parsers.parse('the profitability value should be {value}'))
def check_value(context, value):
    assert context['score'].value == pytest.approx(float(value))


@then(parsers.parse('the risk cost should be {value:g}'))
def check_risk_cost(context, value):
    assert context['score'].risk_cost == pytest.approx(value)


@then(parsers.parse('the crew cost should be {value:g}'))
def check_crew_cost(context, value):
    assert context['score'].crew_cost == pytest.approx(value)


@then(parsers.parse('the band should be "{band}"'))
def check_band(context, band):
    assert context['score'].band is ProfitBand[band]


@then(parsers.parse('the rationale should be "{rationale}"'))
def check_rationale(context, rationale):
    assert context['score'].rationale == rationale


@then('an invalid params error should be raised')
def check_invalid_params(context):
    assert isinstance(context['error'], InvalidParamsError)
