"""BDD steps for the token bucket rate limiter"""
from unittest.mock import patch

import pytest
from pytest_bdd import scenarios, given, when, then, parsers

from cargo_scanner.adapters.secondary.api.rate_limiter import RateLimiter

scenarios('../../features/infrastructure/rate_limiter.feature')


class FakeTime:
    def __init__(self):
        self.now = 1000.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)


@pytest.fixture
def fake_time():
    fake = FakeTime()
    with patch('cargo_scanner.adapters.secondary.api.rate_limiter.time', fake):
        yield fake


@given(parsers.parse('a rate limiter allowing {max_requests:d} requests per second'))
def limiter(context, fake_time, max_requests):
    context['limiter'] = RateLimiter(max_requests=max_requests, time_window=1.0)


@when(parsers.parse('I acquire {count:d} tokens without time passing'))
def acquire(context, count):
    for _ in range(count):
        context['limiter'].acquire()


@when(parsers.parse('{seconds:d} second passes on the monotonic clock'))
def advance(fake_time, seconds):
    fake_time.now += seconds


@when(parsers.parse('I create a rate limiter allowing {max_requests:d} requests per second'))
def create_invalid(context, max_requests):
    try:
        RateLimiter(max_requests=max_requests, time_window=1.0)
        context['error'] = None
    except ValueError as e:
        context['error'] = e


@then('the limiter should not have slept')
def check_no_sleep(fake_time):
    assert fake_time.sleeps == []


@then(parsers.parse('the limiter should have slept {seconds:g} seconds'))
def check_sleep(fake_time, seconds):
    assert fake_time.sleeps == [pytest.approx(seconds)]


@then('a value error should be raised')
def check_value_error(context):
    assert isinstance(context['error'], ValueError)
