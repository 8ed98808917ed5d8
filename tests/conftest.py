from datetime import datetime, timedelta, timezone

import pytest

from cargo_scanner.adapters.secondary.cache.price_cache import CacheResource, PriceCache
from cargo_scanner.configuration import container
from cargo_scanner.configuration.config import reset_config
from cargo_scanner.configuration.settings import settings


class FakeClock:
    """Controllable clock returning aware UTC datetimes"""

    def __init__(self, start: datetime = datetime(2954, 6, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def use_test_database(tmp_path, monkeypatch):
    """
    Point settings at an in-memory database and an isolated config file.
    Each test gets a fresh container.
    """
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("CARGO_SCANNER_DB_PATH", ":memory:")
    monkeypatch.setattr(settings, "db_path", ":memory:")

    from cargo_scanner.configuration import config as config_module
    monkeypatch.setattr(
        config_module,
        "_config",
        config_module.Config(config_path=tmp_path / "config.json")
    )

    container.reset_container()
    container.get_engine()

    yield

    container.reset_container()
    reset_config()


@pytest.fixture
def context():
    """Shared context for BDD steps"""
    return {}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def price_cache(clock, monkeypatch):
    """Price cache on the fake clock, installed in the container"""
    cache = PriceCache(
        {
            CacheResource.COMMODITIES: timedelta(hours=1),
            CacheResource.PRICES: timedelta(hours=1),
        },
        clock=clock
    )
    monkeypatch.setattr(container, "_price_cache", cache)
    return cache


@pytest.fixture
def mediator():
    return container.get_mediator()


def _cell(row, key):
    value = row.get(key, "")
    return value.strip() if value is not None else ""


@pytest.fixture
def points_from_table(clock):
    """
    Build PricePoints from a pytest-bdd datatable.

    Recognised columns: location, name, sell, buy, stock, buy_stock, demand,
    buy_demand, volatility, age_minutes, system, armistice. Blank cells fall back to PricePoint
    defaults; age_minutes is measured back from the fake clock.
    """
    from cargo_scanner.domain.shared.market import DemandLevel, PricePoint

    def build(datatable):
        header, *rows = datatable
        points = []
        for values in rows:
            row = dict(zip(header, values))
            age = _cell(row, "age_minutes")
            volatility = _cell(row, "volatility")
            stock = _cell(row, "stock")
            buy_stock = _cell(row, "buy_stock")
            sell = _cell(row, "sell")
            buy = _cell(row, "buy")
            demand = _cell(row, "demand")
            buy_demand = _cell(row, "buy_demand")
            points.append(PricePoint(
                location_id=_cell(row, "location"),
                observed_at=clock() - timedelta(minutes=float(age or 0)),
                sell_price_per_scu=float(sell) if sell else None,
                buy_price_per_scu=float(buy) if buy else None,
                stock_scu=float(stock) if stock else None,
                buy_stock_scu=float(buy_stock) if buy_stock else None,
                sell_demand=DemandLevel[demand.upper()] if demand else DemandLevel.NORMAL,
                buy_demand=DemandLevel[buy_demand.upper()] if buy_demand else DemandLevel.NORMAL,
                volatility=float(volatility) if volatility else None,
                location_name=_cell(row, "name"),
                system=_cell(row, "system") or "Stanton",
                armistice=_cell(row, "armistice").lower() in ("yes", "true")
            ))
        return points

    return build
