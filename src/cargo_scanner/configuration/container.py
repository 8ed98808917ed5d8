"""
Dependency Injection Container.

Provides singleton instances and factory methods for:
- Database engine, cargo repository and price cache store
- Price cache and price feed client
- Domain services configured from settings
- Mediator with all handlers registered
"""
import logging
import os
from typing import Optional

from sqlalchemy.engine import Engine

from ..adapters.secondary.api.uex_client import UexPriceFeed
from ..adapters.secondary.cache.price_cache import CacheResource, PriceCache
from ..adapters.secondary.persistence.cargo_repository_sqlalchemy import CargoRepositorySQLAlchemy
from ..adapters.secondary.persistence.engine import create_engine_from_config
from ..adapters.secondary.persistence.models import metadata
from ..adapters.secondary.persistence.price_cache_repository_sqlalchemy import (
    PriceCacheRepositorySQLAlchemy
)
from ..application.cargo.commands.adjust_cargo import AdjustCargoCommand, AdjustCargoHandler
from ..application.cargo.commands.clear_cargo import ClearCargoCommand, ClearCargoHandler
from ..application.cargo.queries.list_cargo import ListCargoQuery, ListCargoHandler
from ..application.common.behaviors import LoggingBehavior, ValidationBehavior
from ..application.market.commands.clear_price_cache import (
    ClearPriceCacheCommand,
    ClearPriceCacheHandler
)
from ..application.market.commands.refresh_commodities import (
    RefreshCommoditiesCommand,
    RefreshCommoditiesHandler
)
from ..application.market.commands.refresh_prices import (
    RefreshPricesCommand,
    RefreshPricesHandler
)
from ..application.market.queries.get_cache_status import (
    GetCacheStatusQuery,
    GetCacheStatusHandler
)
from ..application.ranking.queries.rank_best_prices import (
    RankBestPricesQuery,
    RankBestPricesHandler
)
from ..application.routes.queries.find_trade_routes import (
    FindTradeRoutesQuery,
    FindTradeRoutesHandler
)
from ..application.valuation.commands.save_profitability_params import (
    SaveProfitabilityParamsCommand,
    SaveProfitabilityParamsHandler
)
from ..application.valuation.queries.evaluate_cargo import (
    EvaluateCargoQuery,
    EvaluateCargoHandler
)
from ..application.valuation.queries.get_profitability_params import (
    GetProfitabilityParamsQuery,
    GetProfitabilityParamsHandler
)
from ..application.valuation.queries.score_profitability import (
    ScoreProfitabilityQuery,
    ScoreProfitabilityHandler
)
from ..domain.ranking import PenaltyConfig
from ..domain.valuation import ConfidenceScorer
from ..mediator import Mediator
from ..ports.outbound.cargo_repository import ICargoRepository
from ..ports.outbound.price_cache_store import IPriceCacheStore
from ..ports.outbound.price_feed import IPriceFeed
from .config import get_config
from .settings import settings

logger = logging.getLogger(__name__)

# Singleton instances
_engine: Optional[Engine] = None
_cargo_repo: Optional[ICargoRepository] = None
_price_cache: Optional[PriceCache] = None
_price_cache_store: Optional[IPriceCacheStore] = None
_price_feed: Optional[IPriceFeed] = None
_mediator: Optional[Mediator] = None


def get_engine() -> Engine:
    """
    Get or create the database engine, creating tables on first use.

    Returns:
        Engine: Singleton SQLAlchemy engine
    """
    global _engine
    if _engine is None:
        _engine = create_engine_from_config(settings.db_path)
        metadata.create_all(_engine)
    return _engine


def get_cargo_repository() -> ICargoRepository:
    global _cargo_repo
    if _cargo_repo is None:
        _cargo_repo = CargoRepositorySQLAlchemy(get_engine())
    return _cargo_repo


def get_price_cache_store() -> IPriceCacheStore:
    global _price_cache_store
    if _price_cache_store is None:
        _price_cache_store = PriceCacheRepositorySQLAlchemy(get_engine())
    return _price_cache_store


def get_price_cache() -> PriceCache:
    """
    Get or create the process-wide price cache.

    On first use the cache is loaded from the store, so entries fetched by
    an earlier run are served with their original fetch time.

    Returns:
        PriceCache: Singleton cache with TTLs from settings
    """
    global _price_cache
    if _price_cache is None:
        cache = PriceCache({
            CacheResource.COMMODITIES: settings.commodities_ttl,
            CacheResource.PRICES: settings.prices_ttl,
        })
        store = get_price_cache_store()
        cache.restore(store.load_entries())
        commodities = store.load_commodities()
        if commodities is not None:
            cache.upsert_commodities(*commodities)
        _price_cache = cache
    return _price_cache


def get_price_feed() -> IPriceFeed:
    """
    Get or create the price feed client.

    The bearer token is read from UEX_API_TOKEN when set.
    """
    global _price_feed
    if _price_feed is None:
        _price_feed = UexPriceFeed(
            base_url=settings.feed_base_url,
            token=os.environ.get("UEX_API_TOKEN")
        )
    return _price_feed


def get_confidence_scorer() -> ConfidenceScorer:
    return ConfidenceScorer(
        ttl=settings.prices_ttl,
        volatility_ceiling=settings.volatility_ceiling
    )


def get_penalty_config() -> PenaltyConfig:
    return PenaltyConfig(
        cross_system=settings.cross_system_penalty,
        armistice=settings.armistice_penalty,
        hotspot=settings.hotspot_penalty,
        home_system=settings.home_system,
        top_n=settings.top_n
    )


def get_mediator() -> Mediator:
    """
    Get or create configured mediator with all handlers registered.

    Behaviors execute in order: Logging -> Validation -> Handler.
    The price feed is resolved lazily so commands that never touch the
    network never build an HTTP session.

    Returns:
        Mediator: Fully configured mediator instance
    """
    global _mediator
    if _mediator is None:
        _mediator = Mediator()

        _mediator.register_behavior(LoggingBehavior())
        _mediator.register_behavior(ValidationBehavior())

        # ===== Cargo =====
        _mediator.register_handler(
            AdjustCargoCommand,
            lambda: AdjustCargoHandler(get_cargo_repository())
        )
        _mediator.register_handler(
            ClearCargoCommand,
            lambda: ClearCargoHandler(get_cargo_repository())
        )
        _mediator.register_handler(
            ListCargoQuery,
            lambda: ListCargoHandler(get_cargo_repository())
        )

        # ===== Market =====
        _mediator.register_handler(
            RefreshPricesCommand,
            lambda: RefreshPricesHandler(
                get_price_feed(),
                get_price_cache(),
                get_price_cache_store()
            )
        )
        _mediator.register_handler(
            RefreshCommoditiesCommand,
            lambda: RefreshCommoditiesHandler(
                get_price_feed(),
                get_price_cache(),
                get_price_cache_store()
            )
        )
        _mediator.register_handler(
            ClearPriceCacheCommand,
            lambda: ClearPriceCacheHandler(get_price_cache(), get_price_cache_store())
        )
        _mediator.register_handler(
            GetCacheStatusQuery,
            lambda: GetCacheStatusHandler(get_price_cache())
        )

        # ===== Valuation =====
        _mediator.register_handler(
            EvaluateCargoQuery,
            lambda: EvaluateCargoHandler(
                get_cargo_repository(),
                get_price_cache(),
                get_confidence_scorer()
            )
        )
        _mediator.register_handler(
            ScoreProfitabilityQuery,
            lambda: ScoreProfitabilityHandler(
                get_cargo_repository(),
                lambda: get_config().profit_thresholds
            )
        )
        _mediator.register_handler(
            SaveProfitabilityParamsCommand,
            lambda: SaveProfitabilityParamsHandler(get_cargo_repository())
        )
        _mediator.register_handler(
            GetProfitabilityParamsQuery,
            lambda: GetProfitabilityParamsHandler(get_cargo_repository())
        )

        # ===== Ranking =====
        _mediator.register_handler(
            RankBestPricesQuery,
            lambda: RankBestPricesHandler(
                get_cargo_repository(),
                get_price_cache(),
                get_penalty_config(),
                settings.known_hotspots
            )
        )

        # ===== Routes =====
        _mediator.register_handler(
            FindTradeRoutesQuery,
            lambda: FindTradeRoutesHandler(get_price_cache())
        )

    return _mediator


def reset_container():
    """
    Reset all singleton instances.

    Useful for testing to ensure clean state between tests.
    """
    global _engine, _cargo_repo, _price_cache, _price_cache_store, _price_feed, _mediator

    # Dispose before dropping the reference so an in-memory database is released
    if _engine is not None:
        _engine.dispose()

    _engine = None
    _cargo_repo = None
    _price_cache = None
    _price_cache_store = None
    _price_feed = None
    _mediator = None
