import logging
from dataclasses import dataclass
from typing import Collection

from ....adapters.secondary.cache.price_cache import PriceCache
from ....domain.ranking import BestPriceSummary, PenaltyConfig, rank_cargo
from ....mediator import Request, RequestHandler
from ....ports.outbound.cargo_repository import ICargoRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankBestPricesQuery(Request[BestPriceSummary]):
    """Query ranking sell locations for the held cargo set"""
    pass


class RankBestPricesHandler(RequestHandler[RankBestPricesQuery, BestPriceSummary]):
    """Handler for best-price ranking over a cache snapshot"""

    def __init__(
        self,
        cargo_repository: ICargoRepository,
        price_cache: PriceCache,
        penalty_config: PenaltyConfig,
        known_hotspots: Collection[str]
    ):
        self._cargo_repo = cargo_repository
        self._price_cache = price_cache
        self._penalty_config = penalty_config
        self._known_hotspots = tuple(known_hotspots)

    async def handle(self, request: RankBestPricesQuery) -> BestPriceSummary:
        manifest = self._cargo_repo.load_manifest()
        snapshot = self._price_cache.snapshot(manifest.commodity_ids)

        summary = rank_cargo(manifest.items, snapshot, self._known_hotspots, self._penalty_config)

        if summary.best_overall is None and not manifest.is_empty():
            logger.warning("No sell location found for any held commodity")
        return summary
