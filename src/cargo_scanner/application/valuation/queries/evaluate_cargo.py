import logging
from dataclasses import dataclass

from ....adapters.secondary.cache.price_cache import PriceCache
from ....domain.valuation import ConfidenceScorer, PortfolioEvaluation, evaluate_portfolio
from ....mediator import Request, RequestHandler
from ....ports.outbound.cargo_repository import ICargoRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluateCargoQuery(Request[PortfolioEvaluation]):
    """Query valuing the held cargo set against cached prices"""
    pass


class EvaluateCargoHandler(RequestHandler[EvaluateCargoQuery, PortfolioEvaluation]):
    """
    Handler for cargo valuation

    Reads a single cache snapshot for the held commodities, so every line
    of one evaluation sees the same data. Missing prices produce partial
    lines rather than errors.
    """

    def __init__(
        self,
        cargo_repository: ICargoRepository,
        price_cache: PriceCache,
        confidence_scorer: ConfidenceScorer
    ):
        self._cargo_repo = cargo_repository
        self._price_cache = price_cache
        self._scorer = confidence_scorer

    async def handle(self, request: EvaluateCargoQuery) -> PortfolioEvaluation:
        manifest = self._cargo_repo.load_manifest()
        snapshot = self._price_cache.snapshot(manifest.commodity_ids)

        evaluation = evaluate_portfolio(manifest.items, snapshot, self._scorer)

        if evaluation.is_partial:
            missing = ", ".join(item.commodity_id for item in evaluation.partial_items)
            logger.warning(f"No sell prices available for: {missing}")
        logger.info(
            f"Evaluated {len(evaluation.items)} cargo items: EV {evaluation.total_ev:.0f} aUEC, "
            f"confidence {evaluation.confidence:.2f}"
        )
        return evaluation
