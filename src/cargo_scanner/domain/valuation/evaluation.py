"""Expected-value evaluation of held cargo"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from ..shared.cargo import CargoItem
from ..shared.market import CommodityId, PricePoint, PriceSnapshot
from .confidence import ConfidenceScorer


@dataclass(frozen=True)
class CargoEvaluation:
    """
    Valuation of one cargo line.

    partial is True when no location currently buys the commodity; the line
    then carries ev=0.0, no price range and zero confidence but stays in the
    portfolio.
    """
    commodity_id: CommodityId
    quantity_scu: float
    ev: float
    min_price: Optional[float]
    max_price: Optional[float]
    confidence: float
    partial: bool = False

    @property
    def min_value(self) -> Optional[float]:
        """Lower bound of the line's value at the worst observed sell price"""
        return None if self.min_price is None else self.min_price * self.quantity_scu

    @property
    def max_value(self) -> Optional[float]:
        """Upper bound of the line's value at the best observed sell price"""
        return None if self.max_price is None else self.max_price * self.quantity_scu


@dataclass(frozen=True)
class PortfolioEvaluation:
    """Valuation of the whole cargo set"""
    items: tuple[CargoEvaluation, ...]
    total_ev: float
    confidence: float

    @property
    def partial_items(self) -> tuple[CargoEvaluation, ...]:
        return tuple(item for item in self.items if item.partial)

    @property
    def partial_count(self) -> int:
        return len(self.partial_items)

    @property
    def is_partial(self) -> bool:
        return any(item.partial for item in self.items)


def evaluate_item(
    item: CargoItem,
    price_points: Iterable[PricePoint],
    scorer: ConfidenceScorer,
    now: datetime
) -> CargoEvaluation:
    """
    Evaluate one cargo item against its price observations.

    EV is quantity x mean sell price across points where the sell side is
    available; points without a usable sell price are skipped.

    Args:
        item: Held cargo line
        price_points: All cached observations for the item's commodity
        scorer: Confidence scorer
        now: Evaluation instant

    Returns:
        CargoEvaluation (partial when nothing buys this commodity)
    """
    available = [point for point in price_points if point.is_sell_available()]

    if not available:
        return CargoEvaluation(
            commodity_id=item.commodity_id,
            quantity_scu=item.quantity_scu,
            ev=0.0,
            min_price=None,
            max_price=None,
            confidence=0.0,
            partial=True
        )

    prices = [point.sell_price_per_scu for point in available]
    mean_price = sum(prices) / len(prices)

    return CargoEvaluation(
        commodity_id=item.commodity_id,
        quantity_scu=item.quantity_scu,
        ev=item.quantity_scu * mean_price,
        min_price=min(prices),
        max_price=max(prices),
        confidence=scorer.score(available, now)
    )


def evaluate_portfolio(
    items: Iterable[CargoItem],
    snapshot: PriceSnapshot,
    scorer: ConfidenceScorer,
    now: Optional[datetime] = None
) -> PortfolioEvaluation:
    """
    Evaluate every cargo line against a cache snapshot.

    Total EV is the sum of line EVs. Portfolio confidence is the minimum line
    confidence so one poorly-priced line drags overall trust down; an empty
    cargo set has confidence 0.0.
    """
    now = now or snapshot.taken_at
    evaluations = tuple(
        evaluate_item(item, snapshot.points(item.commodity_id), scorer, now)
        for item in items
    )

    return PortfolioEvaluation(
        items=evaluations,
        total_ev=sum(evaluation.ev for evaluation in evaluations),
        confidence=min((evaluation.confidence for evaluation in evaluations), default=0.0)
    )
